"""Tests for the matching loop."""

import random
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal, localcontext

import pytest

from atm_recon.exceptions import InvariantViolationError
from atm_recon.models import BlockedWithdrawalPolicy, ReconcilableTransaction, Reconciliation
from atm_recon.ordering import chronological_key
from atm_recon.reconciler import Reconciler, reconcile_transactions, settle
from atm_recon.store import ChronologicalStacks


def _as_tuples(records: list[Reconciliation]) -> list[tuple]:
    return [(r.cash_id, r.cash_name, r.parent_id, r.settled_amount) for r in records]


def _random_batch(rng: random.Random, size: int) -> list[ReconcilableTransaction]:
    """Mixed batch with cent amounts and frequent same-day transactions."""
    start = date(2023, 1, 1)
    ids = rng.sample(range(1, size * 10), size)
    transactions = []
    for transaction_id in ids:
        on = start + timedelta(days=rng.randint(0, size // 3))
        amount = Decimal(rng.randint(1, 50000)) / 100
        if rng.random() < 0.35:
            transactions.append(ReconcilableTransaction.withdrawal(transaction_id, f"W{transaction_id}", amount, on))
        else:
            transactions.append(ReconcilableTransaction.purchase(transaction_id, f"C{transaction_id}", amount, on))
    return transactions


class TestSettle:
    """Tests for a single settlement event."""

    def test_purchase_smaller_than_withdrawal(self) -> None:
        purchase = ReconcilableTransaction.purchase(2, "C1", Decimal("40"), date(2020, 1, 2))
        withdrawal = ReconcilableTransaction.withdrawal(1, "W1", Decimal("100"), date(2020, 1, 1))

        record = settle(purchase, withdrawal)

        assert _as_tuples([record]) == [(2, "C1", 1, Decimal("40"))]
        assert purchase.amount == 0
        assert withdrawal.amount == Decimal("60")

    def test_purchase_larger_than_withdrawal(self) -> None:
        purchase = ReconcilableTransaction.purchase(2, "C1", Decimal("140.55"), date(2020, 1, 2))
        withdrawal = ReconcilableTransaction.withdrawal(1, "W1", Decimal("100"), date(2020, 1, 1))

        record = settle(purchase, withdrawal)

        assert record.settled_amount == Decimal("100")
        assert purchase.amount == Decimal("40.55")
        assert withdrawal.is_exhausted

    def test_equal_amounts_exhaust_both(self) -> None:
        purchase = ReconcilableTransaction.purchase(2, "C1", Decimal("25"), date(2020, 1, 2))
        withdrawal = ReconcilableTransaction.withdrawal(1, "W1", Decimal("25"), date(2020, 1, 1))

        settle(purchase, withdrawal)

        assert purchase.is_exhausted
        assert withdrawal.is_exhausted

    def test_record_keeps_amount_at_settlement(self) -> None:
        """Test later consumption does not change an emitted record."""
        purchase = ReconcilableTransaction.purchase(2, "C1", Decimal("100"), date(2020, 1, 3))
        first = ReconcilableTransaction.withdrawal(1, "W1", Decimal("30"), date(2020, 1, 2))
        second = ReconcilableTransaction.withdrawal(0, "W0", Decimal("50"), date(2020, 1, 1))

        record = settle(purchase, first)
        settle(purchase, second)

        assert record.settled_amount == Decimal("30")
        assert purchase.amount == Decimal("20")

    def test_exhausted_purchase_rejected(self) -> None:
        purchase = ReconcilableTransaction.purchase(2, "C1", Decimal("0"), date(2020, 1, 2))
        withdrawal = ReconcilableTransaction.withdrawal(1, "W1", Decimal("10"), date(2020, 1, 1))

        with pytest.raises(InvariantViolationError):
            settle(purchase, withdrawal)

    def test_negative_withdrawal_rejected(self) -> None:
        purchase = ReconcilableTransaction.purchase(2, "C1", Decimal("10"), date(2020, 1, 2))
        withdrawal = ReconcilableTransaction.withdrawal(1, "W1", Decimal("-5"), date(2020, 1, 1))

        with pytest.raises(InvariantViolationError):
            settle(purchase, withdrawal)

    def test_wrong_kinds_rejected(self) -> None:
        a = ReconcilableTransaction.purchase(2, "C1", Decimal("10"), date(2020, 1, 2))
        b = ReconcilableTransaction.purchase(1, "C0", Decimal("10"), date(2020, 1, 1))

        with pytest.raises(InvariantViolationError):
            settle(a, b)


class TestReconcilerScenarios:
    """End-to-end matching scenarios."""

    def test_split_across_withdrawal_and_leftover(
        self, scenario_transactions: list[ReconcilableTransaction]
    ) -> None:
        """Test the newest purchase is settled first and the remainder carried."""
        records = reconcile_transactions(scenario_transactions)

        assert _as_tuples(records) == [
            (3, "C2", 1, Decimal("70")),
            (2, "C1", 1, Decimal("30")),
            (2, "C1", None, Decimal("10")),
        ]

    def test_blocked_withdrawal_is_discarded(self) -> None:
        """Test a withdrawal newer than every purchase funds nothing."""
        transactions = [
            ReconcilableTransaction.withdrawal(1, "W1", Decimal("100"), date(2020, 2, 1)),
            ReconcilableTransaction.purchase(2, "C1", Decimal("50"), date(2020, 1, 1)),
        ]
        reconciler = Reconciler()

        records = reconciler.reconcile(ChronologicalStacks.from_transactions(transactions))

        assert _as_tuples(records) == [(2, "C1", None, Decimal("50"))]
        assert reconciler.last_stats.discarded_withdrawals == 1

    def test_discard_continues_with_older_withdrawal(self) -> None:
        transactions = [
            ReconcilableTransaction.withdrawal(1, "W1", Decimal("100"), date(2020, 1, 1)),
            ReconcilableTransaction.purchase(2, "C1", Decimal("30"), date(2020, 1, 2)),
            ReconcilableTransaction.withdrawal(3, "W2", Decimal("50"), date(2020, 1, 3)),
        ]

        records = reconcile_transactions(transactions, BlockedWithdrawalPolicy.DISCARD)

        assert _as_tuples(records) == [(2, "C1", 1, Decimal("30"))]

    def test_halt_stops_at_first_blocked_withdrawal(self) -> None:
        transactions = [
            ReconcilableTransaction.withdrawal(1, "W1", Decimal("100"), date(2020, 1, 1)),
            ReconcilableTransaction.purchase(2, "C1", Decimal("30"), date(2020, 1, 2)),
            ReconcilableTransaction.withdrawal(3, "W2", Decimal("50"), date(2020, 1, 3)),
        ]
        reconciler = Reconciler(BlockedWithdrawalPolicy.HALT)

        records = reconciler.reconcile(ChronologicalStacks.from_transactions(transactions))

        assert _as_tuples(records) == [(2, "C1", None, Decimal("30"))]
        assert reconciler.last_stats.halted is True
        assert reconciler.last_stats.discarded_withdrawals == 0

    def test_policy_accepts_string(self) -> None:
        assert Reconciler("HALT").policy == BlockedWithdrawalPolicy.HALT

    def test_same_day_withdrawal_with_lower_id_funds_purchase(self) -> None:
        transactions = [
            ReconcilableTransaction.withdrawal(1, "W1", Decimal("20"), date(2020, 1, 1)),
            ReconcilableTransaction.purchase(2, "C1", Decimal("20"), date(2020, 1, 1)),
        ]

        records = reconcile_transactions(transactions)

        assert _as_tuples(records) == [(2, "C1", 1, Decimal("20"))]

    def test_same_day_withdrawal_with_higher_id_is_blocked(self) -> None:
        transactions = [
            ReconcilableTransaction.withdrawal(5, "W5", Decimal("20"), date(2020, 1, 1)),
            ReconcilableTransaction.purchase(2, "C1", Decimal("20"), date(2020, 1, 1)),
        ]

        records = reconcile_transactions(transactions)

        assert _as_tuples(records) == [(2, "C1", None, Decimal("20"))]

    def test_one_purchase_funded_by_several_withdrawals(self) -> None:
        transactions = [
            ReconcilableTransaction.withdrawal(1, "W1", Decimal("20"), date(2020, 1, 1)),
            ReconcilableTransaction.withdrawal(2, "W2", Decimal("20"), date(2020, 1, 2)),
            ReconcilableTransaction.withdrawal(3, "W3", Decimal("20"), date(2020, 1, 3)),
            ReconcilableTransaction.purchase(4, "C1", Decimal("50"), date(2020, 1, 4)),
        ]

        records = reconcile_transactions(transactions)

        assert _as_tuples(records) == [
            (4, "C1", 3, Decimal("20")),
            (4, "C1", 2, Decimal("20")),
            (4, "C1", 1, Decimal("10")),
        ]

    def test_no_withdrawals(self) -> None:
        transactions = [
            ReconcilableTransaction.purchase(1, "C1", Decimal("5"), date(2020, 1, 1)),
            ReconcilableTransaction.purchase(2, "C2", Decimal("6"), date(2020, 1, 2)),
        ]

        records = reconcile_transactions(transactions)

        assert _as_tuples(records) == [
            (2, "C2", None, Decimal("6")),
            (1, "C1", None, Decimal("5")),
        ]

    def test_no_purchases(self) -> None:
        transactions = [
            ReconcilableTransaction.withdrawal(1, "W1", Decimal("5"), date(2020, 1, 1)),
        ]

        assert reconcile_transactions(transactions) == []

    def test_empty_batch(self) -> None:
        assert reconcile_transactions([]) == []

    def test_exhausted_records_yield_nothing(self) -> None:
        """Test a stack pair whose amounts are all zero produces no records."""
        transactions = [
            ReconcilableTransaction.withdrawal(1, "W1", Decimal("0"), date(2020, 1, 1)),
            ReconcilableTransaction.purchase(2, "C1", Decimal("0"), date(2020, 1, 2)),
            ReconcilableTransaction.purchase(3, "C2", Decimal("0"), date(2020, 1, 3)),
        ]

        assert reconcile_transactions(transactions) == []

    def test_negative_leftover_rejected(self) -> None:
        transactions = [
            ReconcilableTransaction.purchase(1, "C1", Decimal("-1"), date(2020, 1, 1)),
        ]

        with pytest.raises(InvariantViolationError):
            reconcile_transactions(transactions)

    def test_amounts_beyond_default_precision_stay_exact(self) -> None:
        """Test no digit is rounded away from a purchase wider than 28 digits."""
        amount = Decimal("10000000000.000000000000000000001")
        transactions = [
            ReconcilableTransaction.withdrawal(1, "W1", Decimal("1"), date(2020, 1, 1)),
            ReconcilableTransaction.purchase(2, "C1", amount, date(2020, 1, 2)),
        ]
        reconciler = Reconciler()

        records = reconciler.reconcile(ChronologicalStacks.from_transactions(transactions))

        assert _as_tuples(records) == [
            (2, "C1", 1, Decimal("1")),
            (2, "C1", None, Decimal("9999999999.000000000000000000001")),
        ]
        assert reconciler.last_stats.leftover_total == Decimal("9999999999.000000000000000000001")
        with localcontext() as ctx:
            ctx.prec = 50
            assert sum(r.settled_amount for r in records) == amount

    def test_stats(self, scenario_transactions: list[ReconcilableTransaction]) -> None:
        reconciler = Reconciler()

        reconciler.reconcile(ChronologicalStacks.from_transactions(scenario_transactions))

        stats = reconciler.last_stats
        assert stats.settlements == 2
        assert stats.leftovers == 1
        assert stats.discarded_withdrawals == 0
        assert stats.settled_total == Decimal("100")
        assert stats.leftover_total == Decimal("10")
        assert stats.halted is False

    def test_stacks_are_drained(self, scenario_transactions: list[ReconcilableTransaction]) -> None:
        stacks = ChronologicalStacks.from_transactions(scenario_transactions)

        Reconciler().reconcile(stacks)

        assert not stacks.has_purchases
        assert not stacks.has_withdrawals


class TestReconcilerProperties:
    """Invariants checked over random batches."""

    @pytest.mark.parametrize("batch_seed", range(20))
    @pytest.mark.parametrize("policy", list(BlockedWithdrawalPolicy))
    def test_invariants(self, batch_seed: int, policy: BlockedWithdrawalPolicy) -> None:
        rng = random.Random(batch_seed)
        transactions = _random_batch(rng, size=40)
        originals = {tx.transaction_id: tx.amount for tx in transactions}
        by_id = {tx.transaction_id: tx for tx in transactions}

        records = reconcile_transactions(transactions, policy)

        # Conservation: every purchase is fully accounted for, decimal-exact
        settled: dict[int, Decimal] = defaultdict(Decimal)
        for record in records:
            settled[record.cash_id] += record.settled_amount
        purchases = [tx for tx in transactions if tx.is_purchase]
        assert set(settled) == {tx.transaction_id for tx in purchases}
        for tx in purchases:
            assert settled[tx.transaction_id] == originals[tx.transaction_id]

        # Withdrawals never fund more than they held
        funded: dict[int, Decimal] = defaultdict(Decimal)
        for record in records:
            assert record.settled_amount > 0
            assert record.settled_amount <= originals[record.cash_id]
            if record.parent_id is not None:
                parent = by_id[record.parent_id]
                assert parent.is_withdrawal
                assert record.settled_amount <= originals[record.parent_id]
                assert chronological_key(parent) < chronological_key(by_id[record.cash_id])
                funded[record.parent_id] += record.settled_amount
        for withdrawal_id, total in funded.items():
            assert total <= originals[withdrawal_id]
            assert by_id[withdrawal_id].amount == originals[withdrawal_id] - total

        # Settlements come first, leftovers after, newest purchase first
        leftovers = [r for r in records if r.is_leftover]
        assert records[len(records) - len(leftovers):] == leftovers
        keys = [chronological_key(by_id[r.cash_id]) for r in leftovers]
        assert keys == sorted(keys, reverse=True)

        # Amounts only ever went down
        for tx in transactions:
            assert 0 <= tx.amount <= originals[tx.transaction_id]
