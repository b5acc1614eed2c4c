"""Greedy matching of cash purchases against ATM withdrawals."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from atm_recon.amounts import add
from atm_recon.exceptions import InvariantViolationError
from atm_recon.models import (
    BlockedWithdrawalPolicy,
    ReconcilableTransaction,
    Reconciliation,
)
from atm_recon.ordering import is_more_recent
from atm_recon.store.stacks import ChronologicalStacks

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationStats:
    """Counters collected over one reconciliation run."""

    settlements: int = 0
    leftovers: int = 0
    discarded_withdrawals: int = 0
    settled_total: Decimal = Decimal("0")
    leftover_total: Decimal = Decimal("0")
    halted: bool = False


def settle(
    purchase: ReconcilableTransaction,
    withdrawal: ReconcilableTransaction,
) -> Reconciliation:
    """Explain as much of a purchase as a withdrawal can cover.

    Both transactions are reduced by the matched amount, so at least one of
    them is exhausted afterwards.

    Parameters
    ----------
    purchase : ReconcilableTransaction
        Cash purchase with a positive remaining amount.
    withdrawal : ReconcilableTransaction
        ATM withdrawal with a positive remaining amount.

    Returns
    -------
    Reconciliation
        Record of the settled amount, captured at the time of settlement.

    Raises
    ------
    InvariantViolationError
        If either transaction has the wrong kind or nothing left to settle.
    """
    if not purchase.is_purchase or not withdrawal.is_withdrawal:
        raise InvariantViolationError(
            f"Cannot settle {purchase.kind.value} {purchase.transaction_id} "
            f"against {withdrawal.kind.value} {withdrawal.transaction_id}"
        )
    for tx in (purchase, withdrawal):
        if tx.amount <= 0:
            raise InvariantViolationError(
                f"Transaction {tx.transaction_id} reached settlement with amount {tx.amount}"
            )

    matched = min(purchase.amount, withdrawal.amount)
    withdrawal.consume(matched)
    purchase.consume(matched)

    return Reconciliation(
        cash_id=purchase.transaction_id,
        cash_name=purchase.name,
        parent_id=withdrawal.transaction_id,
        settled_amount=matched,
    )


class Reconciler:
    """Drain a pair of chronological stacks into reconciliation records.

    The newest purchase is always matched against the newest withdrawal that
    precedes it. A purchase too large for one withdrawal carries its
    remainder on to the next older withdrawal; a withdrawal with cash left
    over funds the next older purchase. Whatever purchases remain once the
    withdrawals run out are reported as leftovers without a parent.

    Parameters
    ----------
    policy : BlockedWithdrawalPolicy
        Behaviour when the newest withdrawal is not older than the newest
        purchase.
    """

    def __init__(self, policy: BlockedWithdrawalPolicy = BlockedWithdrawalPolicy.DISCARD) -> None:
        self.policy = BlockedWithdrawalPolicy(policy)
        self.last_stats = ReconciliationStats()

    def reconcile(self, stacks: ChronologicalStacks) -> list[Reconciliation]:
        """Run the matching loop, then drain unmatched purchases.

        The stacks and the amounts of the transactions on them are consumed
        in place.

        Returns
        -------
        list[Reconciliation]
            Settlements in processing order, followed by leftovers from the
            newest remaining purchase to the oldest.
        """
        stats = ReconciliationStats()
        reconciliations: list[Reconciliation] = []

        while stacks.has_withdrawals and stacks.has_purchases:
            if self._drop_exhausted(stacks):
                continue

            purchase = stacks.peek_purchase()
            withdrawal = stacks.peek_withdrawal()

            if not is_more_recent(purchase, withdrawal):
                logger.debug(
                    "Withdrawal %d (%s) is not older than purchase %d (%s)",
                    withdrawal.transaction_id,
                    withdrawal.date,
                    purchase.transaction_id,
                    purchase.date,
                )
                if self.policy == BlockedWithdrawalPolicy.HALT:
                    stats.halted = True
                    break
                stacks.pop_withdrawal()
                stats.discarded_withdrawals += 1
                continue

            reconciliation = settle(purchase, withdrawal)
            if purchase.is_exhausted:
                stacks.pop_purchase()
            if withdrawal.is_exhausted:
                stacks.pop_withdrawal()

            reconciliations.append(reconciliation)
            stats.settlements += 1
            stats.settled_total = add(stats.settled_total, reconciliation.settled_amount)

        while stacks.has_purchases:
            purchase = stacks.pop_purchase()
            if purchase.is_exhausted:
                continue
            if purchase.amount < 0:
                raise InvariantViolationError(
                    f"Transaction {purchase.transaction_id} has negative amount {purchase.amount}"
                )
            reconciliations.append(
                Reconciliation(
                    cash_id=purchase.transaction_id,
                    cash_name=purchase.name,
                    parent_id=None,
                    settled_amount=purchase.amount,
                )
            )
            stats.leftovers += 1
            stats.leftover_total = add(stats.leftover_total, purchase.amount)

        self.last_stats = stats
        logger.info(
            "Reconciled %d settlements (%s) and %d leftovers (%s); %d withdrawals discarded%s",
            stats.settlements,
            stats.settled_total,
            stats.leftovers,
            stats.leftover_total,
            stats.discarded_withdrawals,
            ", halted early" if stats.halted else "",
        )
        return reconciliations

    @staticmethod
    def _drop_exhausted(stacks: ChronologicalStacks) -> bool:
        """Pop a fully reconciled transaction off either stack top."""
        if stacks.peek_purchase().is_exhausted:
            stacks.pop_purchase()
            return True
        if stacks.peek_withdrawal().is_exhausted:
            stacks.pop_withdrawal()
            return True
        return False


def reconcile_transactions(
    transactions: Iterable[ReconcilableTransaction],
    policy: BlockedWithdrawalPolicy = BlockedWithdrawalPolicy.DISCARD,
) -> list[Reconciliation]:
    """Sort, stack and reconcile a batch of transactions.

    Parameters
    ----------
    transactions : Iterable[ReconcilableTransaction]
        Withdrawals and purchases of one account, in any order.
    policy : BlockedWithdrawalPolicy
        Behaviour when a withdrawal blocks the newest purchase.

    Returns
    -------
    list[Reconciliation]
        Reconciliation records in the order they were produced.
    """
    stacks = ChronologicalStacks.from_transactions(transactions)
    return Reconciler(policy).reconcile(stacks)
