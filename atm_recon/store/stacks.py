"""Per-kind transaction stacks ordered by recency."""

from dataclasses import dataclass, field
from typing import Iterable

from atm_recon.exceptions import InvariantViolationError
from atm_recon.models.enums import TransactionKind
from atm_recon.models.transaction import ReconcilableTransaction
from atm_recon.ordering import sort_chronologically


@dataclass
class ChronologicalStacks:
    """Withdrawals and purchases held in two independent LIFO stacks.

    When populated through :meth:`from_transactions` the top of each stack is
    the most recent transaction of that kind and the bottom the oldest.
    The stacks belong to a single reconciliation run and are not shared.
    """

    withdrawals: list[ReconcilableTransaction] = field(default_factory=list)
    purchases: list[ReconcilableTransaction] = field(default_factory=list)

    @classmethod
    def from_transactions(
        cls, transactions: Iterable[ReconcilableTransaction]
    ) -> "ChronologicalStacks":
        """Sort transactions and push each one onto the stack of its kind.

        Parameters
        ----------
        transactions : Iterable[ReconcilableTransaction]
            Mixed withdrawals and purchases in any order.

        Returns
        -------
        ChronologicalStacks
            Stacks with the newest transaction of each kind on top.
        """
        stacks = cls()
        for tx in sort_chronologically(transactions):
            stacks.push(tx)
        return stacks

    def push(self, tx: ReconcilableTransaction) -> None:
        """Push a transaction onto the stack matching its kind."""
        if tx.kind == TransactionKind.WITHDRAWAL:
            self.withdrawals.append(tx)
        elif tx.kind == TransactionKind.PURCHASE:
            self.purchases.append(tx)
        else:
            raise InvariantViolationError(
                f"Transaction {tx.transaction_id} has unknown kind {tx.kind!r}"
            )

    @property
    def has_withdrawals(self) -> bool:
        return bool(self.withdrawals)

    @property
    def has_purchases(self) -> bool:
        return bool(self.purchases)

    def peek_withdrawal(self) -> ReconcilableTransaction:
        """Return the most recent withdrawal without removing it."""
        return self.withdrawals[-1]

    def peek_purchase(self) -> ReconcilableTransaction:
        """Return the most recent purchase without removing it."""
        return self.purchases[-1]

    def pop_withdrawal(self) -> ReconcilableTransaction:
        return self.withdrawals.pop()

    def pop_purchase(self) -> ReconcilableTransaction:
        return self.purchases.pop()

    def summary(self) -> dict[str, int]:
        """Return counts of transactions still on each stack."""
        return {
            "withdrawals": len(self.withdrawals),
            "purchases": len(self.purchases),
        }
