"""Transaction model for cash purchases and ATM withdrawals."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from atm_recon.amounts import subtract
from atm_recon.exceptions import InvariantViolationError
from atm_recon.models.enums import TransactionKind

_IMMUTABLE_FIELDS = frozenset({"transaction_id", "name", "date", "kind"})


@dataclass(eq=False)
class ReconcilableTransaction:
    """One cash purchase or ATM withdrawal awaiting reconciliation.

    ``amount`` holds the remaining unreconciled amount. It starts at the
    transaction's original value and only goes down, one settlement at a
    time, until the transaction is exhausted at zero. Every other field is
    fixed once the object has been constructed.
    """

    transaction_id: int
    name: str
    date: date
    kind: TransactionKind
    amount: Decimal

    def __setattr__(self, key: str, value: Any) -> None:
        if key in _IMMUTABLE_FIELDS and key in self.__dict__:
            raise InvariantViolationError(
                f"Transaction {self.__dict__['transaction_id']}: {key} is immutable"
            )
        super().__setattr__(key, value)

    @classmethod
    def withdrawal(
        cls, transaction_id: int, name: str, amount: Decimal, on: date
    ) -> "ReconcilableTransaction":
        """Create an ATM withdrawal."""
        return cls(transaction_id, name, on, TransactionKind.WITHDRAWAL, Decimal(amount))

    @classmethod
    def purchase(
        cls, transaction_id: int, name: str, amount: Decimal, on: date
    ) -> "ReconcilableTransaction":
        """Create a cash purchase."""
        return cls(transaction_id, name, on, TransactionKind.PURCHASE, Decimal(amount))

    @property
    def is_withdrawal(self) -> bool:
        return self.kind == TransactionKind.WITHDRAWAL

    @property
    def is_purchase(self) -> bool:
        return self.kind == TransactionKind.PURCHASE

    @property
    def is_exhausted(self) -> bool:
        """True once nothing remains to reconcile."""
        return self.amount == 0

    def consume(self, value: Decimal) -> None:
        """Deduct a settled amount from the remaining amount.

        Parameters
        ----------
        value : Decimal
            Amount settled against this transaction. Must be positive and no
            larger than what remains.

        Raises
        ------
        InvariantViolationError
            If ``value`` would leave the amount negative or unchanged.
        """
        if value <= 0:
            raise InvariantViolationError(
                f"Transaction {self.transaction_id}: cannot consume non-positive amount {value}"
            )
        if value > self.amount:
            raise InvariantViolationError(
                f"Transaction {self.transaction_id}: cannot consume {value}, "
                f"only {self.amount} remains"
            )
        self.amount = subtract(self.amount, value)
