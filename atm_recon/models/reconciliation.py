"""Reconciliation record model."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Reconciliation:
    """A settlement of a cash purchase against an ATM withdrawal.

    A record without a parent is a leftover: the part of a purchase no
    withdrawal was available to explain.
    """

    cash_id: int
    cash_name: str
    parent_id: int | None  # Withdrawal that funded the settlement
    settled_amount: Decimal

    @property
    def is_leftover(self) -> bool:
        return self.parent_id is None
