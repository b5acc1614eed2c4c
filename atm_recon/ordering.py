"""Chronological ordering of transactions.

Transactions are ordered by date, oldest first, with the transaction id
breaking ties between transactions on the same day. Ids are unique within a
batch, so two distinct transactions never compare equal.
"""

from datetime import date
from typing import Iterable

from atm_recon.models.transaction import ReconcilableTransaction


def chronological_key(tx: ReconcilableTransaction) -> tuple[date, int]:
    """Sort key placing older transactions first."""
    return (tx.date, tx.transaction_id)


def compare(a: ReconcilableTransaction, b: ReconcilableTransaction) -> int:
    """Three-way comparison: negative if ``a`` is older, positive if newer."""
    key_a = chronological_key(a)
    key_b = chronological_key(b)
    if key_a == key_b:
        return 0
    return 1 if key_a > key_b else -1


def is_more_recent(a: ReconcilableTransaction, b: ReconcilableTransaction) -> bool:
    """True when ``a`` comes strictly after ``b``."""
    return compare(a, b) > 0


def sort_chronologically(
    transactions: Iterable[ReconcilableTransaction],
) -> list[ReconcilableTransaction]:
    """Return a new list of the transactions, oldest first."""
    return sorted(transactions, key=chronological_key)
