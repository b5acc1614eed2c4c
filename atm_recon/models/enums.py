"""Enumeration types for reconciliation entities."""

from enum import Enum


class TransactionKind(str, Enum):
    WITHDRAWAL = "WITHDRAWAL"
    PURCHASE = "PURCHASE"


class BlockedWithdrawalPolicy(str, Enum):
    """What the matching loop does when the newest withdrawal is not older
    than the newest purchase.

    - DISCARD: retire that withdrawal unmatched and keep matching
    - HALT: stop matching and drain the remaining purchases as leftovers
    """

    DISCARD = "DISCARD"
    HALT = "HALT"


class OutputFormat(str, Enum):
    CSV = "CSV"
    JSON = "JSON"
    CONSOLE = "CONSOLE"
