"""Domain models for reconciliation."""

from atm_recon.models.enums import BlockedWithdrawalPolicy, OutputFormat, TransactionKind
from atm_recon.models.reconciliation import Reconciliation
from atm_recon.models.transaction import ReconcilableTransaction

__all__ = [
    "BlockedWithdrawalPolicy",
    "OutputFormat",
    "ReconcilableTransaction",
    "Reconciliation",
    "TransactionKind",
]
