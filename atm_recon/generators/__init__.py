"""Sample data generators."""

from atm_recon.generators.transaction import TransactionGenerator

__all__ = ["TransactionGenerator"]
