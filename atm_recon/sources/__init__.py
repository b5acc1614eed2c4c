"""Input sources for transaction batches."""

from atm_recon.sources.csv_file import parse_line, read_transactions, write_transactions

__all__ = ["parse_line", "read_transactions", "write_transactions"]
