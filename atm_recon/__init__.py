"""Reconcile cash purchases against ATM withdrawals."""

__version__ = "0.1.0"
