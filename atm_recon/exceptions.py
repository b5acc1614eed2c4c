"""Custom exception hierarchy for atm-reconcile."""

from pathlib import Path


class ReconcileError(Exception):
    """Base exception for all atm-reconcile errors."""


class MalformedInputError(ReconcileError):
    """Raised when an input record cannot be turned into a transaction."""

    def __init__(
        self,
        message: str,
        source: str | Path | None = None,
        line_number: int | None = None,
    ) -> None:
        self.source = source
        self.line_number = line_number
        if source is not None and line_number is not None:
            message = f"{source}:{line_number}: {message}"
        elif source is not None:
            message = f"{source}: {message}"
        super().__init__(message)


class InvariantViolationError(ReconcileError):
    """Raised when a transaction reaches a state the matching loop never produces."""


class ConfigurationError(ReconcileError):
    """Raised when configuration is invalid or missing."""


class SinkError(ReconcileError):
    """Raised when a sink operation fails."""
