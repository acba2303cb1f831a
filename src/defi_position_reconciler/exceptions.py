"""Exceptions raised by the reconciler."""


class ReconcilerError(Exception):
    """Base exception for all reconciler errors."""


class ConfigurationError(ReconcilerError):
    """Exception raised when a mapping table or allow-list is invalid."""


class ReconciliationError(ReconcilerError):
    """Exception raised when a reconciliation pass cannot start."""
