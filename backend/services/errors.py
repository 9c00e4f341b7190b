"""Application errors raised by the transaction services.

Every error carries a human readable message and an HTTP-style status code
so the API layer can render it without knowing which rule failed.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(AppError):
    """Request data is invalid (bad type, bad id, bad value)."""


class InsufficientFundsError(AppError):
    """Outcome would leave the balance below zero."""


class NotFoundError(AppError):
    """Target transaction does not exist."""


class DataFormatError(AppError):
    """Imported file could not be parsed."""
