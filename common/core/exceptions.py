from typing import Optional


class AppException(Exception):
    """Base application exception."""

    pass


class NotFoundError(AppException):
    """Resource not found exception."""

    pass


class ValidationError(AppException):
    """Validation error exception."""

    pass


class StorageError(AppException):
    """Storage operation error exception."""

    pass


class ProcessingError(AppException):
    """Processing error exception."""

    pass


class InsufficientCreditsError(AppException):
    """Raised when a reservation would take a balance below zero."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient credits: {required} required, {available} available"
        )


class CreditLedgerBusyError(AppException):
    """The per-user ledger lock could not be acquired in time."""

    pass


class ProviderError(AppException):
    """An external capability call failed, timed out or returned garbage."""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.provider = provider
        super().__init__(message)


class PersistenceError(AppException):
    """The finished entity could not be written."""

    pass


class EnqueueError(AppException):
    """The downstream asset job could not be queued."""

    pass
