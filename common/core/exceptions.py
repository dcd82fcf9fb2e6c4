from typing import Optional


class AppException(Exception):
    """Base application exception."""

    pass


class NotFoundError(AppException):
    """Resource not found exception."""

    pass


class ValidationError(AppException):
    """Validation error exception.

    Carries every violation found so callers can report them together.
    """

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class ConfigurationError(AppException):
    """A pricing or meter configuration cannot be billed as defined."""

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class DuplicateUsageEventError(AppException):
    """A usage event with the same idempotency key was already recorded."""

    def __init__(self, idempotency_key: str):
        super().__init__(f"Usage event already recorded for key {idempotency_key}")
        self.idempotency_key = idempotency_key
