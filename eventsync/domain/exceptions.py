"""Custom exception hierarchy for the event sync layer.

Following error taxonomy: retryable, non-retryable, validation.
"""


class EventSyncError(Exception):
    """Base exception for all application errors."""

    pass


class RetryableError(EventSyncError):
    """Errors that can be retried (network issues, temporary failures)."""

    pass


class NonRetryableError(EventSyncError):
    """Errors that should not be retried (validation, logic errors)."""

    pass


class ValidationError(NonRetryableError, ValueError):
    """Data validation errors (bad input that retrying cannot fix)."""

    pass


class StorageError(RetryableError):
    """Client-side key-value storage errors."""

    pass


class DataProviderError(RetryableError):
    """REST data provider communication errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize with optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)
