"""
Error taxonomy shared by every stage of the pipeline.

Each error keeps the underlying exception in ``cause`` (also chained through
``__cause__`` when raised with ``from``) so callers can pick their own messaging.
"""


class MovieDownloaderError(Exception):
    """Base exception for all engine errors."""

    retryable = False

    def __init__(self, message: str = "", cause: Exception = None):
        super().__init__(message)
        self.cause = cause

    @property
    def kind(self) -> str:
        return type(self).__name__


class CatalogUnavailable(MovieDownloaderError):
    """Raised when the catalog search service cannot be reached or answers garbage."""

    retryable = True


class SelectionNotFound(MovieDownloaderError):
    """Raised when a season or episode number is not present in the catalog entry."""


class ContentNotAvailable(MovieDownloaderError):
    """Raised when identifiers are valid but no playable source exists (removed, geo-blocked)."""


class ServiceError(MovieDownloaderError):
    """Raised on transient network or service failures while resolving a manifest."""

    retryable = True


class TransferAborted(MovieDownloaderError):
    """Raised when a segment could not be fetched and the transfer was given up."""

    def __init__(self, message: str = "", cause: Exception = None, segment: int = None, attempts: int = 0):
        super().__init__(message, cause)
        self.segment = segment
        self.attempts = attempts


class SinkUnwritable(MovieDownloaderError):
    """Raised when the destination cannot be written. ``cause`` is the OSError."""


class Cancelled(MovieDownloaderError):
    """Raised when the caller requested cancellation of an in-flight operation."""
