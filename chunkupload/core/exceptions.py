"""
Custom exceptions for chunked upload operations.

Every failure in the upload pipeline is classified into an ErrorKind at the
point where it occurs and travels upward inside one of these exceptions.
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Closed taxonomy of upload failures."""

    READ_ERROR = 'read_error'
    QUOTA_EXCEEDED = 'quota_exceeded'
    PAYLOAD_TOO_LARGE = 'payload_too_large'
    RATE_LIMITED = 'rate_limited'
    CLIENT_ERROR = 'client_error'
    SERVER_ERROR = 'server_error'
    NETWORK_ERROR = 'network_error'
    CANCELLED = 'cancelled'
    UNKNOWN = 'unknown'

    @property
    def retryable(self) -> bool:
        """True for transient kinds that a backoff retry may resolve."""
        return self in (
            ErrorKind.RATE_LIMITED,
            ErrorKind.SERVER_ERROR,
            ErrorKind.NETWORK_ERROR,
        )


class UploadException(Exception):
    """Base exception for all upload-related errors."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        status: Optional[int] = None,
        detail: Optional[str] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Short human-readable message, safe to show to users
            kind: Classified error kind
            status: HTTP status code (if a response was received)
            detail: Raw transport or server detail, for logs only
        """
        self.message = message
        self.kind = kind
        self.status = status
        self.detail = detail
        super().__init__(message)

    @classmethod
    def from_error(cls, error: 'UploadException', **kwargs) -> 'UploadException':
        """Re-wrap a classified error as a more specific exception type."""
        return cls(
            error.message,
            kind=error.kind,
            status=error.status,
            detail=error.detail,
            **kwargs
        )


class ReadError(UploadException):
    """Exception raised when the local file cannot be read."""

    def __init__(
        self,
        message: str = 'Failed to read file. Please try again',
        kind: ErrorKind = ErrorKind.READ_ERROR,
        status: Optional[int] = None,
        detail: Optional[str] = None
    ) -> None:
        super().__init__(message, kind, status, detail)


class ApiRequestError(UploadException):
    """Exception raised for failed requests against the upload API."""
    pass


class NegotiationError(ApiRequestError):
    """Exception raised when an upload session cannot be created."""
    pass


class TransmitError(ApiRequestError):
    """Exception raised when a chunk is rejected or cannot be delivered."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        status: Optional[int] = None,
        detail: Optional[str] = None,
        chunk_index: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Short human-readable message
            kind: Classified error kind
            status: HTTP status code (if available)
            detail: Raw transport or server detail
            chunk_index: 1-based index of the failed chunk
        """
        self.chunk_index = chunk_index
        super().__init__(message, kind, status, detail)


class CompletionError(ApiRequestError):
    """Exception raised when the server does not confirm completion."""
    pass


class UploadCancelledError(UploadException):
    """Exception raised when an upload is cancelled through its token."""

    def __init__(
        self,
        message: str = 'Upload cancelled',
        kind: ErrorKind = ErrorKind.CANCELLED,
        status: Optional[int] = None,
        detail: Optional[str] = None
    ) -> None:
        super().__init__(message, kind, status, detail)
