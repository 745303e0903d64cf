"""
Custom exceptions for Vimeo API and upload operations.

The upload errors follow the stage they come from so callers can tell
input, file system, negotiation, transfer and protocol failures apart.
"""
from typing import Optional, Any, Mapping


class VimeoException(Exception):
    """Base exception for all Vimeo-related errors."""

    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            error_code: Numeric error code (if available)
        """
        self.error_code = error_code
        self.message = message
        super().__init__(message)


class VimeoRequestError(VimeoException):
    """Exception raised for malformed API requests or unparseable responses."""

    def __init__(self, message: str, body: Any = None, error_code: Optional[int] = None) -> None:
        self.body = body
        super().__init__(message, error_code)


class TransportError(VimeoException):
    """Connection-level failure: no HTTP status was received."""
    pass


class HttpStatusError(VimeoException):
    """
    Exception raised when the server answers with a status >= 400.

    The message is the response body (or the bare status when the body is
    empty); status code and response headers are kept for inspection.
    """

    def __init__(
        self,
        status: int,
        headers: Optional[Mapping[str, str]] = None,
        body: str = ''
    ) -> None:
        self.status = status
        self.headers = dict(headers or {})
        self.body = body
        super().__init__(body or f"HTTP {status}", error_code=status)


class UploadError(VimeoException):
    """Base exception for upload failures."""

    # Set when closing the local file failed after this error occurred
    cleanup_error: Optional[BaseException] = None


class InvalidFileArgumentError(UploadError, TypeError):
    """Raised when the file argument is neither a path nor a file-like object."""
    pass


class UploadFileNotFoundError(UploadError, FileNotFoundError):
    """Raised when the file to upload cannot be located or read."""

    DEFAULT_MESSAGE = "Unable to locate file to upload."

    def __init__(self, message: str = DEFAULT_MESSAGE) -> None:
        super().__init__(message)


class NegotiationError(UploadError):
    """Raised when the upload session could not be created."""

    PREFIX = "Unable to initiate an upload."

    def __init__(self, reason: Any) -> None:
        self.reason = reason
        super().__init__(f"{self.PREFIX} [{reason}]")


class RangeQueryError(UploadError):
    """Raised when the range query returns anything but 308 Resume Incomplete."""

    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(
            f"Invalid http status returned from range query: [{status}]",
            error_code=status
        )
