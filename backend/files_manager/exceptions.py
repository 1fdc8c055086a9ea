"""Custom exception hierarchy for the files manager.

Client-facing messages are coarse: every authentication failure reads
``Unauthorized`` and every lookup failure reads ``Not found``, whether or
not the user or record exists.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Auth & rate limiting
    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMITED = "RATE_LIMITED"

    # Input errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PARENT_NOT_FOUND = "PARENT_NOT_FOUND"
    PARENT_NOT_A_FOLDER = "PARENT_NOT_A_FOLDER"
    FOLDER_HAS_NO_CONTENT = "FOLDER_HAS_NO_CONTENT"

    # Lookup errors
    NOT_FOUND = "NOT_FOUND"

    # Infrastructure errors
    CACHE_UNAVAILABLE = "CACHE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class FilesManagerException(Exception):
    """
    Base exception for all files manager errors.

    Provides structured error responses with:
    - Human-readable message (rendered as ``error``)
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, code, and details fields
        """
        return {
            "error": self.message,
            "code": self.error_code.value,
            "details": self.details
        }


class AuthenticationError(FilesManagerException):
    """Missing, invalid or expired session token, or bad credentials."""

    def __init__(self):
        super().__init__(
            "Unauthorized",
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class ValidationError(FilesManagerException):
    """Validation failed for user input."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            error_code,
            status_code=400,
            details=details
        )


class ParentNotFoundError(ValidationError):
    """Upload names a parent that does not exist (or belongs to someone else)."""

    def __init__(self):
        super().__init__("Parent not found", field="parentId", error_code=ErrorCode.PARENT_NOT_FOUND)


class ParentNotAFolderError(ValidationError):
    """Upload names a parent whose type is not ``folder``."""

    def __init__(self):
        super().__init__("Parent is not a folder", field="parentId", error_code=ErrorCode.PARENT_NOT_A_FOLDER)


class FolderHasNoContentError(ValidationError):
    """Content was requested for a folder record."""

    def __init__(self):
        super().__init__("A folder doesn't have content", error_code=ErrorCode.FOLDER_HAS_NO_CONTENT)


class NotFoundError(FilesManagerException):
    """Record missing, private to another user, or without backing bytes.

    The id is kept on the exception for logging only; the response body is
    the same for every cause.
    """

    def __init__(self, file_id: Optional[str] = None):
        super().__init__(
            "Not found",
            ErrorCode.NOT_FOUND,
            status_code=404,
        )
        self.file_id = file_id


class CacheUnavailableError(FilesManagerException):
    """The session cache could not be reached."""

    def __init__(self, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = type(original_error).__name__

        super().__init__(
            "Session store unavailable",
            ErrorCode.CACHE_UNAVAILABLE,
            status_code=503,
            details=details
        )


class RateLimitedError(FilesManagerException):
    """The caller spent its request allowance for now."""

    def __init__(self, retry_after: float):
        super().__init__(
            "Too many requests",
            ErrorCode.RATE_LIMITED,
            status_code=429,
            details={"retry_after": round(retry_after, 1)},
        )
        self.headers = {"Retry-After": str(int(retry_after) + 1)}
