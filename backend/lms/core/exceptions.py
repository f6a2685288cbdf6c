"""Application exceptions.

Handlers report expected failures through ``Result``. These exceptions are
raised by infrastructure (auth dependencies, ``Result.unwrap``) and are
turned into error envelopes by the error-normalization middleware.
"""

from lms.core.error_codes import ErrorCode


class AppError(Exception):
    """Base exception carrying an application error code."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR,
        details: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details


class NotFoundError(AppError):
    """Raised when a looked-up key does not exist."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.USER_NOT_FOUND) -> None:
        super().__init__(message, error_code)


class UnauthorizedAccessError(AppError):
    """Raised when the caller is not authenticated."""

    def __init__(self, message: str = "Authentication required", error_code: ErrorCode = ErrorCode.UNAUTHORIZED) -> None:
        super().__init__(message, error_code)
