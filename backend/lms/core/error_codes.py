"""Application error codes.

Codes are grouped in fixed numeric bands so clients can branch on the
category without knowing every individual code:

  1000-1999  validation
  2000-2999  resource not found
  3000-3999  authentication & authorization
  4000-4999  conflict / duplicate
  5000-5999  server errors
"""

from enum import Enum, IntEnum


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    AUTH = "auth"
    CONFLICT = "conflict"
    SERVER = "server"


class ErrorCode(IntEnum):
    # Validation
    VALIDATION_ERROR = 1001
    INVALID_EMAIL = 1002
    INVALID_PASSWORD = 1003
    DUPLICATE_EMAIL = 1004

    # Resource not found
    USER_NOT_FOUND = 2001
    COURSE_NOT_FOUND = 2002
    ENROLLMENT_NOT_FOUND = 2003
    INSTRUCTOR_NOT_FOUND = 2004

    # Authentication & authorization
    UNAUTHORIZED = 3001
    INVALID_CREDENTIALS = 3002
    TOKEN_EXPIRED = 3003
    FORBIDDEN = 3004
    RATE_LIMITED = 3005

    # Conflict / duplicate
    DUPLICATE_ENROLLMENT = 4001
    COURSE_ALREADY_EXISTS = 4002

    # Server
    INTERNAL_SERVER_ERROR = 5000
    DATABASE_ERROR = 5001
    EMAIL_SEND_ERROR = 5002
    TRANSACTION_ERROR = 5003

    @property
    def category(self) -> ErrorCategory:
        """Band the code belongs to."""
        return _BANDS[self.value // 1000]


_BANDS = {
    1: ErrorCategory.VALIDATION,
    2: ErrorCategory.NOT_FOUND,
    3: ErrorCategory.AUTH,
    4: ErrorCategory.CONFLICT,
    5: ErrorCategory.SERVER,
}

# Error code -> HTTP status. Codes missing here map to 500.
# DuplicateEmail sits in the validation band but is reported as a conflict.
_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_EMAIL: 400,
    ErrorCode.INVALID_PASSWORD: 400,
    ErrorCode.DUPLICATE_EMAIL: 409,
    ErrorCode.DUPLICATE_ENROLLMENT: 409,
    ErrorCode.COURSE_ALREADY_EXISTS: 409,
    ErrorCode.USER_NOT_FOUND: 404,
    ErrorCode.COURSE_NOT_FOUND: 404,
    ErrorCode.ENROLLMENT_NOT_FOUND: 404,
    ErrorCode.INSTRUCTOR_NOT_FOUND: 404,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.INVALID_CREDENTIALS: 401,
    ErrorCode.TOKEN_EXPIRED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.RATE_LIMITED: 429,
}

# HTTP status -> error code used when only a status is known (framework errors)
_CODE_BY_STATUS: dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.USER_NOT_FOUND,
    409: ErrorCode.DUPLICATE_ENROLLMENT,
    422: ErrorCode.VALIDATION_ERROR,
    429: ErrorCode.RATE_LIMITED,
}


def status_for_error_code(code: int | None) -> int:
    """Map an application error code to its HTTP status code."""
    if code is None:
        return 500
    try:
        return _STATUS_BY_CODE.get(ErrorCode(code), 500)
    except ValueError:
        return 500


def error_code_for_status(status_code: int) -> ErrorCode:
    """Best-fit application error code for a bare HTTP status."""
    return _CODE_BY_STATUS.get(status_code, ErrorCode.INTERNAL_SERVER_ERROR)
