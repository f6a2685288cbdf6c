"""Database-specific exceptions for the LMS API.

Repositories translate SQLAlchemy errors into these so that callers never
depend on driver exception types.
"""

from lms.core.error_codes import ErrorCode


class DatabaseError(Exception):
    """Base exception for database operations."""

    error_code: ErrorCode = ErrorCode.DATABASE_ERROR


class DuplicateRecordError(DatabaseError):
    """Raised when a unique constraint rejects an insert or update."""


class ConstraintViolationError(DatabaseError):
    """Raised when a foreign-key or check constraint is violated."""


class ConnectionError(DatabaseError):
    """Raised when the database cannot be reached."""
