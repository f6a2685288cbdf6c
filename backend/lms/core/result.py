"""Result type returned by command and query handlers.

A ``Result`` is either a success carrying ``data`` or a failure carrying an
error message, an optional application error code and, optionally, the
exception that caused it. Handlers return failures for expected outcomes
(duplicate email, unknown course, ...) instead of raising.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from lms.core.error_codes import ErrorCode, status_for_error_code
from lms.core.exceptions import AppError

if TYPE_CHECKING:
    from lms.models.envelope import ApiResponse

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")

StatusPolicy = Callable[[int | None], int]


class ResultUnwrapError(AppError, RuntimeError):
    """Raised by ``Result.unwrap`` on a failure that carries no exception.

    Keeps the failure's error code, so an unwrapped not-found failure still
    reaches the client as a 404.
    """

    def __init__(self, message: str, error_code: int | None = None) -> None:
        super().__init__(message, error_code if error_code is not None else ErrorCode.INTERNAL_SERVER_ERROR)


@dataclass(frozen=True)
class Result(Generic[T]):
    is_success: bool
    data: T | None = None
    error_message: str | None = None
    error_code: int | None = None
    exception: BaseException | None = None

    def __post_init__(self) -> None:
        if self.is_success and (self.error_message is not None or self.error_code is not None):
            raise ValueError("A successful result cannot carry an error")
        if not self.is_success and not self.error_message:
            raise ValueError("A failed result needs an error message")
        if not self.is_success and self.data is not None:
            raise ValueError("A failed result cannot carry data")

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def success(cls, data: T) -> Result[T]:
        return cls(is_success=True, data=data)

    @classmethod
    def ok(cls) -> Result[None]:
        """Success without a payload, for void operations."""
        return cls(is_success=True)  # type: ignore[return-value]

    @classmethod
    def failure(
        cls,
        message: str,
        code: int | None = None,
        exception: BaseException | None = None,
    ) -> Result[T]:
        return cls(
            is_success=False,
            error_message=message,
            error_code=int(code) if code is not None else None,
            exception=exception,
        )

    @classmethod
    def failure_from_exception(cls, exception: BaseException, code: int | None = None) -> Result[T]:
        return cls.failure(str(exception) or type(exception).__name__, code, exception)

    @property
    def is_failure(self) -> bool:
        return not self.is_success

    # ------------------------------------------------------------------
    # Combinators
    # ------------------------------------------------------------------

    def map(self, transform: Callable[[T], U]) -> Result[U]:
        """Apply ``transform`` to the data; failures pass through unchanged."""
        if self.is_failure:
            return Result.failure(self.error_message or "Operation failed", self.error_code, self.exception)
        try:
            return Result.success(transform(self.data))  # type: ignore[arg-type]
        except Exception as exc:
            return Result.failure_from_exception(exc, self.error_code)

    def bind(self, transform: Callable[[T], Result[U]]) -> Result[U]:
        """Chain another Result-returning step, short-circuiting on failure."""
        if self.is_failure:
            return Result.failure(self.error_message or "Operation failed", self.error_code, self.exception)
        try:
            return transform(self.data)  # type: ignore[arg-type]
        except Exception as exc:
            return Result.failure_from_exception(exc, self.error_code)

    def tap(self, action: Callable[[T], Any]) -> Result[T]:
        if self.is_success:
            action(self.data)  # type: ignore[arg-type]
        return self

    def tap_error(self, action: Callable[[str, int | None], Any]) -> Result[T]:
        if self.is_failure:
            action(self.error_message, self.error_code)  # type: ignore[arg-type]
        return self

    def match(
        self,
        on_success: Callable[[T], R],
        on_failure: Callable[[str, int | None], R],
    ) -> R:
        if self.is_success:
            return on_success(self.data)  # type: ignore[arg-type]
        return on_failure(self.error_message, self.error_code)  # type: ignore[arg-type]

    def unwrap(self) -> T:
        """Return the data or raise.

        Escape hatch for callers that have already checked ``is_success``.
        Prefer ``match`` or ``unwrap_or`` everywhere else.
        """
        if self.is_success:
            return self.data  # type: ignore[return-value]
        if self.exception is not None:
            raise self.exception
        raise ResultUnwrapError(self.error_message or "Operation failed", self.error_code)

    def unwrap_or(self, default: T | None = None) -> T | None:
        return self.data if self.is_success else default

    # ------------------------------------------------------------------
    # Envelope conversion
    # ------------------------------------------------------------------

    def to_envelope(self, failure_status: StatusPolicy = status_for_error_code) -> ApiResponse[T]:
        """Convert to the wire envelope.

        ``failure_status`` maps the error code of a failure to an HTTP
        status; by default the shared error-code table is used.
        """
        from lms.models.envelope import ApiResponse

        if self.is_success:
            return ApiResponse.ok(self.data)
        return ApiResponse.fail(
            self.error_message or "Operation failed",
            status_code=failure_status(self.error_code),
            error_code=self.error_code,
        )
