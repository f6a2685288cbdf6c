"""Generic API response envelope.

Every endpoint answers with the same JSON shape::

    {"success": true, "statusCode": 200, "message": "Request successful", "data": {...}}
    {"success": false, "statusCode": 404, "message": "...", "errorCode": 2001,
     "traceId": "...", "details": {"title": "...", "message": "..."}}

Optional keys are left out of the JSON when they are null.
"""

from __future__ import annotations

import math
import traceback
from typing import Any, Generic, TypeVar

from fastapi.responses import JSONResponse
from pydantic import Field, field_validator

from lms.config import settings
from lms.core.error_codes import ErrorCode
from lms.models.common import CamelModel

T = TypeVar("T")

DEFAULT_SUCCESS_MESSAGE = "Request successful"

_ALWAYS_PRESENT = {"success", "statusCode", "message"}


def _drop_none(body: dict[str, Any], keep: set[str] | None = None) -> dict[str, Any]:
    keep = keep or set()
    return {k: v for k, v in body.items() if v is not None or k in keep}


class ErrorModel(CamelModel):
    """Diagnostic payload attached to error envelopes."""

    title: str = ""
    message: str = ""
    field_errors: dict[str, str] | None = None
    inner_exception: str | None = None
    stack_trace: str | None = None

    @classmethod
    def from_validation_failures(cls, failures: list[tuple[str, str]]) -> ErrorModel:
        """Group (field, message) pairs into one message per field."""
        grouped: dict[str, list[str]] = {}
        for field, message in failures:
            grouped.setdefault(field, []).append(message)
        return cls(
            title="Validation Error",
            message=f"Validation failed with {len(failures)} error(s)",
            field_errors={field: "; ".join(messages) for field, messages in grouped.items()},
        )

    @classmethod
    def from_exception(cls, exc: BaseException, include_stack_trace: bool = False) -> ErrorModel:
        inner = exc.__cause__ or exc.__context__
        stack = None
        if include_stack_trace:
            stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(
            title=type(exc).__name__,
            message=str(exc),
            inner_exception=str(inner) if inner is not None else None,
            stack_trace=stack,
        )

    @classmethod
    def create(cls, title: str, message: str, field_errors: dict[str, str] | None = None) -> ErrorModel:
        return cls(title=title, message=message, field_errors=field_errors)


class PaginationMetadata(CamelModel):
    """Paging counters derived from (page_number, page_size, total_count)."""

    page_number: int
    page_size: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool
    search_term: str | None = None

    @classmethod
    def create(
        cls,
        page_number: int,
        page_size: int,
        total_count: int,
        search_term: str | None = None,
    ) -> PaginationMetadata:
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        total_pages = math.ceil(total_count / page_size)
        return cls(
            page_number=page_number,
            page_size=page_size,
            total_count=total_count,
            total_pages=total_pages,
            has_next_page=page_number < total_pages,
            has_previous_page=page_number > 1,
            search_term=search_term,
        )


class PaginationParams(CamelModel):
    """Paging query parameters. Oversized pages are capped."""

    page_number: int = 1
    page_size: int = 10
    search_term: str | None = None

    @field_validator("page_size")
    @classmethod
    def _cap_page_size(cls, v: int) -> int:
        return min(v, settings.max_page_size)

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size


class ApiResponse(CamelModel, Generic[T]):
    """Standard response envelope wrapping all API responses."""

    success: bool
    status_code: int
    message: str = ""
    error_code: int | None = None
    data: T | None = None
    error: ErrorModel | None = Field(default=None, alias="details")
    pagination: PaginationMetadata | None = None
    trace_id: str | None = None

    # ------------------------------------------------------------------
    # Named constructors
    # ------------------------------------------------------------------

    @classmethod
    def ok(
        cls,
        data: T | None = None,
        message: str = DEFAULT_SUCCESS_MESSAGE,
        status_code: int = 200,
    ) -> ApiResponse[T]:
        return cls(success=True, status_code=status_code, message=message, data=data)

    @classmethod
    def paged(
        cls,
        data: T,
        pagination: PaginationMetadata,
        message: str = DEFAULT_SUCCESS_MESSAGE,
    ) -> ApiResponse[T]:
        return cls(success=True, status_code=200, message=message, data=data, pagination=pagination)

    @classmethod
    def fail(
        cls,
        message: str,
        status_code: int = 500,
        error_code: int | None = None,
        error: ErrorModel | None = None,
        trace_id: str | None = None,
    ) -> ApiResponse[T]:
        return cls(
            success=False,
            status_code=status_code,
            message=message,
            error_code=int(error_code) if error_code is not None else None,
            error=error,
            trace_id=trace_id,
        )

    @classmethod
    def validation(
        cls,
        validation_errors: ErrorModel,
        message: str = "Validation failed",
        trace_id: str | None = None,
    ) -> ApiResponse[T]:
        return cls.fail(message, 400, ErrorCode.VALIDATION_ERROR, validation_errors, trace_id)

    @classmethod
    def not_found(
        cls,
        message: str,
        error_code: int = ErrorCode.USER_NOT_FOUND,
        trace_id: str | None = None,
    ) -> ApiResponse[T]:
        return cls.fail(message, 404, error_code, trace_id=trace_id)

    @classmethod
    def conflict(
        cls,
        message: str,
        error_code: int = ErrorCode.DUPLICATE_ENROLLMENT,
        trace_id: str | None = None,
    ) -> ApiResponse[T]:
        return cls.fail(message, 409, error_code, trace_id=trace_id)

    @classmethod
    def unauthorized(
        cls,
        message: str,
        error_code: int = ErrorCode.UNAUTHORIZED,
        trace_id: str | None = None,
    ) -> ApiResponse[T]:
        return cls.fail(message, 401, error_code, trace_id=trace_id)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys and null optionals removed."""
        body = _drop_none(self.model_dump(mode="json", by_alias=True), _ALWAYS_PRESENT)
        for key in ("details", "pagination"):
            if key in body:
                body[key] = _drop_none(body[key])
        return body


def as_json_response(envelope: ApiResponse[Any], headers: dict[str, str] | None = None) -> JSONResponse:
    """Render an envelope with its own status code as the HTTP status."""
    return JSONResponse(
        status_code=envelope.status_code,
        content=envelope.to_wire(),
        headers=headers,
    )
