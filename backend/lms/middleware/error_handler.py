"""Error normalization.

``ErrorNormalizationMiddleware`` is the last line of defense: any exception
that escapes routing, dependencies or handlers is turned into an
``ApiResponse`` error envelope with a status and error code chosen from the
exception kind. ``register_error_handlers`` does the same for the errors
FastAPI handles itself (request validation, HTTP exceptions, rate limits).

Uses pure ASGI instead of BaseHTTPMiddleware so exceptions from the app are
caught here rather than inside a background task.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from lms.core.error_codes import ErrorCode, error_code_for_status, status_for_error_code
from lms.core.exceptions import AppError, NotFoundError, UnauthorizedAccessError
from lms.db.exceptions import DatabaseError
from lms.middleware.request_id import get_request_id
from lms.models.envelope import ApiResponse, ErrorModel, as_json_response

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."
DATABASE_ERROR_MESSAGE = "A database error occurred."

_REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def classify_exception(exc: Exception, include_details: bool = False) -> tuple[int, int, str]:
    """Map an exception to (HTTP status, error code, client message)."""
    if isinstance(exc, NotFoundError):
        return 404, int(exc.error_code), exc.message
    if isinstance(exc, UnauthorizedAccessError):
        return 401, int(exc.error_code), exc.message
    if isinstance(exc, AppError):
        return status_for_error_code(exc.error_code), int(exc.error_code), exc.message
    if isinstance(exc, DatabaseError):
        return 500, int(ErrorCode.DATABASE_ERROR), str(exc) if include_details else DATABASE_ERROR_MESSAGE
    message = str(exc) or type(exc).__name__
    return 500, int(ErrorCode.INTERNAL_SERVER_ERROR), message if include_details else UNEXPECTED_ERROR_MESSAGE


def build_error_envelope(
    exc: Exception,
    trace_id: str | None = None,
    include_details: bool = False,
) -> ApiResponse[Any]:
    status_code, error_code, message = classify_exception(exc, include_details)
    if include_details:
        details = ErrorModel.from_exception(exc, include_stack_trace=True)
    else:
        details = ErrorModel.create(type(exc).__name__, message)
    return ApiResponse.fail(message, status_code, error_code, details, trace_id)


class ErrorNormalizationMiddleware:
    def __init__(self, app: ASGIApp, include_details: bool = False) -> None:
        self.app = app
        self.include_details = include_details

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if response_started:
                raise

            trace_id = get_request_id(scope)
            envelope = build_error_envelope(exc, trace_id, self.include_details)
            log = logger.error if envelope.status_code >= 500 else logger.warning
            log(
                "%s %s failed [trace=%s] status=%d errorCode=%s: %s",
                scope.get("method"),
                scope.get("path"),
                trace_id,
                envelope.status_code,
                envelope.error_code,
                exc,
                exc_info=envelope.status_code >= 500,
            )
            await as_json_response(envelope)(scope, receive, send)


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------


def _field_name(loc: tuple[Any, ...]) -> str:
    if not loc:
        return "request"
    parts = [str(part) for part in loc if part not in _REQUEST_LOCATIONS]
    return ".".join(parts) or str(loc[0])


def _trace_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    failures = [(_field_name(tuple(error.get("loc", ()))), error.get("msg", "Invalid value")) for error in exc.errors()]
    logger.info("Validation failed on %s %s: %s", request.method, request.url.path, failures)
    envelope = ApiResponse.validation(ErrorModel.from_validation_failures(failures), trace_id=_trace_id(request))
    return as_json_response(envelope)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    envelope = ApiResponse.fail(
        str(exc.detail),
        exc.status_code,
        error_code_for_status(exc.status_code),
        trace_id=_trace_id(request),
    )
    return as_json_response(envelope, headers=getattr(exc, "headers", None))


async def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded on %s %s", request.method, request.url.path)
    envelope = ApiResponse.fail(
        f"Rate limit exceeded: {exc.detail}",
        429,
        ErrorCode.RATE_LIMITED,
        trace_id=_trace_id(request),
    )
    return as_json_response(envelope)


def register_error_handlers(app: FastAPI) -> None:
    """Render framework errors with the standard envelope."""
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)  # type: ignore[arg-type]
