"""Request pipeline: command/query dispatch with cross-cutting behaviors.

Routes build a request model and call ``await pipeline.send(request)``. The
pipeline looks up the handler class registered for the request type,
instantiates it with a ``HandlerContext`` and runs the behaviors around
``handler.handle(request)``:

    LoggingBehavior -> ResponseNormalizationBehavior -> handler

Each handler derives from one of the shape base classes below, and the base
class owns the conversion of the handler's return value into an
``ApiResponse``. ``ResponseNormalizationBehavior`` only calls that
conversion; it never inspects the value at runtime.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Protocol, TypeVar

from lms.core.error_codes import status_for_error_code
from lms.core.result import Result, StatusPolicy
from lms.models.envelope import ApiResponse

if TYPE_CHECKING:
    from lms.config import Settings
    from lms.core.cache import CacheService
    from lms.core.security import PasswordHasher, TokenService
    from lms.db.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT")
T = TypeVar("T")

CallNext = Callable[[], Awaitable[Any]]

EMPTY_SUCCESS_MESSAGE = "Operation completed successfully"


@dataclass
class HandlerContext:
    """Collaborators available to every handler of one HTTP request."""

    uow: UnitOfWork
    cache: CacheService
    password_hasher: PasswordHasher
    token_service: TokenService
    settings: Settings


def legacy_failure_status(code: int | None) -> int:
    """Every Result failure is a 400, whatever its error code."""
    return 400


# ---------------------------------------------------------------------------
# Handler shapes
# ---------------------------------------------------------------------------


class Handler(Generic[RequestT, T]):
    """Base handler. Subclasses pick a shape by deriving from one of the
    classes below and implement ``handle``."""

    shape: ClassVar[str] = "handler"

    def __init__(self, context: HandlerContext) -> None:
        self.context = context
        self.uow = context.uow
        self.cache = context.cache

    async def handle(self, request: RequestT) -> T:
        raise NotImplementedError

    def envelope(self, value: T, failure_status: StatusPolicy) -> ApiResponse[Any] | None:
        raise NotImplementedError


class EnvelopeHandler(Handler[RequestT, ApiResponse[Any]]):
    """Handler that builds its own envelope (paged queries)."""

    shape = "envelope"

    def envelope(self, value: ApiResponse[Any], failure_status: StatusPolicy) -> ApiResponse[Any]:
        return value


class ResultHandler(Handler[RequestT, Result[Any]]):
    """Handler returning ``Result``. Failures keep their message and code."""

    shape = "result"
    success_status: ClassVar[int] = 200
    success_message: ClassVar[str] = "Request successful"

    def envelope(self, value: Result[Any], failure_status: StatusPolicy) -> ApiResponse[Any]:
        if value.is_success:
            return ApiResponse.ok(value.data, self.success_message, self.success_status)
        return value.to_envelope(failure_status)


class ValueHandler(Handler[RequestT, T]):
    """Handler returning a bare value that is always present."""

    shape = "value"

    def envelope(self, value: T, failure_status: StatusPolicy) -> ApiResponse[Any]:
        if value is None:
            return ApiResponse.ok(message=EMPTY_SUCCESS_MESSAGE)
        return ApiResponse.ok(value)


class OptionalValueHandler(Handler[RequestT, T | None]):
    """Handler whose value may be missing. ``None`` passes through so the
    route can answer with a resource-specific not-found envelope."""

    shape = "optional"

    def envelope(self, value: T | None, failure_status: StatusPolicy) -> ApiResponse[Any] | None:
        if value is None:
            return None
        return ApiResponse.ok(value)


# ---------------------------------------------------------------------------
# Behaviors
# ---------------------------------------------------------------------------


class Behavior(Protocol):
    async def __call__(self, request: Any, handler: Handler[Any, Any], call_next: CallNext) -> Any: ...


class LoggingBehavior:
    """Logs handler timing."""

    async def __call__(self, request: Any, handler: Handler[Any, Any], call_next: CallNext) -> Any:
        start = time.perf_counter()
        try:
            return await call_next()
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info("Handled %s in %.1f ms", type(request).__name__, elapsed_ms)


class ResponseNormalizationBehavior:
    """Turns every handler's return value into an ``ApiResponse``."""

    def __init__(self, failure_status: StatusPolicy = status_for_error_code) -> None:
        self.failure_status = failure_status

    async def __call__(self, request: Any, handler: Handler[Any, Any], call_next: CallNext) -> Any:
        request_name = type(request).__name__
        logger.info("Processing request: %s", request_name)
        try:
            value = await call_next()
        except Exception:
            logger.error("Error processing request %s", request_name, exc_info=True)
            raise

        logger.info("Request %s returned a %s response", request_name, handler.shape)
        return handler.envelope(value, self.failure_status)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class Pipeline:
    """Dispatches a request to its registered handler through the behaviors."""

    def __init__(
        self,
        handlers: Mapping[type, type[Handler[Any, Any]]],
        context: HandlerContext,
        behaviors: Sequence[Behavior] = (),
    ) -> None:
        self._handlers = handlers
        self.context = context
        self.behaviors = list(behaviors)

    async def send(self, request: Any) -> Any:
        handler_cls = self._handlers.get(type(request))
        if handler_cls is None:
            raise LookupError(f"No handler registered for {type(request).__name__}")

        handler = handler_cls(self.context)
        call: CallNext = partial(handler.handle, request)
        for behavior in reversed(self.behaviors):
            call = partial(behavior, request, handler, call)
        return await call()


def default_behaviors(legacy_result_failure_status: bool = False) -> list[Behavior]:
    failure_status = legacy_failure_status if legacy_result_failure_status else status_for_error_code
    return [LoggingBehavior(), ResponseNormalizationBehavior(failure_status)]
