"""Trace id middleware.

Reuses the caller's ``X-Request-ID`` header or generates a UUID4, stores it
on ``scope["state"]["request_id"]`` and echoes it on the response. Error
envelopes use this id as their ``traceId``.
"""

import uuid
from typing import Any

from starlette.types import ASGIApp, Receive, Scope, Send

REQUEST_ID_HEADER = b"x-request-id"


def get_request_id(scope: Scope) -> str | None:
    """Trace id assigned to this request, if the middleware ran."""
    return scope.get("state", {}).get("request_id")


class RequestIDMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = next(
            (value.decode("latin-1") for name, value in scope.get("headers", []) if name == REQUEST_ID_HEADER),
            "",
        ) or str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_request_id(message: Any) -> None:
            if message["type"] == "http.response.start":
                headers = [(k, v) for k, v in message.get("headers", []) if k != REQUEST_ID_HEADER]
                headers.append((REQUEST_ID_HEADER, request_id.encode("latin-1")))
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_with_request_id)
