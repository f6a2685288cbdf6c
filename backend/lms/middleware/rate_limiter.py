"""Rate limiting using slowapi, keyed by authenticated user or client IP."""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from lms.config import settings
from lms.core.exceptions import AppError


def _get_user_or_ip(request: Request) -> str:
    """Use the JWT subject as the rate-limit key, fall back to IP."""
    auth = request.headers.get("authorization", "")
    if auth.startswith("Bearer "):
        from lms.api.dependencies import token_service

        try:
            return f"user:{token_service.decode(auth.split(' ', 1)[1])['sub']}"
        except AppError:
            pass
    return get_remote_address(request)


limiter = Limiter(key_func=_get_user_or_ip, enabled=settings.rate_limit_enabled)
