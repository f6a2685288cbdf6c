"""Authentication endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from lms.api.dependencies import RequestPipeline
from lms.config import settings
from lms.middleware.rate_limiter import limiter
from lms.models.auth import LoginCommand
from lms.models.envelope import as_json_response

router = APIRouter()


@router.post("/login")
@limiter.limit(settings.rate_limit_login)
async def login(request: Request, body: LoginCommand, pipeline: RequestPipeline) -> JSONResponse:
    """Validate credentials and return a JWT."""
    return as_json_response(await pipeline.send(body))
