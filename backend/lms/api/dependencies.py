"""API dependencies: DB sessions, the request pipeline and JWT authentication."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from lms.config import settings
from lms.core.cache import CacheService, get_cache_service
from lms.core.error_codes import ErrorCode
from lms.core.exceptions import AppError, UnauthorizedAccessError
from lms.core.pipeline import HandlerContext, Pipeline, default_behaviors
from lms.core.security import PasswordHasher, TokenService
from lms.db.database import get_session
from lms.db.unit_of_work import UnitOfWork
from lms.features.registry import HANDLERS
from lms.models.envelope import PaginationParams

ADMIN_ROLE = "Admin"

password_hasher = PasswordHasher(settings.password_hash_rounds)
token_service = TokenService(settings)

# ---------------------------------------------------------------------------
# Database dependency
# ---------------------------------------------------------------------------


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async for session in get_session():
        yield session


DbSession = Annotated[AsyncSession, Depends(get_db)]

# ---------------------------------------------------------------------------
# Cache and pipeline
# ---------------------------------------------------------------------------


def get_cache() -> CacheService:
    return get_cache_service()


Cache = Annotated[CacheService, Depends(get_cache)]


def get_pipeline(db: DbSession, cache: Cache) -> Pipeline:
    """One pipeline per request, bound to the request's session."""
    context = HandlerContext(
        uow=UnitOfWork(db),
        cache=cache,
        password_hasher=password_hasher,
        token_service=token_service,
        settings=settings,
    )
    return Pipeline(HANDLERS, context, default_behaviors(settings.legacy_result_failure_status))


RequestPipeline = Annotated[Pipeline, Depends(get_pipeline)]

# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)] = None,
) -> CurrentUser:
    """Extract the authenticated user from the Bearer token."""
    if credentials is None:
        raise UnauthorizedAccessError("Authentication required")
    payload = token_service.decode(credentials.credentials)
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as exc:
        raise UnauthorizedAccessError("Invalid token") from exc
    return CurrentUser(id=user_id, email=payload.get("email", ""), role=payload.get("role", ""))


AuthenticatedUser = Annotated[CurrentUser, Depends(get_current_user)]


async def require_admin(user: AuthenticatedUser) -> CurrentUser:
    if not user.is_admin:
        raise AppError("Admin role required", ErrorCode.FORBIDDEN)
    return user


AdminUser = Annotated[CurrentUser, Depends(require_admin)]

# ---------------------------------------------------------------------------
# Paging query parameters
# ---------------------------------------------------------------------------


def get_pagination(
    page_number: Annotated[int, Query(alias="pageNumber", ge=1)] = 1,
    page_size: Annotated[int, Query(alias="pageSize", ge=1)] = 10,
    search_term: Annotated[str | None, Query(alias="searchTerm", max_length=100)] = None,
) -> PaginationParams:
    return PaginationParams(page_number=page_number, page_size=page_size, search_term=search_term or None)


Pagination = Annotated[PaginationParams, Depends(get_pagination)]
