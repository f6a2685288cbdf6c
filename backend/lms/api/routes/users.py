"""User management endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from fastapi.responses import JSONResponse

from lms.api.dependencies import AdminUser, AuthenticatedUser, Pagination, RequestPipeline, get_current_user
from lms.api.routes.common import id_mismatch
from lms.core.error_codes import ErrorCode
from lms.core.exceptions import AppError
from lms.models.envelope import ApiResponse, as_json_response
from lms.models.user import (
    CreateUserCommand,
    DeleteUserCommand,
    GetAllUsersQuery,
    GetPagedUsersQuery,
    GetUserByIdQuery,
    UpdateUserCommand,
)

router = APIRouter(dependencies=[Depends(get_current_user)])

UserId = Annotated[int, Path(gt=0)]


@router.get("")
async def get_users(pipeline: RequestPipeline) -> JSONResponse:
    return as_json_response(await pipeline.send(GetAllUsersQuery()))


@router.get("/paged")
async def get_paged_users(pipeline: RequestPipeline, pagination: Pagination) -> JSONResponse:
    return as_json_response(await pipeline.send(GetPagedUsersQuery(pagination=pagination)))


@router.get("/{user_id}")
async def get_user(user_id: UserId, pipeline: RequestPipeline) -> JSONResponse:
    envelope = await pipeline.send(GetUserByIdQuery(id=user_id))
    if envelope is None:
        envelope = ApiResponse.not_found(f"User with ID {user_id} not found.", ErrorCode.USER_NOT_FOUND)
    return as_json_response(envelope)


@router.post("", status_code=201)
async def create_user(command: CreateUserCommand, _admin: AdminUser, pipeline: RequestPipeline) -> JSONResponse:
    """Create a new user (admin only)."""
    return as_json_response(await pipeline.send(command))


@router.put("/{user_id}")
async def update_user(
    user_id: UserId,
    command: UpdateUserCommand,
    current_user: AuthenticatedUser,
    pipeline: RequestPipeline,
) -> JSONResponse:
    """Update a user. Only admins may change a role."""
    if command.id != user_id:
        return id_mismatch("User")
    if command.role is not None and not current_user.is_admin:
        raise AppError("Admin role required to change a user's role", ErrorCode.FORBIDDEN)
    return as_json_response(await pipeline.send(command))


@router.delete("/{user_id}")
async def delete_user(user_id: UserId, pipeline: RequestPipeline) -> JSONResponse:
    return as_json_response(await pipeline.send(DeleteUserCommand(id=user_id)))
