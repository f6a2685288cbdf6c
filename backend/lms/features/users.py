"""User commands and queries."""

import logging

from lms.core.error_codes import ErrorCode
from lms.core.pipeline import EnvelopeHandler, OptionalValueHandler, ResultHandler, ValueHandler
from lms.core.result import Result
from lms.db.exceptions import DuplicateRecordError
from lms.db.models import User
from lms.models.envelope import ApiResponse, PaginationMetadata
from lms.models.user import (
    CreateUserCommand,
    DeleteUserCommand,
    GetAllUsersQuery,
    GetPagedUsersQuery,
    GetUserByIdQuery,
    UpdateUserCommand,
    UserDto,
)

logger = logging.getLogger(__name__)


def _not_found(user_id: int) -> Result[None]:
    return Result.failure(f"User with ID {user_id} not found.", ErrorCode.USER_NOT_FOUND)


def _email_taken(email: str, exc: BaseException | None = None) -> Result[None]:
    return Result.failure(f"Email '{email}' is already registered.", ErrorCode.DUPLICATE_EMAIL, exc)


class GetAllUsersHandler(ValueHandler[GetAllUsersQuery, list[UserDto]]):
    async def handle(self, request: GetAllUsersQuery) -> list[UserDto]:
        users = await self.uow.users.get_all()
        return [UserDto.model_validate(user) for user in users]


class GetPagedUsersHandler(EnvelopeHandler[GetPagedUsersQuery]):
    async def handle(self, request: GetPagedUsersQuery) -> ApiResponse[list[UserDto]]:
        page = request.pagination
        users, total = await self.uow.users.get_paged(page.page_number, page.page_size, page.search_term)
        return ApiResponse.paged(
            [UserDto.model_validate(user) for user in users],
            PaginationMetadata.create(page.page_number, page.page_size, total, page.search_term),
        )


class GetUserByIdHandler(OptionalValueHandler[GetUserByIdQuery, UserDto]):
    async def handle(self, request: GetUserByIdQuery) -> UserDto | None:
        user = await self.uow.users.get_by_id(request.id)
        return UserDto.model_validate(user) if user else None


class CreateUserHandler(ResultHandler[CreateUserCommand]):
    """Create a user. The email must not belong to anyone else."""

    success_status = 201
    success_message = "User created successfully"

    async def handle(self, request: CreateUserCommand) -> Result[int]:
        if await self.uow.users.is_email_taken(request.email):
            return _email_taken(request.email)

        user = User(
            name=request.name.strip(),
            email=request.email,
            password_hash=self.context.password_hasher.hash(request.password),
            role=request.role.strip(),
        )
        try:
            await self.uow.users.add(user)
            user_id = user.id
            await self.uow.save()
        except DuplicateRecordError as exc:
            # Lost a race with a concurrent insert of the same email
            await self.uow.rollback()
            return _email_taken(request.email, exc)

        logger.info("Created user %s", user_id)
        return Result.success(user_id)


class UpdateUserHandler(ResultHandler[UpdateUserCommand]):
    success_message = "User updated successfully"

    async def handle(self, request: UpdateUserCommand) -> Result[None]:
        user = await self.uow.users.get_by_id(request.id)
        if user is None:
            return _not_found(request.id)
        if await self.uow.users.is_email_taken(request.email, exclude_user_id=user.id):
            return _email_taken(request.email)

        user.name = request.name.strip()
        user.email = request.email
        if request.password is not None:
            user.password_hash = self.context.password_hasher.hash(request.password)
        if request.role is not None:
            user.role = request.role.strip()

        try:
            await self.uow.users.update(user)
            await self.uow.save()
        except DuplicateRecordError as exc:
            await self.uow.rollback()
            return _email_taken(request.email, exc)
        return Result.ok()


class DeleteUserHandler(ResultHandler[DeleteUserCommand]):
    success_message = "User deleted successfully"

    async def handle(self, request: DeleteUserCommand) -> Result[None]:
        user = await self.uow.users.get_by_id(request.id)
        if user is None:
            return _not_found(request.id)

        await self.uow.users.delete(user)
        await self.uow.save()
        logger.info("Deleted user %s", request.id)
        return Result.ok()
