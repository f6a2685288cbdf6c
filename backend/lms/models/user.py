"""User models."""

from pydantic import EmailStr, Field

from lms.models.common import CamelModel
from lms.models.envelope import PaginationParams


class UserDto(CamelModel):
    """User response schema."""

    id: int
    name: str
    email: str
    role: str


class CreateUserCommand(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: str = Field(default="Student", min_length=1, max_length=50)


class UpdateUserCommand(CamelModel):
    """Full update. Password and role are left unchanged when omitted."""

    id: int = Field(gt=0)
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str | None = Field(default=None, min_length=6, max_length=128)
    role: str | None = Field(default=None, min_length=1, max_length=50)


class DeleteUserCommand(CamelModel):
    id: int = Field(gt=0)


class GetUserByIdQuery(CamelModel):
    id: int = Field(gt=0)


class GetAllUsersQuery(CamelModel):
    pass


class GetPagedUsersQuery(CamelModel):
    pagination: PaginationParams = Field(default_factory=PaginationParams)
