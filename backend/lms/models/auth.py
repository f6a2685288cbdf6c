"""Authentication models."""

from datetime import datetime

from pydantic import EmailStr, Field

from lms.models.common import CamelModel


class LoginCommand(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class AuthResponse(CamelModel):
    token: str
    token_type: str = "bearer"
    expires_at: datetime
