"""Enrollment models."""

from datetime import datetime

from pydantic import Field

from lms.models.common import CamelModel
from lms.models.envelope import PaginationParams


class EnrollmentDto(CamelModel):
    id: int
    user_id: int
    course_id: int
    user_name: str
    course_title: str
    enrolled_at: datetime | None = None


class CreateEnrollmentCommand(CamelModel):
    user_id: int = Field(gt=0, description="User ID must be greater than zero.")
    course_id: int = Field(gt=0, description="Course ID must be greater than zero.")


class UpdateEnrollmentCommand(CamelModel):
    id: int = Field(gt=0)
    user_id: int = Field(gt=0)
    course_id: int = Field(gt=0)


class DeleteEnrollmentCommand(CamelModel):
    id: int = Field(gt=0)


class GetEnrollmentByIdQuery(CamelModel):
    id: int = Field(gt=0)


class GetAllEnrollmentsQuery(CamelModel):
    pass


class GetPagedEnrollmentsQuery(CamelModel):
    pagination: PaginationParams = Field(default_factory=PaginationParams)
