"""Course models."""

from pydantic import Field

from lms.models.common import CamelModel
from lms.models.envelope import PaginationParams


class CourseDto(CamelModel):
    id: int
    title: str
    description: str
    duration_in_hours: int
    instructor_id: int


class CreateCourseCommand(CamelModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = ""
    instructor_id: int = Field(gt=0)
    duration_in_hours: int = Field(default=0, ge=0)


class UpdateCourseCommand(CamelModel):
    id: int = Field(gt=0)
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1)
    duration_in_hours: int = Field(default=0, ge=0)


class DeleteCourseCommand(CamelModel):
    id: int = Field(gt=0)


class GetCourseByIdQuery(CamelModel):
    id: int = Field(gt=0)


class GetAllCoursesQuery(CamelModel):
    pass


class GetPagedCoursesQuery(CamelModel):
    pagination: PaginationParams = Field(default_factory=PaginationParams)
