"""Course commands and queries.

Single courses and the full course list are cached; every write evicts the
affected entries.
"""

import logging

from lms.core.error_codes import ErrorCode
from lms.core.pipeline import EnvelopeHandler, OptionalValueHandler, ResultHandler, ValueHandler
from lms.core.result import Result
from lms.db.exceptions import DuplicateRecordError
from lms.db.models import Course
from lms.models.course import (
    CourseDto,
    CreateCourseCommand,
    DeleteCourseCommand,
    GetAllCoursesQuery,
    GetCourseByIdQuery,
    GetPagedCoursesQuery,
    UpdateCourseCommand,
)
from lms.models.envelope import ApiResponse, PaginationMetadata

logger = logging.getLogger(__name__)

COURSE_LIST_PREFIX = "courses:"
COURSE_LIST_KEY = f"{COURSE_LIST_PREFIX}all"


def course_cache_key(course_id: int) -> str:
    return f"course:{course_id}"


def _not_found(course_id: int) -> Result[None]:
    return Result.failure(f"Course with ID {course_id} not found.", ErrorCode.COURSE_NOT_FOUND)


def _title_taken(title: str, exc: BaseException | None = None) -> Result[None]:
    return Result.failure(f"Course with title '{title}' already exists.", ErrorCode.COURSE_ALREADY_EXISTS, exc)


class GetAllCoursesHandler(ValueHandler[GetAllCoursesQuery, list[CourseDto]]):
    async def handle(self, request: GetAllCoursesQuery) -> list[CourseDto]:
        cached = await self.cache.get(COURSE_LIST_KEY)
        if cached is not None:
            return [CourseDto.model_validate(item) for item in cached]

        courses = [CourseDto.model_validate(course) for course in await self.uow.courses.get_all()]
        await self.cache.set(COURSE_LIST_KEY, [course.model_dump(mode="json") for course in courses])
        return courses


class GetPagedCoursesHandler(EnvelopeHandler[GetPagedCoursesQuery]):
    async def handle(self, request: GetPagedCoursesQuery) -> ApiResponse[list[CourseDto]]:
        page = request.pagination
        courses, total = await self.uow.courses.get_paged(page.page_number, page.page_size, page.search_term)
        return ApiResponse.paged(
            [CourseDto.model_validate(course) for course in courses],
            PaginationMetadata.create(page.page_number, page.page_size, total, page.search_term),
        )


class GetCourseByIdHandler(OptionalValueHandler[GetCourseByIdQuery, CourseDto]):
    async def handle(self, request: GetCourseByIdQuery) -> CourseDto | None:
        key = course_cache_key(request.id)
        cached = await self.cache.get(key)
        if cached is not None:
            logger.debug("Course %s served from cache", request.id)
            return CourseDto.model_validate(cached)

        course = await self.uow.courses.get_by_id(request.id)
        if course is None:
            return None
        dto = CourseDto.model_validate(course)
        await self.cache.set(key, dto.model_dump(mode="json"))
        return dto


class _CourseWriteHandler(ResultHandler):
    async def _evict(self, course_id: int | None = None) -> None:
        """Drop the cached list, and the cached course when one is given."""
        if course_id is not None:
            await self.cache.remove(course_cache_key(course_id))
        await self.cache.remove(COURSE_LIST_KEY)
        await self.cache.remove_by_prefix(COURSE_LIST_PREFIX)

    async def _title_conflict(self, title: str, exc: DuplicateRecordError) -> Result[None]:
        # Lost a race with a concurrent write of the same title
        await self.uow.rollback()
        return _title_taken(title, exc)


class CreateCourseHandler(_CourseWriteHandler):
    """Create a course taught by an existing user."""

    success_status = 201
    success_message = "Course created successfully"

    async def handle(self, request: CreateCourseCommand) -> Result[int]:
        if await self.uow.users.get_by_id(request.instructor_id) is None:
            return Result.failure(
                f"Instructor with ID {request.instructor_id} not found.",
                ErrorCode.INSTRUCTOR_NOT_FOUND,
            )
        if await self.uow.courses.get_by_title(request.title) is not None:
            return _title_taken(request.title)

        course = Course(
            title=request.title.strip(),
            description=request.description.strip(),
            instructor_id=request.instructor_id,
            duration_in_hours=request.duration_in_hours,
        )
        try:
            await self.uow.courses.add(course)
            course_id = course.id
            await self.uow.save()
        except DuplicateRecordError as exc:
            return await self._title_conflict(request.title, exc)

        await self._evict()
        return Result.success(course_id)


class UpdateCourseHandler(_CourseWriteHandler):
    success_message = "Course updated successfully"

    async def handle(self, request: UpdateCourseCommand) -> Result[None]:
        course = await self.uow.courses.get_by_id(request.id)
        if course is None:
            return _not_found(request.id)
        same_title = await self.uow.courses.get_by_title(request.title)
        if same_title is not None and same_title.id != course.id:
            return _title_taken(request.title)

        course.title = request.title.strip()
        course.description = request.description.strip()
        course.duration_in_hours = request.duration_in_hours
        try:
            await self.uow.courses.update(course)
            await self.uow.save()
        except DuplicateRecordError as exc:
            return await self._title_conflict(request.title, exc)

        await self._evict(request.id)
        return Result.ok()


class DeleteCourseHandler(_CourseWriteHandler):
    success_message = "Course deleted successfully"

    async def handle(self, request: DeleteCourseCommand) -> Result[None]:
        course = await self.uow.courses.get_by_id(request.id)
        if course is None:
            return _not_found(request.id)

        await self.uow.courses.delete(course)
        await self.uow.save()

        await self._evict(request.id)
        return Result.ok()
