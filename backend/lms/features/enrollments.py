"""Enrollment commands and queries."""

from lms.core.error_codes import ErrorCode
from lms.core.pipeline import EnvelopeHandler, OptionalValueHandler, ResultHandler, ValueHandler
from lms.core.result import Result
from lms.db.exceptions import DuplicateRecordError
from lms.db.models import Enrollment
from lms.models.enrollment import (
    CreateEnrollmentCommand,
    DeleteEnrollmentCommand,
    EnrollmentDto,
    GetAllEnrollmentsQuery,
    GetEnrollmentByIdQuery,
    GetPagedEnrollmentsQuery,
    UpdateEnrollmentCommand,
)
from lms.models.envelope import ApiResponse, PaginationMetadata


def to_dto(enrollment: Enrollment) -> EnrollmentDto:
    return EnrollmentDto(
        id=enrollment.id,
        user_id=enrollment.user_id,
        course_id=enrollment.course_id,
        user_name=enrollment.user.name,
        course_title=enrollment.course.title,
        enrolled_at=enrollment.enrolled_at,
    )


def _not_found(enrollment_id: int) -> Result[None]:
    return Result.failure(f"Enrollment with ID {enrollment_id} not found.", ErrorCode.ENROLLMENT_NOT_FOUND)


def _already_enrolled(user_id: int, course_id: int, exc: BaseException | None = None) -> Result[None]:
    return Result.failure(
        f"User {user_id} is already enrolled in course {course_id}.", ErrorCode.DUPLICATE_ENROLLMENT, exc
    )


class _EnrollmentWriteHandler(ResultHandler):
    async def _check_references(self, user_id: int, course_id: int, exclude_id: int | None = None) -> Result[None]:
        """User and course must exist and the pair must be new."""
        if await self.uow.users.get_by_id(user_id) is None:
            return Result.failure(f"User with ID {user_id} not found.", ErrorCode.USER_NOT_FOUND)
        if await self.uow.courses.get_by_id(course_id) is None:
            return Result.failure(f"Course with ID {course_id} not found.", ErrorCode.COURSE_NOT_FOUND)
        if await self.uow.enrollments.exists(user_id, course_id, exclude_enrollment_id=exclude_id):
            return _already_enrolled(user_id, course_id)
        return Result.ok()

    async def _conflict(self, user_id: int, course_id: int, exc: DuplicateRecordError) -> Result[None]:
        # Lost a race with a concurrent enrollment of the same pair
        await self.uow.rollback()
        return _already_enrolled(user_id, course_id, exc)


class GetAllEnrollmentsHandler(ValueHandler[GetAllEnrollmentsQuery, list[EnrollmentDto]]):
    async def handle(self, request: GetAllEnrollmentsQuery) -> list[EnrollmentDto]:
        return [to_dto(enrollment) for enrollment in await self.uow.enrollments.get_all()]


class GetPagedEnrollmentsHandler(EnvelopeHandler[GetPagedEnrollmentsQuery]):
    async def handle(self, request: GetPagedEnrollmentsQuery) -> ApiResponse[list[EnrollmentDto]]:
        page = request.pagination
        enrollments, total = await self.uow.enrollments.get_paged(page.page_number, page.page_size)
        return ApiResponse.paged(
            [to_dto(enrollment) for enrollment in enrollments],
            PaginationMetadata.create(page.page_number, page.page_size, total),
        )


class GetEnrollmentByIdHandler(OptionalValueHandler[GetEnrollmentByIdQuery, EnrollmentDto]):
    async def handle(self, request: GetEnrollmentByIdQuery) -> EnrollmentDto | None:
        enrollment = await self.uow.enrollments.get_by_id_with_details(request.id)
        return to_dto(enrollment) if enrollment else None


class CreateEnrollmentHandler(_EnrollmentWriteHandler):
    success_status = 201
    success_message = "Enrollment created successfully"

    async def handle(self, request: CreateEnrollmentCommand) -> Result[int]:
        checked = await self._check_references(request.user_id, request.course_id)
        if checked.is_failure:
            return checked

        enrollment = Enrollment(user_id=request.user_id, course_id=request.course_id)
        try:
            await self.uow.enrollments.add(enrollment)
            enrollment_id = enrollment.id
            await self.uow.save()
        except DuplicateRecordError as exc:
            return await self._conflict(request.user_id, request.course_id, exc)
        return Result.success(enrollment_id)


class UpdateEnrollmentHandler(_EnrollmentWriteHandler):
    success_message = "Enrollment updated successfully"

    async def handle(self, request: UpdateEnrollmentCommand) -> Result[None]:
        enrollment = await self.uow.enrollments.get_by_id(request.id)
        if enrollment is None:
            return _not_found(request.id)
        checked = await self._check_references(request.user_id, request.course_id, exclude_id=enrollment.id)
        if checked.is_failure:
            return checked

        enrollment.user_id = request.user_id
        enrollment.course_id = request.course_id
        try:
            await self.uow.enrollments.update(enrollment)
            await self.uow.save()
        except DuplicateRecordError as exc:
            return await self._conflict(request.user_id, request.course_id, exc)
        return Result.ok()


class DeleteEnrollmentHandler(ResultHandler[DeleteEnrollmentCommand]):
    success_message = "Enrollment deleted successfully"

    async def handle(self, request: DeleteEnrollmentCommand) -> Result[None]:
        enrollment = await self.uow.enrollments.get_by_id(request.id)
        if enrollment is None:
            return _not_found(request.id)

        await self.uow.enrollments.delete(enrollment)
        await self.uow.save()
        return Result.ok()
