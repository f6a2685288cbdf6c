"""Course endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from fastapi.responses import JSONResponse

from lms.api.dependencies import Pagination, RequestPipeline, get_current_user
from lms.api.routes.common import id_mismatch
from lms.core.error_codes import ErrorCode
from lms.models.course import (
    CreateCourseCommand,
    DeleteCourseCommand,
    GetAllCoursesQuery,
    GetCourseByIdQuery,
    GetPagedCoursesQuery,
    UpdateCourseCommand,
)
from lms.models.envelope import ApiResponse, as_json_response

router = APIRouter(dependencies=[Depends(get_current_user)])

CourseId = Annotated[int, Path(gt=0)]


@router.get("")
async def get_courses(pipeline: RequestPipeline) -> JSONResponse:
    return as_json_response(await pipeline.send(GetAllCoursesQuery()))


@router.get("/paged")
async def get_paged_courses(pipeline: RequestPipeline, pagination: Pagination) -> JSONResponse:
    return as_json_response(await pipeline.send(GetPagedCoursesQuery(pagination=pagination)))


@router.get("/{course_id}")
async def get_course(course_id: CourseId, pipeline: RequestPipeline) -> JSONResponse:
    """Get one course (served from cache when possible)."""
    envelope = await pipeline.send(GetCourseByIdQuery(id=course_id))
    if envelope is None:
        envelope = ApiResponse.not_found(f"Course with ID {course_id} not found.", ErrorCode.COURSE_NOT_FOUND)
    return as_json_response(envelope)


@router.post("", status_code=201)
async def create_course(command: CreateCourseCommand, pipeline: RequestPipeline) -> JSONResponse:
    return as_json_response(await pipeline.send(command))


@router.put("/{course_id}")
async def update_course(course_id: CourseId, command: UpdateCourseCommand, pipeline: RequestPipeline) -> JSONResponse:
    if command.id != course_id:
        return id_mismatch("Course")
    return as_json_response(await pipeline.send(command))


@router.delete("/{course_id}")
async def delete_course(course_id: CourseId, pipeline: RequestPipeline) -> JSONResponse:
    return as_json_response(await pipeline.send(DeleteCourseCommand(id=course_id)))
