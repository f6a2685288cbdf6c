"""Enrollment endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from fastapi.responses import JSONResponse

from lms.api.dependencies import Pagination, RequestPipeline, get_current_user
from lms.api.routes.common import id_mismatch
from lms.core.error_codes import ErrorCode
from lms.models.enrollment import (
    CreateEnrollmentCommand,
    DeleteEnrollmentCommand,
    GetAllEnrollmentsQuery,
    GetEnrollmentByIdQuery,
    GetPagedEnrollmentsQuery,
    UpdateEnrollmentCommand,
)
from lms.models.envelope import ApiResponse, as_json_response

router = APIRouter(dependencies=[Depends(get_current_user)])

EnrollmentId = Annotated[int, Path(gt=0)]


@router.get("")
async def get_enrollments(pipeline: RequestPipeline) -> JSONResponse:
    return as_json_response(await pipeline.send(GetAllEnrollmentsQuery()))


@router.get("/paged")
async def get_paged_enrollments(pipeline: RequestPipeline, pagination: Pagination) -> JSONResponse:
    return as_json_response(await pipeline.send(GetPagedEnrollmentsQuery(pagination=pagination)))


@router.get("/{enrollment_id}")
async def get_enrollment(enrollment_id: EnrollmentId, pipeline: RequestPipeline) -> JSONResponse:
    envelope = await pipeline.send(GetEnrollmentByIdQuery(id=enrollment_id))
    if envelope is None:
        envelope = ApiResponse.not_found(
            f"Enrollment with ID {enrollment_id} not found.", ErrorCode.ENROLLMENT_NOT_FOUND
        )
    return as_json_response(envelope)


@router.post("", status_code=201)
async def create_enrollment(command: CreateEnrollmentCommand, pipeline: RequestPipeline) -> JSONResponse:
    return as_json_response(await pipeline.send(command))


@router.put("/{enrollment_id}")
async def update_enrollment(
    enrollment_id: EnrollmentId,
    command: UpdateEnrollmentCommand,
    pipeline: RequestPipeline,
) -> JSONResponse:
    if command.id != enrollment_id:
        return id_mismatch("Enrollment")
    return as_json_response(await pipeline.send(command))


@router.delete("/{enrollment_id}")
async def delete_enrollment(enrollment_id: EnrollmentId, pipeline: RequestPipeline) -> JSONResponse:
    return as_json_response(await pipeline.send(DeleteEnrollmentCommand(id=enrollment_id)))
