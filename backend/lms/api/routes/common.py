"""Response helpers shared by the resource routers."""

from fastapi.responses import JSONResponse

from lms.models.envelope import ApiResponse, ErrorModel, as_json_response


def id_mismatch(resource: str) -> JSONResponse:
    """400 for a PUT whose body id differs from the path id."""
    message = f"{resource} ID in the URL and body do not match."
    return as_json_response(
        ApiResponse.validation(ErrorModel.create("Validation Error", message, {"id": message}), message=message)
    )
