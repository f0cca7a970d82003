from fastapi import status
from fastapi.responses import JSONResponse

from src.core.common.errors import ErrorCode
from src.core.models import ServiceResponse

HTTP_422_UNPROCESSABLE = getattr(
    status,
    "HTTP_422_UNPROCESSABLE_CONTENT",
    status.HTTP_422_UNPROCESSABLE_ENTITY,
)

ERROR_CODE_STATUS: dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_INPUT: HTTP_422_UNPROCESSABLE,
    ErrorCode.DOMAIN_VIOLATION: HTTP_422_UNPROCESSABLE,
    ErrorCode.UPSTREAM_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def envelope_status_code(envelope: ServiceResponse) -> int:
    if envelope.success:
        return status.HTTP_200_OK
    if envelope.error_code is None:
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return ERROR_CODE_STATUS[envelope.error_code]


def envelope_response(envelope: ServiceResponse) -> JSONResponse:
    return JSONResponse(
        status_code=envelope_status_code(envelope),
        content=envelope.model_dump(mode="json"),
    )
