"""
Maps domain errors to HTTP responses.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from shiftbook.core.errors import DomainError, ErrorCode
from shiftbook.core.logging import get_logger

logger = get_logger(__name__)

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.BOOKING_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.SHIFT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ADMIN_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.SHIFT_FULL: status.HTTP_409_CONFLICT,
    ErrorCode.ADMIN_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCode.ALLOCATION_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.CAPACITY_ADJUST_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
    logger.info("domain_error", code=exc.code.value, status_code=status_code)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code.value},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
