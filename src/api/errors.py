"""Exception handlers rendering every failure as ``{"error": CODE, "detail": ...}``."""

from __future__ import annotations

from typing import Final

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.errors import ErrorCode, SchemeFlowError

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

_STATUS_BY_CODE: Final[dict[ErrorCode, int]] = {
    ErrorCode.SCHEME_NOT_FOUND: 404,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INVALID_ELIGIBILITY_INPUTS: 422,
    ErrorCode.VALIDATION_FAILED: 422,
    ErrorCode.APPLICATION_INCOMPLETE: 409,
    ErrorCode.APPLICATION_ALREADY_SUBMITTED: 409,
    ErrorCode.SESSION_EXPIRED: 410,
    ErrorCode.INTERNAL_ERROR: 500,
}


def status_for(code: ErrorCode) -> int:
    return _STATUS_BY_CODE.get(code, 500)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(SchemeFlowError)
    async def scheme_flow_error(request: Request, exc: SchemeFlowError) -> ORJSONResponse:
        status_code = status_for(exc.code)
        if status_code >= 500:
            logger.error("api.internal_error", path=request.url.path, code=str(exc.code), detail=exc.message)
        else:
            logger.info("api.request_rejected", path=request.url.path, code=str(exc.code))
        return ORJSONResponse(jsonable_encoder(exc.to_dict()), status_code=status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(_: Request, exc: RequestValidationError) -> ORJSONResponse:
        return ORJSONResponse(
            {
                "error": str(ErrorCode.VALIDATION_FAILED),
                "detail": "Request body or parameters are invalid",
                "errors": jsonable_encoder(exc.errors()),
            },
            status_code=422,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_: Request, exc: StarletteHTTPException) -> ORJSONResponse:
        return ORJSONResponse({"error": f"HTTP_{exc.status_code}", "detail": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("api.unhandled_exception", path=request.url.path, error_type=type(exc).__name__)
        return ORJSONResponse(
            {"error": str(ErrorCode.INTERNAL_ERROR), "detail": "Unexpected error"},
            status_code=500,
        )
