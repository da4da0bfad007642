"""Problem+JSON utilities and global exception handlers.

Defines the RFC7807 media type and handler callables that render domain
errors, HTTP errors, request validation failures and storage failures as
application/problem+json responses.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from formbuilder.logic.errors import FormBuilderError, ServerError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def problem_response(problem: dict, status_code: int) -> JSONResponse:
    return JSONResponse(problem, status_code=status_code, media_type=PROBLEM_MEDIA_TYPE)


async def handle_domain_error(request: Request, exc: FormBuilderError) -> JSONResponse:  # noqa: D401
    logger.info(
        "request_rejected",
        extra={"code": exc.code, "status": exc.status, "path": request.url.path},
    )
    return problem_response(exc.to_problem(), exc.status)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # noqa: D401
    status_code = int(getattr(exc, "status_code", 500) or 500)
    if isinstance(exc.detail, dict):
        problem = dict(exc.detail)
    else:
        problem = {"title": "Error", "status": status_code, "detail": str(exc.detail or "")}
    return JSONResponse(
        problem,
        status_code=status_code,
        media_type=PROBLEM_MEDIA_TYPE,
        headers=getattr(exc, "headers", None),
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    problem = {
        "title": "Invalid Request",
        "status": 422,
        "detail": "Request validation failed",
        "code": "VALIDATION_ERROR",
        # jsonable: pydantic may put exception objects under ctx
        "errors": [
            {"loc": list(err.get("loc", ())), "msg": str(err.get("msg", "")), "type": str(err.get("type", ""))}
            for err in exc.errors()
        ],
    }
    return problem_response(problem, 422)


async def handle_storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:  # noqa: D401
    logger.error("storage_error path=%s", request.url.path, exc_info=True)
    return problem_response(ServerError("Storage operation failed").to_problem(), 500)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error", exc_info=True)
    return problem_response(ServerError().to_problem(), 500)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "handle_domain_error",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_storage_error",
    "handle_unexpected_error",
    "problem_response",
]
