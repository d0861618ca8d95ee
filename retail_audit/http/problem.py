"""Problem+JSON rendering and global exception handlers.

Defines the RFC7807 media type and the handler callables registered by the
app factory. Domain errors carry their own status, code and title.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from retail_audit.logic.errors import AuditServiceError, StorageError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def problem_response(problem: dict, status_code: int, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        jsonable_encoder(problem),
        status_code=status_code,
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers,
    )


async def handle_domain_error(request: Request, exc: AuditServiceError) -> JSONResponse:
    if isinstance(exc, StorageError):
        logger.error("storage_failure path=%s detail=%s", request.url.path, exc.detail, exc_info=exc)
    elif exc.status >= 500:
        logger.error("domain_error path=%s code=%s", request.url.path, exc.code, exc_info=exc)
    else:
        logger.info("domain_error path=%s status=%s code=%s", request.url.path, exc.status, exc.code)
    return problem_response(exc.to_problem(), exc.status)


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status_code = int(exc.status_code or 500)
    if isinstance(exc.detail, dict):
        problem = dict(exc.detail)
    else:
        problem = {"title": "Error", "status": status_code, "detail": str(exc.detail or "")}
    headers = {str(k): str(v) for k, v in (exc.headers or {}).items()}
    return problem_response(problem, status_code, headers or None)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    problem = {
        "title": "Invalid Request",
        "status": 422,
        "detail": "Request validation failed",
        "code": "request_invalid",
        "errors": [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
            for err in exc.errors()
        ],
    }
    return problem_response(problem, 422)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return problem_response({"title": "Internal Server Error", "status": 500}, 500)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem_response",
    "handle_domain_error",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
