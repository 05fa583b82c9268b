"""Map Tablesmith errors onto HTTP responses.

Components raise typed errors; this is the only place they become status
codes and ``{success: false, error, details}`` bodies.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tablesmith.exceptions import ConflictError, NotFoundError, TablesmithError, ValidationError

logger = logging.getLogger(__name__)

STATUS_CODES: list[tuple[type[TablesmithError], int]] = [
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
]


def status_for(exc: TablesmithError) -> int:
    """HTTP status for an error; storage and model failures are 500."""
    for error_type, status_code in STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


def error_body(error: str, details: object = None) -> dict[str, object]:
    body: dict[str, object] = {"success": False, "error": error}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return body


async def tablesmith_error_handler(request: Request, exc: TablesmithError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    details = {"type": exc.__class__.__name__, **exc.context}
    return JSONResponse(status_code=status_code, content=error_body(exc.message, details))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=error_body("Validation error", exc.errors()))


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"{request.method} {request.url.path} raised {exc.__class__.__name__}")
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


def register_error_handlers(app: FastAPI) -> None:
    """Install the error handlers on an app."""
    app.add_exception_handler(TablesmithError, tablesmith_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unexpected_error_handler)
