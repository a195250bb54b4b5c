"""
Error taxonomy and the handlers that render every failure as ``{"error": ...}``.

- 400 BadRequestError / request validation (field issue list)
- 401 AuthenticationError
- 403 AuthorizationError
- 404 NotFoundError
- 409 ConflictError (and unique-key IntegrityErrors)
- 500 anything else, logged server-side only
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

log = structlog.get_logger()


class OrgBoardError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(OrgBoardError):
    status_code = 400
    default_message = "Bad request"


class AuthenticationError(OrgBoardError):
    status_code = 401
    default_message = "Unauthorized"


class AuthorizationError(OrgBoardError):
    status_code = 403
    default_message = "Access denied"


class NotFoundError(OrgBoardError):
    status_code = 404
    default_message = "Not found"


class ConflictError(OrgBoardError):
    status_code = 409
    default_message = "Conflict"


def _error_response(status_code: int, error, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error}, headers=headers)


async def orgboard_error_handler(request: Request, exc: OrgBoardError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("http.app_error", error=exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return _error_response(exc.status_code, exc.message, headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, exc.detail, getattr(exc, "headers", None))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    issues = [
        {
            "loc": list(err.get("loc", ())),
            "msg": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    return _error_response(400, jsonable_encoder(issues))


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    log.warning("db.integrity_error", error=str(exc.orig))
    return _error_response(409, "Resource conflicts with an existing record")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("http.unhandled_error", error_type=type(exc).__name__)
    return _error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OrgBoardError, orgboard_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
