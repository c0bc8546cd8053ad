"""
Error taxonomy and the uniform JSON error envelope.

Every failure a client can see is a ``PortalError`` subclass carrying its HTTP
status, a public message, and optionally a list of ``{field, message}``
details. The handlers registered by ``register_exception_handlers`` turn them
into ``{"error": ..., "details": [...]}`` bodies. Anything else is logged and
answered with a fixed 500 message.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_MESSAGE = "An unexpected error occurred. Please try again later."


class PortalError(Exception):
    status_code = 500
    message = INTERNAL_MESSAGE

    def __init__(self, message: str | None = None, details: list[dict[str, str]] | None = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationFailed(PortalError):
    status_code = 400
    message = "Validation failed"


class Unauthenticated(PortalError):
    status_code = 401
    message = "Access denied. No token provided."


class InvalidToken(PortalError):
    status_code = 400
    message = "Invalid token."


class Forbidden(PortalError):
    status_code = 403
    message = "Access denied. Insufficient permissions."


class NotFound(PortalError):
    status_code = 404
    message = "Not found"


class Conflict(PortalError):
    status_code = 409
    message = "Conflict"


def field_error(field: str, message: str) -> dict[str, str]:
    return {"field": field, "message": message}


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unknown routes and unsupported methods raised by the router itself.
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Body that is not a JSON object, bad path params and the like.
    details = [
        field_error(".".join(str(p) for p in err["loc"] if p != "body") or "body", err["msg"])
        for err in exc.errors()
    ]
    return await portal_error_handler(request, ValidationFailed(details=details))


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Something went wrong"})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unexpected error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": INTERNAL_MESSAGE})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
