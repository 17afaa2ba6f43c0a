"""Exception handlers — every failure leaves as a {code, message, result} envelope.

Learn: Handlers are registered on the app in create_app(). Order of
precedence is by exception class:
- AppError (our domain errors) → its own status and message
- RequestValidationError → 400 with the first violated rule's message
- Starlette HTTPException (unknown route, wrong method) → its status
- anything else → 500 with a generic message; details only go to the log
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rentdesk.errors import AppError, Unauthenticated
from rentdesk.schemas.envelope import error_body

logger = structlog.get_logger()


def first_validation_message(exc: RequestValidationError) -> str:
    """Human-readable message for the first failed validation rule."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    msg = str(err.get("msg", "Invalid request"))
    # Custom validators raise ValueError; pydantic prefixes their message.
    if err.get("type") == "value_error":
        return msg.removeprefix("Value error, ")
    field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
    return f"{field}: {msg}" if field else msg


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.message),
        headers=headers,
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=error_body(400, first_validation_message(exc)),
    )


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "request.unhandled_error",
        method=request.method,
        path=request.url.path,
        error=str(exc),
    )
    return JSONResponse(
        status_code=500,
        content=error_body(500, "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
