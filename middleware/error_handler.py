"""Exception handlers producing the `{"success": false, "message": ...}` error envelope."""

import logfire

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bson.errors import InvalidId
from pymongo.errors import PyMongoError

from utils.errors import AppError
from utils.http_status import status_message
from utils.mongo_errors import format_mongo_error


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build an error response in the application envelope.

    Args:
        status_code (int): HTTP status code.
        message (str): Message for the client.

    Returns:
        JSONResponse: The response.
    """
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if not exc.is_operational:
        logfire.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
        return error_response(exc.status_code, status_message(exc.status_code))

    return error_response(exc.status_code, exc.message)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report the first request validation failure as a 400."""
    errors = exc.errors()

    if not errors:
        return error_response(status.HTTP_400_BAD_REQUEST, status_message(400))

    first_error = errors[0]
    # loc looks like ("body", "email"), or ("body", 12) for a JSON decode error
    location = [
        part for part in first_error.get("loc", ()) if isinstance(part, str) and part != "body"
    ]
    message = first_error.get("msg", status_message(400))

    if location:
        message = f"{'.'.join(location)}: {message}"

    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def mongo_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code, message = format_mongo_error(exc)

    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logfire.error(f"Database error on {request.method} {request.url.path}: {exc}")
    else:
        logfire.warning(f"Database rejected request on {request.url.path}: {message}")

    return error_response(status_code, message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else status_message(exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logfire.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, status_message(500))


def register_exception_handlers(app: FastAPI) -> None:
    """Register every application exception handler on `app`.

    Args:
        app (FastAPI): The application.
    """
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(PyMongoError, mongo_error_handler)
    app.add_exception_handler(InvalidId, mongo_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
