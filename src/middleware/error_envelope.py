import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from src.config import Settings
from src.errors import ContactsError, StorageError
from src.schemas import ErrorResponse

logger = logging.getLogger("contacts.error")

GENERIC_MESSAGE = "Something went wrong!"


def error_response(status_code, message, error=None):
    body = ErrorResponse(message=message, error=error)
    return JSONResponse(body.model_dump(exclude_none=True), status_code=status_code)


def setup_error_handlers(app: FastAPI, settings: Settings):
    # Must run before the other middleware is added, so the catch-all sits
    # inside CORS and security headers and 500s still get both.

    def internal_error(request: Request, exc: Exception):
        logger.error(
            "unhandled_error method=%s path=%s error_type=%s",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc_info=exc,
        )
        # Exception text only leaves the process in development.
        detail = str(exc) if settings.is_development else None
        return error_response(500, GENERIC_MESSAGE, detail)

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        return internal_error(request, exc)

    @app.exception_handler(ContactsError)
    async def handle_contacts_error(request: Request, exc: ContactsError):
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        # Malformed JSON, non-string fields.
        return error_response(400, "Invalid request")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        response = error_response(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.middleware("http")
    async def catch_unhandled(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            return internal_error(request, exc)
