import json
import logging
from urllib.parse import parse_qs

from fastapi import FastAPI, Request
from starlette.responses import Response

from src.config import Settings
from src.errors import CsrfError
from src.middleware.error_envelope import error_response
from src.services.csrf import (
    SAFE_METHODS,
    SECRET_COOKIE,
    TOKEN_COOKIE,
    TOKEN_FIELD,
    TOKEN_HEADER,
    TOKEN_HEADERS,
    create_secret,
    create_token,
    verify_token,
)

logger = logging.getLogger(__name__)


async def _submitted_token(request: Request):
    # Header first, then a `_csrf` field in a JSON or form body.
    for header in TOKEN_HEADERS:
        token = request.headers.get(header)
        if token:
            return token

    content_type = request.headers.get("content-type", "")
    body = await request.body()
    if not body:
        return None
    if content_type.startswith("application/json"):
        try:
            payload = json.loads(body)
        except ValueError:
            return None
        if isinstance(payload, dict) and isinstance(payload.get(TOKEN_FIELD), str):
            return payload[TOKEN_FIELD]
    elif content_type.startswith("application/x-www-form-urlencoded"):
        values = parse_qs(body.decode("latin-1")).get(TOKEN_FIELD)
        if values:
            return values[0]
    return None


def _issue_token(response: Response, secret, is_new_secret, secure):
    if is_new_secret:
        response.set_cookie(
            key=SECRET_COOKIE,
            value=secret,
            httponly=True,
            secure=secure,
            samesite="lax",
            path="/",
        )
    token = create_token(secret)
    response.set_cookie(
        key=TOKEN_COOKIE,
        value=token,
        httponly=True,
        secure=secure,
        samesite="lax",
        path="/",
    )
    response.headers[TOKEN_HEADER] = token


def setup_csrf_middleware(app: FastAPI, settings: Settings):
    """Reject unsafe methods without a token signed by the `_csrf` cookie secret."""
    secure = settings.is_production

    @app.middleware("http")
    async def csrf_protect(request: Request, call_next):
        secret = request.cookies.get(SECRET_COOKIE)
        is_new_secret = not secret

        if request.method not in SAFE_METHODS:
            token = await _submitted_token(request)
            if not verify_token(secret, token):
                logger.warning(
                    "csrf_rejected method=%s path=%s",
                    request.method,
                    request.url.path,
                )
                error = CsrfError()
                response = error_response(error.status_code, error.message)
                if is_new_secret:
                    secret = create_secret()
                _issue_token(response, secret, is_new_secret, secure)
                return response

        response = await call_next(request)
        if is_new_secret:
            secret = create_secret()
        _issue_token(response, secret, is_new_secret, secure)
        return response
