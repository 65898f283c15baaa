import base64
import hashlib
import hmac
import secrets
from typing import Optional

SECRET_COOKIE = "_csrf"
TOKEN_COOKIE = "XSRF-TOKEN"
TOKEN_HEADER = "X-CSRF-Token"
TOKEN_HEADERS = ("x-csrf-token", "x-xsrf-token")
TOKEN_FIELD = "_csrf"

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})

_SALT_BYTES = 12


def create_secret() -> str:
    return secrets.token_urlsafe(32)


def _sign(secret, salt):
    digest = hmac.new(secret.encode(), salt.encode(), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode()


def create_token(secret: str) -> str:
    """Issue a new token bound to ``secret``; every call uses a fresh salt."""
    salt = secrets.token_urlsafe(_SALT_BYTES)
    return f"{salt}.{_sign(secret, salt)}"


def verify_token(secret: Optional[str], token: Optional[str]) -> bool:
    if not secret or not token:
        return False
    salt, sep, signature = token.partition(".")
    if not sep or not salt or not signature:
        return False
    return hmac.compare_digest(_sign(secret, salt).encode(), signature.encode())
