import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./contacts.db"


def _env_int(name: str, default: int, fallback: str | None = None) -> int:
    raw = os.environ.get(name)
    if raw is None and fallback:
        raw = os.environ.get(fallback)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    host: str = "0.0.0.0"
    http_port: int = 4000
    https_port: int = 8444
    ssl_cert_path: str = "/server.crt"
    ssl_key_path: str = "/privatekey.pem"
    cors_origin: str = "https://localhost:8443"
    app_env: str = "local"
    log_level: str = "INFO"
    request_log_enabled: bool = True

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL).strip(),
            host=os.environ.get("HOST", "0.0.0.0"),
            http_port=_env_int("HTTP_PORT", 4000, fallback="PORT"),
            https_port=_env_int("HTTPS_PORT", 8444),
            ssl_cert_path=os.environ.get("SSL_CERT_PATH", "/server.crt"),
            ssl_key_path=os.environ.get("SSL_KEY_PATH", "/privatekey.pem"),
            cors_origin=os.environ.get("CORS_ORIGIN", "https://localhost:8443").strip(),
            app_env=os.environ.get("APP_ENV", "local").strip().lower(),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            request_log_enabled=_env_bool("REQUEST_LOG_ENABLED", True),
        )
