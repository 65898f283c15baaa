from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import Settings
from src.db import Store
from src.middleware.csrf import setup_csrf_middleware
from src.middleware.error_envelope import setup_error_handlers
from src.middleware.request_logging import REQUEST_ID_HEADER, setup_request_logging_middleware
from src.middleware.security_headers import setup_security_headers_middleware
from src.routes.contacts import router as contacts_router
from src.schemas import HealthResponse
from src.services.csrf import TOKEN_HEADER


def create_app(settings: Settings, store: Store) -> FastAPI:
    # Starlette runs the last middleware added first. Per request: security
    # headers -> CORS -> request logging -> CSRF -> error catch-all -> routes.
    app = FastAPI(title="Contacts API", docs_url=None, redoc_url=None)
    app.state.store = store

    setup_error_handlers(app, settings)
    setup_csrf_middleware(app, settings)
    setup_request_logging_middleware(app, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-CSRF-Token", "X-XSRF-Token", REQUEST_ID_HEADER],
        expose_headers=[TOKEN_HEADER, REQUEST_ID_HEADER],
    )

    setup_security_headers_middleware(app)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(timestamp=datetime.now(timezone.utc))

    app.include_router(contacts_router, prefix="/contacts", tags=["contacts"])

    return app
