import logging
import time
import uuid

from fastapi import FastAPI, Request

from src.config import Settings

logger = logging.getLogger("contacts.request")

REQUEST_ID_HEADER = "X-Request-ID"


def setup_request_logging_middleware(app: FastAPI, settings: Settings):
    enabled = settings.request_log_enabled

    @app.middleware("http")
    async def log_request(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        if enabled:
            logger.info(
                "request method=%s path=%s status=%s duration_ms=%.2f request_id=%s",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - start) * 1000,
                request_id,
            )
        return response
