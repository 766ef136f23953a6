import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Access log; requests slower than ``slow_request_seconds`` log at WARNING."""

    def __init__(self, app, slow_request_seconds: float = 1.0):
        super().__init__(app)
        self.slow_request_seconds = slow_request_seconds

    async def dispatch(self, request: Request, call_next):
        start = time.monotonic()
        client = request.client.host if request.client else "-"

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s failed after %.3fs (client %s)",
                request.method,
                request.url.path,
                time.monotonic() - start,
                client,
            )
            raise

        duration = time.monotonic() - start
        level = logging.WARNING if duration >= self.slow_request_seconds else logging.INFO
        logger.log(
            level,
            "%s %s -> %s (%.3fs) client=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration,
            client,
        )

        return response
