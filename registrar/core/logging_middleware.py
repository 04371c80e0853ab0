import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("registrar.requests")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request and expose the handling time as a header."""

    async def dispatch(self, request: Request, call_next):
        start = time.monotonic()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s -> unhandled error after %.1fms",
                request.method,
                request.url.path,
                (time.monotonic() - start) * 1000,
            )
            raise

        elapsed_ms = (time.monotonic() - start) * 1000
        response.headers["X-Process-Time-Ms"] = f"{elapsed_ms:.1f}"
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "%s %s -> %s (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )

        return response
