"""Request/response logging middleware."""
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from profile_api.logging_config import get_logger

logger = get_logger("profile_api.requests")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request with status and duration.

    Cookies and bodies are never logged; they carry session and Google tokens.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        method = request.method
        path = request.url.path
        client = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception("%s %s [%s] failed after %.0fms", method, path, client, duration_ms)
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        log = logger.warning if response.status_code >= 500 else logger.info
        log("%s %s [%s] %d (%.0fms)", method, path, client, response.status_code, duration_ms)
        return response
