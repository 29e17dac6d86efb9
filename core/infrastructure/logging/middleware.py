import time
from typing import Callable

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from ..factory import get_data_sanitizer
from .context import RequestContextLogger, new_request_id

REQUEST_ID_HEADER = "X-Request-ID"


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    """
    Request tracking middleware that adds logging and context
    to every API request. This middleware:

    1. Generates unique request IDs for tracing
    2. Logs request/response information with timing
    3. Echoes the request ID back in the response headers
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = new_request_id()
        sanitizer = get_data_sanitizer()

        user_agent = request.headers.get("user-agent", "Unknown")
        request_context = {
            "client_ip": self._get_client_ip(request),
            "user_agent": user_agent[:100],
            "method": request.method,
            "path": str(request.url.path),
        }

        async with RequestContextLogger(request_id=request_id, **request_context):
            logger.info(f"🔄 Incoming {request.method} request to {request.url.path}")

            if request.url.query:
                logger.debug(
                    sanitizer.sanitize_for_logging(
                        f"🔍 Query parameters: {request.url.query}"
                    )
                )

            started = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    f"💥 Request failed: {type(e).__name__}: "
                    f"{sanitizer.sanitize_exception_for_logging(e)}"
                )
                raise

            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"✅ Completed {request.method} {request.url.path} "
                f"-> {response.status_code} in {elapsed_ms:.1f}ms"
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response

    def _get_client_ip(self, request: Request) -> str:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        if request.client:
            return request.client.host

        return "unknown"
