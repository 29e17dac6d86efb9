from .base import setup_logging
from .context import RequestContextLogger
from .middleware import REQUEST_ID_HEADER, RequestTrackingMiddleware

__all__ = [
    "setup_logging",
    "RequestContextLogger",
    "RequestTrackingMiddleware",
    "REQUEST_ID_HEADER",
]
