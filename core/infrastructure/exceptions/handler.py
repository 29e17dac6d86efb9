import traceback
from typing import Any, Dict, List

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.domain.exceptions import (
    AuthenticationError,
    DeliveryError,
    NotificationRelayError,
    ValidationError,
)

from ..factory import get_data_sanitizer


def normalize_error_detail(detail: Any) -> str:
    """Normalize an error detail to a single string for the `error` field.

    Args:
        detail: The raw error detail, which can be a string, dictionary, or list.

    Returns:
        A human readable string.
    """
    if isinstance(detail, str):
        return detail

    if isinstance(detail, dict):
        return "; ".join(str(value) for value in detail.values())

    if hasattr(detail, "__iter__"):
        return "; ".join(str(item) for item in detail)

    return str(detail)


def describe_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """Flatten FastAPI/Pydantic validation errors into one message.

    Args:
        errors: The list returned by `RequestValidationError.errors()`.

    Returns:
        Messages of the form "<msg> in <field>", joined with "; ".
    """
    messages = []
    for error in errors:
        field = ".".join(str(x) for x in error.get("loc", ()) if x != "body")
        msg = error.get("msg", "Invalid value")
        messages.append(f"{msg} in {field}" if field else msg)
    return "; ".join(messages) or "Invalid request body"


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for the FastAPI application.

    Converts every error reaching the request boundary into the JSON
    shapes the admin panel expects:

    - caller errors (400/401/404/405): ``{"error": ...}``
    - delivery failures and unexpected errors (500): ``{"success": false, "error": ...}``

    Sensitive information is sanitized before logging.

    Args:
        request: The incoming FastAPI request object.
        exc: The exception that was caught.

    Returns:
        A `JSONResponse` with the error body and matching HTTP status code.
    """
    exc_type = type(exc).__name__
    sanitizer = get_data_sanitizer()
    exc_msg = sanitizer.sanitize_exception_for_logging(exc)

    if isinstance(exc, ValidationError):
        logger.warning(f"🟠 Rejected {request.method} {request.url.path}: {exc_msg}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"error": exc.detail}
        )

    if isinstance(exc, RequestValidationError):
        detail = describe_validation_errors(exc.errors())
        logger.warning(f"🟠 Malformed request body: {sanitizer.sanitize_for_logging(detail)}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"error": detail}
        )

    if isinstance(exc, AuthenticationError):
        logger.warning(f"🔒 Unauthorized {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": exc.detail},
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if isinstance(exc, DeliveryError):
        logger.error(f"📝 DeliveryError -> {exc_msg}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": exc.detail},
        )

    if isinstance(exc, NotificationRelayError):
        logger.error(f"📝 {exc_type} -> {exc_msg}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": exc.detail},
        )

    if isinstance(exc, StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": normalize_error_detail(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    # For all other unhandled exceptions, log and return a generic 500 error
    tb = traceback.extract_tb(exc.__traceback__)
    if tb:
        last_frame = tb[-1]
        location = f'File "{last_frame.filename}", line {last_frame.lineno}, in {last_frame.name}'
    else:
        location = "No traceback available"

    logger.critical(
        f"☢️ Unhandled exception -> {exc_type}: {exc_msg}\nLocation: {location}"
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"},
    )
