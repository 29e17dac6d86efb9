from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body returned for caller errors (HTTP 400/401/404/405).

    Attributes
    ----------
    error: str
        Human readable reason the request was rejected.
    """

    error: str


class FailureResponse(ErrorResponse):
    """Body returned when a request fails server-side (HTTP 500).

    Inherits `error` from `ErrorResponse`.

    Attributes
    ----------
    success: bool, default=False
        Always False.
    """

    success: bool = False


class HealthResponse(BaseModel):
    """Liveness probe payload.

    Attributes
    ----------
    status: str, default="OK"
        Constant status marker.
    timestamp: str
        Current UTC time, ISO-8601 with millisecond precision.
    """

    status: str = "OK"
    timestamp: str
