from datetime import UTC, datetime

from fastapi import APIRouter, status

from .responses import HealthResponse

router = APIRouter(tags=["health"])


def utc_timestamp() -> str:
    """Return the current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return (
        datetime.now(tz=UTC)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health():
    """Health check endpoint.

    Does not touch the push provider, so it reports OK even when
    delivery is failing.
    """
    return HealthResponse(timestamp=utc_timestamp())
