import secrets

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from config.base import Settings
from core.domain.exceptions import AuthenticationError

API_KEY_HEADER_NAME = "X-API-Key"


class OperatorAPIKeyHeader(APIKeyHeader):
    """API key scheme for operator-only endpoints.

    Extends `APIKeyHeader` so the header shows up in the OpenAPI documentation
    while leaving enforcement to `require_operator_key`, which only applies
    when an admin key is configured.
    """

    def __init__(self) -> None:
        super().__init__(
            name=API_KEY_HEADER_NAME,
            scheme_name="OperatorAPIKey",
            description="Required only when ADMIN_API_KEY is configured.",
            auto_error=False,
        )

    async def __call__(self, request: Request) -> str | None:
        """Extract the key from the request using the parent class logic."""
        return await super().__call__(request)


operator_api_key = OperatorAPIKeyHeader()


def get_app_settings(request: Request) -> Settings:
    """Resolve the settings the application was built with from `app.state`."""
    settings: Settings | None = getattr(request.app.state, "settings", None)
    if settings is None:
        raise RuntimeError("Settings are not initialized")
    return settings


async def require_operator_key(
    api_key: str | None = Depends(operator_api_key),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Gate a route behind the configured operator API key.

    Without `admin_api_key` the route stays open, matching the unauthenticated
    internal admin-tool deployment.

    Raises
    ------
    AuthenticationError
        If a key is configured and the request carries no key or a different one.
    """
    expected = settings.admin_api_key
    if not expected:
        return

    if not api_key or not secrets.compare_digest(
        api_key.encode("utf-8"), expected.encode("utf-8")
    ):
        raise AuthenticationError("Invalid or missing API key")
