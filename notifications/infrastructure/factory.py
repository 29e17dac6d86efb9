from contextlib import contextmanager
from typing import Iterator

from fastapi import Request

from config.base import Settings

from ..application.ports import PushProvider
from .credentials import close_firebase_app, initialize_firebase_app
from .services import FirebasePushProvider, LoggingPushProvider

APP_STATE_PROVIDER = "push_provider"
PROVIDERS = ("firebase", "log")


@contextmanager
def open_push_provider(settings: Settings) -> Iterator[PushProvider]:
    """Build the push provider selected by `settings.notification_provider`.

    Credentials are resolved once, here. The Firebase app is released when
    the context exits.

    Parameters
    ----------
    settings : Settings
        Application settings.

    Yields
    ------
    PushProvider
        Provider shared read-only by every request for the process lifetime.

    Raises
    ------
    CredentialError
        If Firebase credentials cannot be resolved.
    ValueError
        If the provider name is unknown.
    """
    provider_name = settings.notification_provider.lower()

    if provider_name == "log":
        yield LoggingPushProvider()
        return

    if provider_name != "firebase":
        raise ValueError(
            f"Unknown notification provider '{settings.notification_provider}', "
            f"expected one of {', '.join(PROVIDERS)}"
        )

    app = initialize_firebase_app(settings)
    try:
        yield FirebasePushProvider(app)
    finally:
        close_firebase_app(app)


def get_push_provider(request: Request) -> PushProvider:
    """Resolve the push provider from application state.

    Returns
    -------
    PushProvider
        Provider created during application startup.
    """
    provider: PushProvider | None = getattr(request.app.state, APP_STATE_PROVIDER, None)
    if provider is None:
        raise RuntimeError("Push provider is not initialized")
    return provider
