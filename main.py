import uvicorn
from loguru import logger

from config.base import Settings, get_settings
from core.infrastructure.logging import RequestTrackingMiddleware, setup_logging


def create_app(settings: Settings | None = None, provider=None):
    """Create and configure FastAPI application instance

    Sets up application lifespan events, middleware, exception handlers,
    and API routers.

    Parameters
    ----------
    settings : Settings | None
        Settings to build the app with; defaults to the cached environment settings.
    provider : PushProvider | None
        Pre-built push provider. When given, credential resolution is skipped.

    Returns
    -------
    FastAPI
        Deployment-ready FastAPI instance.
    """
    from contextlib import AsyncExitStack, asynccontextmanager

    from fastapi import FastAPI
    from fastapi.exceptions import RequestValidationError
    from fastapi.middleware.cors import CORSMiddleware
    from starlette.exceptions import HTTPException as StarletteHTTPException

    from core.domain.exceptions import CredentialError, NotificationRelayError
    from core.infrastructure.exceptions import global_exception_handler
    from core.infrastructure.security import API_KEY_HEADER_NAME
    from core.presentation.health import router as health_router
    from notifications.infrastructure.factory import (
        APP_STATE_PROVIDER,
        open_push_provider,
    )
    from notifications.presentation import router as notification_router

    settings = settings or get_settings()

    @asynccontextmanager
    async def custom_lifespan(app):
        """Manage application startup and shutdown lifecycle.

        Resolves provider credentials exactly once and publishes the provider
        on `app.state`. A credential failure aborts startup so the process
        never accepts traffic it cannot deliver.

        Parameters
        ----------
        app : FastAPI
            FastAPI application instance.

        Yields
        ------
        None
            Control to application after startup, and before shutdown.

        Raises
        ------
        CredentialError
            If push provider credentials cannot be resolved.
        """
        setup_logging()

        async with AsyncExitStack() as stack:
            if provider is not None:
                push_provider = provider
            else:
                try:
                    logger.debug(
                        f"🔧 Initializing '{settings.notification_provider}' push provider..."
                    )
                    push_provider = stack.enter_context(open_push_provider(settings))
                except CredentialError as e:
                    logger.critical(f"🔴 Push provider credentials unavailable: {e}")
                    raise

            setattr(app.state, APP_STATE_PROVIDER, push_provider)

            logger.info(
                f"🟢 Application startup completed (provider: {push_provider.name}, "
                f"topic: '{settings.broadcast_topic}')."
            )
            logger.info("🚀✨ Notification relay is now running!")

            yield

            logger.debug("🔧 Starting shutdown cleanup...")

        logger.debug("👋 Application shutting down...")

    app = FastAPI(title="Notification Relay", lifespan=custom_lifespan)
    app.state.settings = settings

    app.add_middleware(RequestTrackingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept", API_KEY_HEADER_NAME],
        allow_credentials=True,
    )

    app.add_exception_handler(NotificationRelayError, global_exception_handler)
    app.add_exception_handler(RequestValidationError, global_exception_handler)
    app.add_exception_handler(StarletteHTTPException, global_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(notification_router)
    app.include_router(health_router)

    return app


if __name__ == "__main__":
    """Application entry point for direct execution.

    Configures logging with Loguru and starts Uvicorn on the configured port.
    """
    setup_logging()
    settings = get_settings()
    logger.debug(
        f"🟢 Starting notification relay in '{settings.environment.upper()}' mode on port {settings.port}!"
    )
    uvicorn.run(
        "main:create_app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        factory=True,
        log_config=None,
    )
