import asyncio

import click


def load_settings(**overrides):
    """Load settings from the environment, applying non-empty CLI overrides.

    Returns
    -------
    Settings
        Settings instance for the command.
    """
    from config.base import get_settings

    settings = get_settings()
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if overrides:
        settings = settings.model_copy(update=overrides)
    return settings


@click.group()
def cli():
    """Management command interface for the notification relay.

    Provides subcommands for running the server, sending notifications
    from the shell, and checking provider credentials.
    """
    pass


@cli.command()
@click.option("--host", default=None, help="Interface to bind (defaults to HOST).")
@click.option("--port", type=int, default=None, help="Port to listen on (overrides PORT).")
@click.option("--reload/--no-reload", default=None, help="Auto-reload on code changes.")
def runserver(host, port, reload):
    """Start the notification relay HTTP server.

    Examples
    --------
    Run on the default port (PORT or 3001):
        $ python manage.py runserver

    Run on a specific port:
        $ python manage.py runserver --port 3002
    """
    import uvicorn
    from loguru import logger

    from core.infrastructure.logging import setup_logging

    setup_logging()
    settings = load_settings(host=host, port=port, debug=reload)
    logger.debug(
        f"🟢 Starting notification relay in '{settings.environment.upper()}' mode "
        f"on {settings.host}:{settings.port}!"
    )
    uvicorn.run(
        "main:create_app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        factory=True,
        log_config=None,
    )


@cli.command()
@click.option("--title", "-t", required=True, help="Notification title.")
@click.option("--message", "-m", required=True, help="Notification body.")
@click.option(
    "--type",
    "category",
    default="general",
    show_default=True,
    help="Category forwarded to clients as data.type.",
)
@click.option("--token", default=None, help="Device token; omit to broadcast to the topic.")
@click.option("--topic", default=None, help="Broadcast topic (defaults to BROADCAST_TOPIC).")
@click.option("--dry-run", is_flag=True, help="Log the notification instead of sending it.")
def send(title, message, category, token, topic, dry_run):
    """Send a notification from the command line.

    Uses the same target resolution and provider setup as the HTTP API.

    Examples
    --------
    Broadcast to every subscribed client:
        $ python manage.py send -t "Vote now" -m "Cast your vote!" --type voting
    """
    from core.domain.exceptions import NotificationRelayError
    from notifications.application.rules import DispatchNotificationRule
    from notifications.infrastructure.factory import open_push_provider

    settings = load_settings(
        broadcast_topic=topic, notification_provider="log" if dry_run else None
    )

    async def dispatch(provider):
        rule = DispatchNotificationRule(
            title=title,
            body=message,
            category=category,
            token=token,
            topic=settings.broadcast_topic,
            provider=provider,
        )
        return await rule.execute()

    try:
        with open_push_provider(settings) as provider:
            result = asyncio.run(dispatch(provider))
    except NotificationRelayError as e:
        raise click.ClickException(e.detail) from e

    click.echo(f"Notification sent: {result.message_id}")


@cli.command("check-credentials")
def check_credentials():
    """Resolve Firebase credentials the same way server startup does.

    Exits non-zero if no usable credential is found.
    """
    from core.domain.exceptions import CredentialError
    from notifications.infrastructure.credentials import resolve_credentials

    settings = load_settings()
    try:
        resolved = resolve_credentials(settings)
    except CredentialError as e:
        raise click.ClickException(e.detail) from e

    click.echo(
        f"Credentials resolved from {resolved.mode} "
        f"(project: {resolved.project_id or 'unknown'})"
    )


if __name__ == "__main__":
    """CLI entry point for direct script execution.

    Initializes Click command group and processes command-line arguments.
    """
    cli()
