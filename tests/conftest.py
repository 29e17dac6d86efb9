"""
Test configuration and fixtures for the notification relay.

Provides a recording push provider in place of Firebase, settings isolated
from the developer's environment, and a TestClient wired to both.
"""

import os

for credential_var in (
    "GOOGLE_APPLICATION_CREDENTIALS",
    "FIREBASE_SERVICE_ACCOUNT_B64",
    "FIREBASE_PROJECT_ID",
    "GOOGLE_CLOUD_PROJECT",
    "GCLOUD_PROJECT",
    "ADMIN_API_KEY",
):
    os.environ.pop(credential_var, None)

os.environ["LOG_TO_FILE"] = "false"
os.environ["NOTIFICATION_PROVIDER"] = "log"

from typing import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from config.base import Settings  # noqa: E402
from notifications.application.ports import PushProvider  # noqa: E402

FAKE_MESSAGE_ID = "projects/bigg-boss-vote/messages/0:1700000000000000%31bd1c9631bd1c96"


class RecordingPushProvider(PushProvider):
    """Push provider test double that records every send."""

    name = "recording"

    def __init__(self, message_id: str = FAKE_MESSAGE_ID, error: Exception | None = None):
        self.message_id = message_id
        self.error = error
        self.calls = []

    async def send(self, request):
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return self.message_id


def make_settings(**overrides) -> Settings:
    values = {
        "environment": "development",
        "log_to_file": False,
        "notification_provider": "log",
        "broadcast_topic": "all-users",
        "admin_api_key": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def provider() -> RecordingPushProvider:
    return RecordingPushProvider()


@pytest.fixture
def client(settings, provider) -> Generator[TestClient, None, None]:
    """
    Create a test client for making HTTP requests.
    Each test gets a fresh application with the recording provider injected,
    so no credentials are resolved.
    """
    from main import create_app

    with TestClient(create_app(settings=settings, provider=provider)) as test_client:
        yield test_client
