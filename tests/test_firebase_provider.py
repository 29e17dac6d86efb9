import pytest
from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging

from core.domain.exceptions import DeliveryError
from notifications.application.rules import DispatchNotificationRule
from notifications.domain.entities import BroadcastRequest, DeviceTarget, TopicTarget
from notifications.infrastructure import services
from notifications.infrastructure.services import (
    FirebasePushProvider,
    LoggingPushProvider,
    build_message,
)

FIREBASE_APP = object()


class RecordingSend:
    def __init__(self, result="projects/bigg-boss-vote/messages/42", error=None):
        self.result = result
        self.error = error
        self.calls = []

    def __call__(self, message, dry_run=False, app=None):
        self.calls.append((message, app))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def fake_send(monkeypatch):
    recorder = RecordingSend()
    monkeypatch.setattr(services.messaging, "send", recorder)
    return recorder


def test_build_message_for_topic():
    message = build_message(
        BroadcastRequest(
            title="Vote now",
            body="Cast your vote!",
            target=TopicTarget(name="all-users"),
        )
    )

    assert isinstance(message, messaging.Message)
    assert message.topic == "all-users"
    assert message.token is None
    assert message.notification.title == "Vote now"
    assert message.notification.body == "Cast your vote!"
    assert message.data == {"type": "general"}


def test_build_message_for_device():
    message = build_message(
        BroadcastRequest(
            title="t",
            body="m",
            category="elimination",
            target=DeviceTarget(token="device-token-1"),
        )
    )

    assert message.token == "device-token-1"
    assert message.topic is None
    assert message.data == {"type": "elimination"}


@pytest.mark.asyncio
async def test_firebase_provider_sends_with_its_app(fake_send):
    provider = FirebasePushProvider(FIREBASE_APP)

    message_id = await provider.send(
        BroadcastRequest(title="t", body="m", target=TopicTarget(name="all-users"))
    )

    assert message_id == "projects/bigg-boss-vote/messages/42"
    assert len(fake_send.calls) == 1
    message, app = fake_send.calls[0]
    assert app is FIREBASE_APP
    assert message.topic == "all-users"


@pytest.mark.asyncio
async def test_firebase_error_text_reaches_caller(fake_send):
    fake_send.error = firebase_exceptions.InvalidArgumentError(
        "The registration token is not a valid FCM registration token"
    )

    with pytest.raises(DeliveryError) as exc_info:
        await DispatchNotificationRule(
            title="t",
            body="m",
            token="not-a-token",
            topic="all-users",
            provider=FirebasePushProvider(FIREBASE_APP),
        ).execute()

    assert (
        exc_info.value.detail
        == "The registration token is not a valid FCM registration token"
    )
    assert len(fake_send.calls) == 1


@pytest.mark.asyncio
async def test_logging_provider_returns_test_id(fake_send):
    message_id = await LoggingPushProvider().send(
        BroadcastRequest(title="t", body="m", target=TopicTarget(name="all-users"))
    )

    assert message_id.startswith("test-")
    assert message_id.removeprefix("test-").isdigit()
    assert fake_send.calls == []
