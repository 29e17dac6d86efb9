from typing import Any

from loguru import logger

from core.domain.exceptions import DeliveryError, ValidationError
from core.infrastructure.factory import get_data_sanitizer

from ..domain.entities import (
    BroadcastRequest,
    BroadcastTarget,
    DeviceTarget,
    DispatchResult,
    NotificationCategory,
    TopicTarget,
)
from .ports import PushProvider

MISSING_TOPIC_FIELDS = "Missing title or message"
MISSING_DEVICE_FIELDS = "Missing token, title or message"


def resolve_category(category: Any) -> str:
    """Default an absent category to "general" and coerce anything else to a string."""
    if not category:
        return NotificationCategory.GENERAL.value
    if isinstance(category, bool):
        return "true"
    return str(category)


def is_present(value: Any) -> bool:
    """Presence check shared by every required field: None and "" are absent."""
    return value is not None and value != ""


class _DispatchRule:
    """Shared send path: one provider call, failures surfaced as `DeliveryError`."""

    def __init__(
        self,
        title: str | None,
        body: str | None,
        category: Any,
        provider: PushProvider,
    ) -> None:
        self.title = title
        self.body = body
        self.category = resolve_category(category)
        self.provider = provider

    def _target(self) -> BroadcastTarget:
        raise NotImplementedError

    def _validate(self) -> None:
        if not (is_present(self.title) and is_present(self.body)):
            raise ValidationError(MISSING_TOPIC_FIELDS)

    async def execute(self) -> DispatchResult:
        """Validate, build the request, and hand it to the provider exactly once.

        Returns
        -------
        DispatchResult
            Provider-assigned message id and the resolved target.

        Raises
        ------
        ValidationError
            If a required field is missing; the provider is not called.
        DeliveryError
            If the provider raises; the call is not retried.
        """
        self._validate()

        target = self._target()
        request = BroadcastRequest(
            title=self.title,
            body=self.body,
            category=self.category,
            target=target,
        )

        try:
            message_id = await self.provider.send(request)
        except DeliveryError:
            raise
        except Exception as e:
            sanitizer = get_data_sanitizer()
            logger.error(
                f"🔴 Error sending message via {self.provider.name}: "
                f"{sanitizer.sanitize_exception_for_logging(e)}"
            )
            raise DeliveryError(str(e)) from e

        logger.info(f"🟢 Successfully sent message: {message_id}")
        return DispatchResult(message_id=str(message_id), target=target)


class BroadcastToTopicRule(_DispatchRule):
    """Business logic for broadcasting a notification to every subscribed client."""

    def __init__(
        self,
        title: str | None,
        body: str | None,
        topic: str,
        provider: PushProvider,
        category: Any = None,
    ) -> None:
        super().__init__(title, body, category, provider)
        self.topic = topic

    def _target(self) -> BroadcastTarget:
        logger.info(f"📣 Broadcasting '{self.category}' notification to topic '{self.topic}'")
        return TopicTarget(name=self.topic)


class BroadcastToDeviceRule(_DispatchRule):
    """Business logic for sending a notification to a single device."""

    def __init__(
        self,
        token: str | None,
        title: str | None,
        body: str | None,
        provider: PushProvider,
        category: Any = None,
    ) -> None:
        super().__init__(title, body, category, provider)
        self.token = token

    def _validate(self) -> None:
        if not (
            is_present(self.token) and is_present(self.title) and is_present(self.body)
        ):
            raise ValidationError(MISSING_DEVICE_FIELDS)

    def _target(self) -> BroadcastTarget:
        masked = get_data_sanitizer().mask_token(self.token)
        logger.info(f"📱 Sending '{self.category}' notification to device {masked}")
        return DeviceTarget(token=self.token)


class DispatchNotificationRule:
    """Resolve the delivery target and run the matching broadcast rule.

    A non-empty token selects device delivery; a missing or empty token
    selects the broadcast topic. Token format is not inspected.
    """

    def __init__(
        self,
        title: str | None,
        body: str | None,
        topic: str,
        provider: PushProvider,
        token: str | None = None,
        category: Any = None,
    ) -> None:
        self.title = title
        self.body = body
        self.topic = topic
        self.provider = provider
        self.token = token
        self.category = category

    @property
    def targets_device(self) -> bool:
        return is_present(self.token)

    async def execute(self) -> DispatchResult:
        if self.targets_device:
            rule = BroadcastToDeviceRule(
                token=self.token,
                title=self.title,
                body=self.body,
                category=self.category,
                provider=self.provider,
            )
        else:
            rule = BroadcastToTopicRule(
                title=self.title,
                body=self.body,
                topic=self.topic,
                category=self.category,
                provider=self.provider,
            )

        return await rule.execute()
