import time

import firebase_admin
from firebase_admin import messaging
from loguru import logger
from starlette.concurrency import run_in_threadpool

from core.infrastructure.factory import get_data_sanitizer

from ..application.ports import PushProvider
from ..domain.entities import BroadcastRequest


def build_message(request: BroadcastRequest) -> messaging.Message:
    """Translate a `BroadcastRequest` into a Firebase Cloud Messaging message.

    Parameters
    ----------
    request : BroadcastRequest
        Notification with its resolved target.

    Returns
    -------
    messaging.Message
        Message addressed to either the topic or the device token, never both.
    """
    notification = messaging.Notification(title=request.title, body=request.body)

    if request.is_topic:
        return messaging.Message(
            topic=request.target.name,
            notification=notification,
            data=request.data,
        )

    return messaging.Message(
        token=request.target.token,
        notification=notification,
        data=request.data,
    )


class FirebasePushProvider(PushProvider):
    """Firebase Cloud Messaging implementation of push delivery."""

    name = "firebase"

    def __init__(self, app: firebase_admin.App):
        """Initialize the provider with an already initialized Firebase app.

        Args:
            app: Named Firebase app holding the resolved service credential.
        """
        self.app = app

    async def send(self, request: BroadcastRequest) -> str:
        """Send one message through FCM.

        The SDK call blocks on HTTP, so it runs in the thread pool.

        Parameters
        ----------
        request : BroadcastRequest
            Notification with its resolved target.

        Returns
        -------
        str
            FCM message name, e.g. ``projects/<id>/messages/<n>``.
        """
        message = build_message(request)
        return await run_in_threadpool(messaging.send, message, app=self.app)


class LoggingPushProvider(PushProvider):
    """Dry-run delivery that logs the notification instead of sending it.

    Useful for exercising the admin panel without Firebase credentials.
    """

    name = "log"

    async def send(self, request: BroadcastRequest) -> str:
        if request.is_topic:
            destination = f"topic '{request.target.name}'"
        else:
            destination = f"device {get_data_sanitizer().mask_token(request.target.token)}"

        logger.info(f"📱 NOTIFICATION WOULD BE SENT to {destination}")
        logger.info(f"Title: {request.title}")
        logger.info(f"Message: {request.body}")
        logger.info(f"Type: {request.category}")

        return f"test-{int(time.time() * 1000)}"
