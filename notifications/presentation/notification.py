from fastapi import APIRouter, Depends, status

from config.base import Settings
from core.infrastructure.security import get_app_settings, require_operator_key
from core.presentation.responses import ErrorResponse, FailureResponse

from ..application.ports import PushProvider
from ..application.rules import DispatchNotificationRule
from ..infrastructure.factory import get_push_provider
from .requests import SendNotificationRequest
from .responses import SendNotificationResponse

TOPIC_SUCCESS_MESSAGE = "Notification sent successfully"
DEVICE_SUCCESS_MESSAGE = "Notification sent successfully to token"

router = APIRouter(
    prefix="/api",
    dependencies=[Depends(require_operator_key)],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": FailureResponse},
    },
)


async def _dispatch(
    request: SendNotificationRequest | None,
    settings: Settings,
    provider: PushProvider,
) -> SendNotificationResponse:
    request = request or SendNotificationRequest()

    dispatch_rule = DispatchNotificationRule(
        title=request.title,
        body=request.message,
        category=request.type,
        token=request.token,
        topic=settings.broadcast_topic,
        provider=provider,
    )

    result = await dispatch_rule.execute()

    return SendNotificationResponse(
        message_id=result.message_id,
        message=(
            DEVICE_SUCCESS_MESSAGE
            if dispatch_rule.targets_device
            else TOPIC_SUCCESS_MESSAGE
        ),
    )


@router.post(
    "/send-notification",
    response_model=SendNotificationResponse,
    status_code=status.HTTP_200_OK,
)
async def send_notification(
    request: SendNotificationRequest | None = None,
    settings: Settings = Depends(get_app_settings),
    provider: PushProvider = Depends(get_push_provider),
):
    """Broadcast a notification to every subscribed client.

    Sends to the configured broadcast topic; a non-empty `token` in the body
    narrows delivery to that device instead.

    Parameters
    ----------
    request : SendNotificationRequest | None
        Title, message, and optional type/token.
    settings : Settings
        Application settings, for the broadcast topic.
    provider : PushProvider
        Dependency-injected push provider.

    Returns
    -------
    SendNotificationResponse
        Provider message id and confirmation text.
    """
    return await _dispatch(request, settings, provider)


@router.post(
    "/send-notification-to-token",
    response_model=SendNotificationResponse,
    status_code=status.HTTP_200_OK,
)
async def send_notification_to_token(
    request: SendNotificationRequest | None = None,
    settings: Settings = Depends(get_app_settings),
    provider: PushProvider = Depends(get_push_provider),
):
    """Send a notification to a single device registration token.

    An empty or absent token is not an error: the notification goes to the
    broadcast topic, exactly as `/api/send-notification` would send it.

    Parameters
    ----------
    request : SendNotificationRequest | None
        Token, title, message, and optional type.
    settings : Settings
        Application settings, for the fallback topic.
    provider : PushProvider
        Dependency-injected push provider.

    Returns
    -------
    SendNotificationResponse
        Provider message id and confirmation text.
    """
    return await _dispatch(request, settings, provider)
