from enum import StrEnum

from pydantic import dataclasses


class NotificationCategory(StrEnum):
    """Categories the mobile client knows how to present.

    Carried to the client as `data.type`. The relay does not interpret it,
    so values outside this set pass through unchanged.
    """

    GENERAL = "general"
    VOTING = "voting"
    ELIMINATION = "elimination"
    ANNOUNCEMENT = "announcement"


@dataclasses.dataclass(frozen=True)
class TopicTarget:
    """Broadcast channel every installed client subscribes to.

    Attributes
    ----------
    name : str
        Messaging topic name.
    """

    name: str


@dataclasses.dataclass(frozen=True)
class DeviceTarget:
    """Single installed client, addressed by its registration token.

    Attributes
    ----------
    token : str
        Opaque device registration token.
    """

    token: str


BroadcastTarget = TopicTarget | DeviceTarget


@dataclasses.dataclass(frozen=True)
class BroadcastRequest:
    """Core domain entity representing one push to dispatch.

    Built, dispatched, and discarded; never persisted.

    Attributes
    ----------
    title : str
        Notification title.
    body : str
        Notification body ("message" at the HTTP boundary).
    target : BroadcastTarget
        Either the broadcast topic or one device.
    category : str, default="general"
        Opaque category forwarded as `data.type`.
    """

    title: str
    body: str
    target: BroadcastTarget
    category: str = NotificationCategory.GENERAL

    @property
    def is_topic(self) -> bool:
        return isinstance(self.target, TopicTarget)

    @property
    def data(self) -> dict[str, str]:
        return {"type": str(self.category)}


@dataclasses.dataclass(frozen=True)
class DispatchResult:
    """Outcome of a successful provider call.

    Attributes
    ----------
    message_id : str
        Identifier assigned by the push provider.
    target : BroadcastTarget
        Where the message was addressed.
    success : bool, default=True
        Always True; failures raise instead.
    """

    message_id: str
    target: BroadcastTarget
    success: bool = True
