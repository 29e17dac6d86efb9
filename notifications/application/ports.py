from abc import ABC, abstractmethod

from ..domain.entities import BroadcastRequest


class PushProvider(ABC):
    """Abstract base class for push delivery backends.

    Implementations translate a `BroadcastRequest` into exactly one call to
    an external messaging service. They hold no per-request state and
    may be shared by concurrent requests.
    """

    name: str = "abstract"

    @abstractmethod
    async def send(self, request: BroadcastRequest) -> str:
        """Deliver a notification.

        Parameters
        ----------
        request : BroadcastRequest
            Validated notification with its resolved target.

        Returns
        -------
        str
            Identifier the provider assigned to the message.

        Raises
        ------
        Exception
            Whatever the provider raises; callers surface it as a delivery failure.
        """
        pass
