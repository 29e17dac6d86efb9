class NotificationRelayError(Exception):
    """Base class for errors raised by the notification relay."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(NotificationRelayError):
    """Caller input is missing required fields.

    Rejected before any provider call is attempted.
    """


class CredentialError(NotificationRelayError):
    """Provider credentials could not be resolved at startup.

    Fatal: the process must not accept traffic.
    """


class DeliveryError(NotificationRelayError):
    """The push provider rejected or failed the send call.

    `detail` carries the provider's raw error text for operator diagnosis.
    """


class AuthenticationError(NotificationRelayError):
    """Operator credential missing or invalid on a gated endpoint."""
