from pydantic import BaseModel, ConfigDict, Field


class SendNotificationResponse(BaseModel):
    """Response model for a delivered notification.

    Attributes
    ----------
    success : bool, default=True
        Always True; failures use the error bodies.
    message_id : str
        Provider-assigned identifier, serialized as `messageId`.
    message : str
        Human readable confirmation.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message_id: str = Field(alias="messageId")
    message: str
