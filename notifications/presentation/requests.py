from typing import Any

from pydantic import BaseModel, ConfigDict


class SendNotificationRequest(BaseModel):
    """Request body for both send endpoints.

    Every field is optional at the schema level; presence of the required
    ones is checked by the dispatch rules so missing fields produce the same
    400 body the admin panel already handles.

    Attributes
    ----------
    title : str | None
        Notification title.
    message : str | None
        Notification body.
    type : Any
        Category forwarded to clients as `data.type`; defaults to "general".
    token : str | None
        Device registration token; empty or absent means topic broadcast.
    """

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    message: str | None = None
    type: Any = None
    token: str | None = None
