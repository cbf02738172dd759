from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from salon_api.schemas.base import CamelModel


class NotificationRead(CamelModel):
    id: UUID
    recipient_id: UUID
    sender_id: Optional[UUID] = None
    type: str
    title: str
    message: str
    priority: str
    category: str
    is_read: bool
    read_at: Optional[datetime] = None
    meta: Optional[dict] = Field(default=None, serialization_alias="metadata")
    created_at: datetime


class NotificationSendRequest(CamelModel):
    """Payload of the management "send notification" form."""

    user_ids: list[UUID] = Field(default_factory=list)
    type: str
    subject: Optional[str] = Field(default=None, max_length=255)
    message: Optional[str] = Field(default=None, max_length=2000)
    channels: Optional[list[str]] = None
    priority: str = "normal"
    category: str = "general"
