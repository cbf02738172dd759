from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from salon_api.schemas.base import CamelModel


class PushKeys(BaseModel):
    p256dh: str = Field(..., max_length=255, description="Encryption key")
    auth: str = Field(..., max_length=100, description="Auth secret")


class PushSubscriptionInfo(BaseModel):
    """Subscription object as produced by ``PushManager.subscribe()``."""

    endpoint: str = Field(..., max_length=500)
    keys: PushKeys


class PushSubscribeRequest(BaseModel):
    subscription: Optional[PushSubscriptionInfo] = None


class PushUnsubscribeRequest(BaseModel):
    endpoint: str = Field(..., max_length=500)


class PushSubscriptionRead(CamelModel):
    """Read push subscription."""

    id: UUID
    user_id: UUID
    endpoint: str
    device_platform: Optional[str] = None
    device_browser: Optional[str] = None
    is_active: bool
    created_at: datetime
    last_used_at: datetime
