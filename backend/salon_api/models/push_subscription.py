from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Index, UniqueConstraint
from sqlmodel import Field, SQLModel


class PushSubscription(SQLModel, table=True):
    """Web Push subscription for browser notifications.

    One row per (user, endpoint). Failed deliveries and unsubscribes flip
    ``is_active`` off instead of deleting the row.
    """

    __tablename__ = "push_subscriptions"
    __table_args__ = (
        UniqueConstraint("user_id", "endpoint", name="uq_push_subscriptions_user_endpoint"),
        Index("ix_push_subscriptions_user_active", "user_id", "is_active"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False)

    # Push subscription info
    endpoint: str = Field(max_length=500, nullable=False, index=True)
    p256dh: str = Field(max_length=255, nullable=False)  # Encryption key
    auth: str = Field(max_length=100, nullable=False)  # Auth secret

    # Metadata
    user_agent: Optional[str] = Field(default=None, max_length=500)
    device_platform: Optional[str] = Field(default=None, max_length=50)
    device_browser: Optional[str] = Field(default=None, max_length=50)
    device_version: Optional[str] = Field(default=None, max_length=50)
    is_active: bool = Field(default=True)

    last_used_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
