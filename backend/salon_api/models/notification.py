from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class Notification(SQLModel, table=True):
    """In-app notification delivered to a user."""

    __tablename__ = "notifications"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    recipient_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    sender_id: Optional[UUID] = Field(default=None, foreign_key="users.id", nullable=True)
    type: str = Field(max_length=20)
    title: str = Field(max_length=255)
    message: str = Field(max_length=2000)
    priority: str = Field(default="normal", max_length=20)  # low, normal, high, urgent
    category: str = Field(default="general", max_length=50)
    is_read: bool = Field(default=False, index=True)
    read_at: Optional[datetime] = Field(default=None, nullable=True)
    meta: Optional[dict] = Field(default=None, sa_column=Column("metadata", JSON, nullable=True))
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False, index=True)
