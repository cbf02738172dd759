from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

ACTIVE_STATUSES = ("scheduled", "confirmed")
PAST_STATUSES = ("completed", "no-show")


class Booking(SQLModel, table=True):
    """Appointment of a client for a service at a location."""

    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_user_date", "user_id", "date"),
        Index("ix_bookings_user_status", "user_id", "status"),
        Index("ix_bookings_location_date", "location_id", "date"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    service_id: UUID = Field(foreign_key="services.id", nullable=False)
    provider_id: Optional[UUID] = Field(default=None, foreign_key="users.id", nullable=True)
    provider_name: str = Field(default="Staff Member", max_length=255)

    service_name: str = Field(max_length=255)
    service_price: float
    final_price: float
    discount_applied: float = Field(default=0)
    reward_used_id: Optional[UUID] = Field(default=None, foreign_key="user_rewards.id", nullable=True)

    # Start of the appointment; ``time`` keeps the label the client picked ("10:00 AM")
    date: datetime = Field(nullable=False, index=True)
    time: str = Field(max_length=20)
    duration: int = Field(default=60)

    status: str = Field(default="scheduled", max_length=20, index=True)  # scheduled, confirmed, completed, cancelled, no-show
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    review: Optional[str] = Field(default=None, max_length=2000)
    location_id: str = Field(max_length=100, index=True)
    notes: str = Field(default="", max_length=2000)
    points_earned: int = Field(default=0)

    cancelled_at: Optional[datetime] = Field(default=None, nullable=True)
    completed_at: Optional[datetime] = Field(default=None, nullable=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
