from __future__ import annotations

from datetime import date as date_type
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, computed_field

from salon_api.schemas.base import CamelModel


class BookingCreate(CamelModel):
    """Schema for creating a booking."""

    service_id: UUID
    date: date_type | datetime
    time: str = Field(..., max_length=20, description="Slot label such as '10:00 AM'")
    provider_id: Optional[UUID] = None
    provider_name: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = Field(default=None, max_length=2000)
    reward_id: Optional[UUID] = None


class BookingRate(CamelModel):
    rating: Optional[int] = None
    review: Optional[str] = Field(default=None, max_length=2000)


class BookingRead(CamelModel):
    """Schema for reading a booking."""

    id: UUID
    user_id: UUID
    service_id: UUID
    provider_id: Optional[UUID] = None
    provider_name: str
    service_name: str
    service_price: float
    final_price: float
    discount_applied: float
    reward_used_id: Optional[UUID] = None
    date: datetime
    time: str
    duration: int
    status: str
    rating: Optional[int] = None
    review: Optional[str] = None
    location_id: str
    notes: str
    points_earned: int
    created_at: datetime

    @computed_field
    @property
    def is_past(self) -> bool:
        return datetime.utcnow() > self.date

    @computed_field
    @property
    def is_upcoming(self) -> bool:
        return datetime.utcnow() <= self.date

    @computed_field
    @property
    def can_rate(self) -> bool:
        return self.status == "completed" and not self.rating
