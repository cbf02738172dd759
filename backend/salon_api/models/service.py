from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class Service(SQLModel, table=True):
    """Bookable treatment offered by a location."""

    __tablename__ = "services"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    base_price: float = Field(default=0)
    discount_percent: float = Field(default=0)
    duration: int = Field(default=60)  # minutes
    location_id: str = Field(max_length=100, index=True)
    is_deleted: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    def calculate_price(self) -> float:
        if self.discount_percent and self.discount_percent > 0:
            return round(self.base_price * (100 - self.discount_percent) / 100, 2)
        return self.base_price
