from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

DEFAULT_THEME_COLOR = "#ec4899"
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class Location(SQLModel, table=True):
    """A spa/business: the tenant addressed by ``{subdomain}.ROOT_DOMAIN``."""

    __tablename__ = "locations"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    location_id: str = Field(max_length=100, unique=True, index=True)
    subdomain: Optional[str] = Field(default=None, max_length=20, unique=True, index=True)
    name: str = Field(default="", max_length=255)
    description: str = Field(default="", max_length=1000)
    address: str = Field(default="", max_length=500)
    phone: str = Field(default="", max_length=50)
    logo: Optional[str] = Field(default=None, max_length=500)
    favicon: Optional[str] = Field(default=None, max_length=500)
    theme_color: Optional[str] = Field(default=None, max_length=7)  # Hex color
    membership: Optional[dict] = Field(default=None, sa_column=Column(JSON, nullable=True))

    # Business hours by weekday:
    # {"monday": {"open": "09:00", "close": "18:00", "closed": false}, ...}
    business_hours: Optional[dict] = Field(default=None, sa_column=Column(JSON, nullable=True))

    # Points granted for reviewing a completed visit (0 disables)
    review_points: int = Field(default=0)

    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
