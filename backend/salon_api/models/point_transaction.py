from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class PointTransaction(SQLModel, table=True):
    """Ledger entry for a change in a user's points balance."""

    __tablename__ = "point_transactions"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    points: int
    type: str = Field(default="earned", max_length=20, index=True)  # earned, redeemed, adjusted
    source: str = Field(max_length=50)  # review, referral, booking, manual
    description: str = Field(default="", max_length=500)
    reference_id: Optional[UUID] = Field(default=None, nullable=True)
    location_id: Optional[str] = Field(default=None, max_length=100)
    balance_after: int = Field(default=0)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False, index=True)
