from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Index
from sqlmodel import Field, SQLModel


def _default_expiry() -> datetime:
    return datetime.utcnow() + timedelta(days=30)


class Referral(SQLModel, table=True):
    """A client invited to the platform by another client."""

    __tablename__ = "referrals"
    __table_args__ = (Index("ix_referrals_referrer_status", "referrer_id", "status"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    referrer_id: UUID = Field(foreign_key="users.id", nullable=False)
    referred_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    referral_code: str = Field(max_length=20, index=True)
    status: str = Field(default="pending", max_length=20)  # pending, completed, expired, cancelled
    reward_type: str = Field(default="signup", max_length=20)

    referrer_points: int = Field(default=0)
    referrer_awarded: bool = Field(default=False)
    referred_points: int = Field(default=0)
    referred_awarded: bool = Field(default=False)

    completed_at: Optional[datetime] = Field(default=None, nullable=True)
    expires_at: datetime = Field(default_factory=_default_expiry, nullable=False, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False, index=True)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.utcnow()) > self.expires_at
