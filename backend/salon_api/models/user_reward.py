from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class UserReward(SQLModel, table=True):
    """Reward claimed by a user, with a snapshot of the reward at claim time."""

    __tablename__ = "user_rewards"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)

    name: str = Field(max_length=255)
    description: str = Field(default="", max_length=1000)
    reward_type: str = Field(max_length=30, index=True)
    point_cost: int = Field(default=0)
    value: float = Field(default=0)
    valid_days: int = Field(default=30)

    status: str = Field(default="active", max_length=20, index=True)  # active, used, expired
    claimed_at: datetime = Field(default_factory=datetime.utcnow, nullable=False, index=True)
    expires_at: Optional[datetime] = Field(default=None, nullable=True, index=True)
    used_at: Optional[datetime] = Field(default=None, nullable=True)
    used_for_booking_id: Optional[UUID] = Field(default=None, nullable=True)
    actual_value: float = Field(default=0)
    location_id: Optional[str] = Field(default=None, max_length=100, index=True)

    @classmethod
    def claim(cls, user_id: UUID, name: str, reward_type: str, valid_days: int = 30, **fields) -> "UserReward":
        """Build a freshly claimed reward expiring ``valid_days`` from now."""
        now = datetime.utcnow()
        return cls(
            user_id=user_id,
            name=name,
            reward_type=reward_type,
            valid_days=valid_days,
            claimed_at=now,
            expires_at=now + timedelta(days=valid_days),
            **fields,
        )

    def is_valid(self, now: datetime | None = None) -> bool:
        if self.status != "active":
            return False
        return self.expires_at is None or self.expires_at > (now or datetime.utcnow())

    def mark_as_used(self, actual_value: float = 0, booking_id: UUID | None = None) -> None:
        self.status = "used"
        self.used_at = datetime.utcnow()
        self.actual_value = actual_value
        self.used_for_booking_id = booking_id
