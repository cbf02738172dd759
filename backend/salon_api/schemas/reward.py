from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import computed_field

from salon_api.schemas.base import CamelModel


class UserRewardRead(CamelModel):
    id: UUID
    user_id: UUID
    name: str
    description: str
    reward_type: str
    point_cost: int
    value: float
    valid_days: int
    status: str
    claimed_at: datetime
    expires_at: Optional[datetime] = None
    used_at: Optional[datetime] = None
    actual_value: float
    location_id: Optional[str] = None

    @computed_field
    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and datetime.utcnow() > self.expires_at

    @computed_field
    @property
    def days_until_expiry(self) -> Optional[int]:
        if self.expires_at is None:
            return None
        seconds = (self.expires_at - datetime.utcnow()).total_seconds()
        return -int(-seconds // 86400)


class PointTransactionRead(CamelModel):
    id: UUID
    user_id: UUID
    points: int
    type: str
    source: str
    description: str
    reference_id: Optional[UUID] = None
    location_id: Optional[str] = None
    balance_after: int
    created_at: datetime
