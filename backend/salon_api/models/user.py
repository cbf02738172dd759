from __future__ import annotations

import random
import string
from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


def generate_referral_code() -> str:
    """Two upper-case letters followed by four digits, e.g. ``AB1234``."""
    letters = "".join(random.choices(string.ascii_uppercase, k=2))
    digits = "".join(random.choices(string.digits, k=4))
    return letters + digits


class User(SQLModel, table=True):
    """Platform account: spa client, team member or administrator."""

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    name: str = Field(max_length=255)
    email: str = Field(index=True, unique=True, max_length=255)
    hashed_password: str = Field(max_length=255)
    role: str = Field(default="user", max_length=20, index=True)  # user, team, spa, admin, enterprise, super-admin
    points: int = Field(default=100)
    date_of_birth: Optional[date] = Field(default=None, nullable=True)
    avatar: Optional[str] = Field(default=None, max_length=500)
    last_login: Optional[datetime] = Field(default=None, nullable=True)
    is_active: bool = Field(default=True)
    is_deleted: bool = Field(default=False, index=True)

    # Spa the client is attached to
    selected_location_id: Optional[str] = Field(default=None, max_length=100, index=True)
    selected_at: Optional[datetime] = Field(default=None, nullable=True)
    # Spa a team/spa account manages
    spa_location_id: Optional[str] = Field(default=None, max_length=100, index=True)

    referral_code: str = Field(
        default_factory=generate_referral_code, max_length=20, unique=True, index=True
    )
    referred_by_id: Optional[UUID] = Field(default=None, foreign_key="users.id", nullable=True)
    referral_earnings: int = Field(default=0)
    total_referrals: int = Field(default=0)
    active_referrals: int = Field(default=0)
    converted_referrals: int = Field(default=0)
    referral_tier: str = Field(default="bronze", max_length=20)  # bronze, gold, platinum

    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    @property
    def managed_location_id(self) -> Optional[str]:
        """Location a management account acts on."""
        return self.spa_location_id or self.selected_location_id
