from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from salon_api.schemas.base import CamelModel


class UserCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    date_of_birth: Optional[date] = None
    selected_location_id: Optional[str] = Field(default=None, max_length=100)
    referral_code: Optional[str] = Field(default=None, max_length=20)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserRead(CamelModel):
    id: UUID
    name: str
    email: str
    role: str
    points: int
    date_of_birth: Optional[date] = None
    avatar: Optional[str] = None
    selected_location_id: Optional[str] = None
    spa_location_id: Optional[str] = None
    referral_code: str
    referral_tier: str
    last_login: Optional[datetime] = None
    created_at: datetime


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class SpaUserRead(CamelModel):
    id: UUID
    name: str
    email: str
    points: int
    selected_location_id: Optional[str] = None
    referral_tier: str
    total_referrals: int
    last_login: Optional[datetime] = None
    created_at: datetime
