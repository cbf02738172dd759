"""Referral processing and statistics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import Session, select

from salon_api.core.config import settings
from salon_api.models import Referral, User
from salon_api.services.notifications import create_system_notification
from salon_api.services.points import award_points

logger = logging.getLogger(__name__)

LEADERBOARD_PERIODS = {
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}


@dataclass
class ReferralResult:
    success: bool
    message: str
    referral: Optional[Referral] = None
    referrer_points: int = 0
    referred_points: int = 0
    extra: dict = field(default_factory=dict)


def signup_reward(tier: str | None) -> tuple[int, int]:
    """Points for (referrer, referred) of a signup referral."""
    multiplier = settings.REFERRAL_TIER_MULTIPLIERS.get(tier or "bronze", 1.0)
    return round(settings.REFERRAL_REFERRER_POINTS * multiplier), settings.REFERRAL_REFERRED_POINTS


def complete_referral(session: Session, referral: Referral) -> Referral:
    """Mark a referral completed and award both sides once.

    Raises ValueError when the referral is already completed or has expired.
    """
    if referral.status == "completed":
        raise ValueError("Referral already completed")
    if referral.is_expired():
        referral.status = "expired"
        session.add(referral)
        session.commit()
        raise ValueError("Referral has expired")

    referral.status = "completed"
    referral.completed_at = datetime.utcnow()

    if not referral.referrer_awarded and referral.referrer_points > 0:
        referrer = session.get(User, referral.referrer_id)
        if referrer:
            award_points(
                session,
                referrer,
                referral.referrer_points,
                source="referral",
                description="Referral reward",
                reference_id=referral.id,
            )
            referrer.referral_earnings += referral.referrer_points
            referrer.converted_referrals += 1
        referral.referrer_awarded = True

    if not referral.referred_awarded and referral.referred_points > 0:
        referred = session.get(User, referral.referred_id)
        if referred:
            award_points(
                session,
                referred,
                referral.referred_points,
                source="referral",
                description="Referral welcome bonus",
                reference_id=referral.id,
            )
        referral.referred_awarded = True

    session.add(referral)
    session.commit()
    session.refresh(referral)
    return referral


def process_referral(session: Session, referred_user_id: UUID, referral_code: str) -> ReferralResult:
    """Link a newly registered user to the owner of ``referral_code``."""
    code = referral_code.strip().upper()
    referrer = session.exec(
        select(User).where(User.referral_code == code, User.is_deleted == False)  # noqa: E712
    ).first()
    if not referrer:
        return ReferralResult(False, "Invalid referral code")

    referred = session.get(User, referred_user_id)
    if not referred:
        return ReferralResult(False, "Referred user not found")

    if referrer.id == referred.id:
        return ReferralResult(False, "Cannot refer yourself")

    if referred.referred_by_id:
        return ReferralResult(False, "User was already referred by someone else")

    existing = session.exec(
        select(Referral).where(Referral.referrer_id == referrer.id, Referral.referred_id == referred.id)
    ).first()
    if existing:
        return ReferralResult(False, "Referral already exists")

    referrer_points, referred_points = signup_reward(referrer.referral_tier)
    referral = Referral(
        referrer_id=referrer.id,
        referred_id=referred.id,
        referral_code=code,
        reward_type="signup",
        referrer_points=referrer_points,
        referred_points=referred_points,
        expires_at=datetime.utcnow() + timedelta(days=settings.REFERRAL_EXPIRY_DAYS),
    )
    referred.referred_by_id = referrer.id
    referrer.total_referrals += 1
    referrer.active_referrals += 1
    session.add_all([referral, referred, referrer])
    session.commit()
    session.refresh(referral)

    if settings.REFERRAL_AUTO_APPROVE:
        complete_referral(session, referral)
        create_system_notification(
            session,
            referrer.id,
            "Referral Reward!",
            f"You earned {referrer_points} points for referring {referred.name}!",
            priority="high",
            category="referral",
            meta={"type": "referrer_reward", "points": referrer_points, "referredUserName": referred.name},
        )
        create_system_notification(
            session,
            referred.id,
            "Welcome Bonus!",
            f"You received {referred_points} points for joining through {referrer.name}'s referral!",
            priority="high",
            category="referral",
            meta={"type": "referred_reward", "points": referred_points, "referrerName": referrer.name},
        )

    logger.info(f"Referral {referral.id}: {referrer.id} referred {referred.id}")
    return ReferralResult(
        True,
        "Referral processed successfully",
        referral=referral,
        referrer_points=referrer_points,
        referred_points=referred_points,
    )


def referral_stats(session: Session, user: User) -> dict:
    made = session.exec(
        select(Referral, User)
        .join(User, Referral.referred_id == User.id)
        .where(Referral.referrer_id == user.id)
        .order_by(Referral.created_at.desc())
    ).all()
    received = session.exec(
        select(Referral, User)
        .join(User, Referral.referrer_id == User.id)
        .where(Referral.referred_id == user.id)
        .order_by(Referral.created_at.desc())
    ).all()

    referred_by = session.get(User, user.referred_by_id) if user.referred_by_id else None

    def breakdown(status: str) -> int:
        return sum(1 for referral, _ in made if referral.status == status)

    return {
        "referralCode": user.referral_code,
        "totalReferrals": user.total_referrals,
        "activeReferrals": user.active_referrals,
        "convertedReferrals": user.converted_referrals,
        "currentTier": user.referral_tier,
        "totalEarnings": user.referral_earnings,
        "referredBy": {"id": str(referred_by.id), "name": referred_by.name, "email": referred_by.email}
        if referred_by
        else None,
        "referralBreakdown": {
            "pending": breakdown("pending"),
            "completed": breakdown("completed"),
            "expired": breakdown("expired"),
        },
        "recentReferrals": [_referral_entry(referral, other) for referral, other in made[:10]],
        "receivedReferrals": [_referral_entry(referral, other) for referral, other in received],
    }


def _referral_entry(referral: Referral, other: User) -> dict:
    return {
        "id": str(referral.id),
        "status": referral.status,
        "referralCode": referral.referral_code,
        "referrerPoints": referral.referrer_points,
        "referredPoints": referral.referred_points,
        "createdAt": referral.created_at.isoformat(),
        "completedAt": referral.completed_at.isoformat() if referral.completed_at else None,
        "user": {"id": str(other.id), "name": other.name, "email": other.email},
    }


def leaderboard(session: Session, period: str = "all", limit: int = 10) -> list[dict]:
    """Top referrers by completed referrals, then by points earned."""
    total_referrals = func.count(Referral.id).label("total_referrals")
    total_points = func.coalesce(func.sum(Referral.referrer_points), 0).label("total_points")
    last_referral = func.max(Referral.completed_at).label("last_referral")

    statement = (
        select(User, total_referrals, total_points, last_referral)
        .select_from(Referral)
        .join(User, Referral.referrer_id == User.id)
        .where(Referral.status == "completed")
    )
    if period in LEADERBOARD_PERIODS:
        statement = statement.where(Referral.completed_at >= datetime.utcnow() - LEADERBOARD_PERIODS[period])

    statement = (
        statement.group_by(User.id)
        .order_by(total_referrals.desc(), total_points.desc())
        .limit(limit)
    )

    return [
        {
            "userId": str(user.id),
            "name": user.name,
            "email": user.email,
            "referralCode": user.referral_code,
            "currentTier": user.referral_tier,
            "totalReferrals": count,
            "totalPointsEarned": int(points or 0),
            "lastReferralDate": last.isoformat() if last else None,
        }
        for user, count, points, last in session.exec(statement).all()
    ]
