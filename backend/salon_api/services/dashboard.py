"""Aggregates behind the home dashboard of spa owners and clients."""

from __future__ import annotations

from datetime import datetime, time, timedelta

from sqlalchemy import func
from sqlmodel import Session, or_, select

from salon_api.models import Booking, Referral, User, UserReward
from salon_api.models.booking import ACTIVE_STATUSES
from salon_api.schemas.reward import UserRewardRead
from salon_api.services.referrals import signup_reward

CREDIT_REWARD_TYPES = ("credit", "discount", "service")
GIFT_REWARD_TYPES = ("gift", "referral", "bonus")


def growth(current: int, previous: int) -> int:
    """Percent change against the previous period, 100 when it had nothing."""
    if previous == 0:
        return 100 if current > 0 else 0
    return round((current - previous) / previous * 100)


def _count(session: Session, model, *conditions) -> int:
    return session.exec(select(func.count()).select_from(model).where(*conditions)).one()


def _period_growth(session: Session, model, created_at, *conditions) -> int:
    now = datetime.utcnow()
    thirty_days_ago = now - timedelta(days=30)
    sixty_days_ago = now - timedelta(days=60)
    current = _count(session, model, *conditions, created_at >= thirty_days_ago)
    previous = _count(session, model, *conditions, created_at >= sixty_days_ago, created_at < thirty_days_ago)
    return growth(current, previous)


def _activity_entry(booking: Booking, client: User) -> dict:
    return {
        "id": str(booking.id),
        "serviceName": booking.service_name,
        "date": booking.date.isoformat(),
        "time": booking.time,
        "status": booking.status,
        "finalPrice": booking.final_price,
        "createdAt": booking.created_at.isoformat(),
        "user": {"id": str(client.id), "name": client.name, "email": client.email, "avatar": client.avatar},
    }


def spa_dashboard(session: Session, location_id: str) -> dict:
    """Stats, 30-day trend and activity of a spa location."""
    is_client = (User.selected_location_id == location_id, User.role == "user", User.is_deleted == False)  # noqa: E712
    completed = (Booking.location_id == location_id, Booking.status == "completed")
    memberships = (*completed, Booking.service_name.ilike("%membership%"))
    not_cancelled = (Booking.location_id == location_id, Booking.status != "cancelled")

    thirty_days_ago = datetime.utcnow() - timedelta(days=30)
    day = func.date(Booking.created_at).label("day")
    trend = session.exec(
        select(day, func.count(Booking.id), func.coalesce(func.sum(Booking.final_price), 0))
        .where(*not_cancelled, Booking.created_at >= thirty_days_ago)
        .group_by(day)
        .order_by(day)
    ).all()

    service_count = func.count(Booking.id).label("count")
    top_services = session.exec(
        select(Booking.service_name, service_count, func.coalesce(func.sum(Booking.final_price), 0))
        .where(*completed)
        .group_by(Booking.service_name)
        .order_by(service_count.desc())
        .limit(5)
    ).all()

    live_activity = session.exec(
        select(Booking, User)
        .join(User, Booking.user_id == User.id)
        .where(Booking.location_id == location_id)
        .order_by(Booking.created_at.desc())
        .limit(10)
    ).all()

    start_of_today = datetime.combine(datetime.utcnow().date(), time.min)
    current_bookings = session.exec(
        select(Booking, User)
        .join(User, Booking.user_id == User.id)
        .where(
            Booking.location_id == location_id,
            Booking.date >= start_of_today,
            Booking.status.in_(ACTIVE_STATUSES),
        )
        .order_by(Booking.date.asc())
        .limit(10)
    ).all()

    return {
        "role": "spa",
        "stats": {
            "totalClients": _count(session, User, *is_client),
            "totalVisits": _count(session, Booking, *completed),
            "activeMemberships": _count(session, Booking, *memberships),
            "clientGrowth": _period_growth(session, User, User.created_at, *is_client),
            "visitGrowth": _period_growth(session, Booking, Booking.created_at, *completed),
            "membershipGrowth": _period_growth(session, Booking, Booking.created_at, *memberships),
            "revenueGrowth": _period_growth(session, Booking, Booking.created_at, *not_cancelled),
        },
        "analytics": {
            "trendData": [
                {"date": str(bucket), "bookings": bookings, "revenue": float(revenue)}
                for bucket, bookings, revenue in trend
            ],
            "topServices": [
                {"name": name, "count": count, "revenue": float(revenue)} for name, count, revenue in top_services
            ],
        },
        "liveActivity": [_activity_entry(b, u) for b, u in live_activity],
        "currentBookings": [_activity_entry(b, u) for b, u in current_bookings],
        "spaLocationId": location_id,
    }


def client_dashboard(session: Session, user: User) -> dict:
    """Appointments, referral numbers, credits and points of a client."""
    now = datetime.utcnow()

    upcoming = session.exec(
        select(Booking)
        .where(Booking.user_id == user.id, Booking.date >= now, Booking.status.in_(ACTIVE_STATUSES))
        .order_by(Booking.date.asc())
        .limit(5)
    ).all()
    past = session.exec(
        select(Booking)
        .where(Booking.user_id == user.id, Booking.date < now, Booking.status == "completed")
        .order_by(Booking.date.desc())
        .limit(10)
    ).all()

    completed_referrals = (Referral.referrer_id == user.id, Referral.status == "completed")
    referral_earnings = session.exec(
        select(func.coalesce(func.sum(Referral.referrer_points), 0)).where(*completed_referrals)
    ).one()

    unexpired = (
        UserReward.user_id == user.id,
        UserReward.status == "active",
        or_(UserReward.expires_at.is_(None), UserReward.expires_at > now),
    )
    credits = session.exec(
        select(UserReward)
        .where(*unexpired, UserReward.reward_type.in_(CREDIT_REWARD_TYPES))
        .order_by(UserReward.expires_at.asc())
    ).all()
    nearest = credits[0] if credits else None

    referrer_points, _ = signup_reward(user.referral_tier)

    return {
        "role": "user",
        "upcomingAppointments": [
            {
                "id": str(b.id),
                "serviceName": b.service_name,
                "date": b.date.isoformat(),
                "time": b.time,
                "duration": b.duration,
                "providerName": b.provider_name,
                "status": b.status,
            }
            for b in upcoming
        ],
        "pastVisits": [
            {"id": str(b.id), "serviceName": b.service_name, "date": b.date.isoformat(), "rating": b.rating, "status": b.status}
            for b in past
        ],
        "referralStats": {
            "total": _count(session, Referral, *completed_referrals),
            "thisMonth": _count(session, Referral, *completed_referrals, Referral.completed_at >= now - timedelta(days=30)),
            "earnings": int(referral_earnings or 0),
            "referralCode": user.referral_code,
        },
        "credits": {
            "available": len(credits),
            "gifts": _count(session, UserReward, *unexpired, UserReward.reward_type.in_(GIFT_REWARD_TYPES)),
            "expiring": nearest.expires_at.isoformat() if nearest and nearest.expires_at else None,
            "expiringReward": UserRewardRead.model_validate(nearest).to_json() if nearest else None,
        },
        "referrerPoints": referrer_points,
        "userPoints": user.points or 0,
    }
