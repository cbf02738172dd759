from __future__ import annotations

from datetime import datetime, timedelta

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import func
from sqlmodel import select

from salon_api.api.deps import CurrentUser
from salon_api.db import SessionDep
from salon_api.models import Location, User
from salon_api.schemas.base import success
from salon_api.schemas.user import SpaUserRead

router = APIRouter()


def _selected_location(current_user: User) -> str:
    if not current_user.selected_location_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User has not selected a spa")
    return current_user.selected_location_id


@router.get("", summary="Users attached to the caller's spa")
def get_spa_users(session: SessionDep, current_user: CurrentUser) -> dict:
    location_id = _selected_location(current_user)

    users = session.exec(
        select(User)
        .where(User.selected_location_id == location_id, User.is_deleted == False)  # noqa: E712
        .order_by(User.created_at.desc())
    ).all()

    now = datetime.utcnow()
    last_week = now - timedelta(days=7)
    last_month = now - timedelta(days=30)
    location = session.exec(select(Location).where(Location.location_id == location_id)).first()

    return success(
        {
            "users": [SpaUserRead.model_validate(u).to_json() for u in users],
            "stats": {
                "totalUsers": len(users),
                "activeUsers": sum(1 for u in users if u.last_login and u.last_login >= last_week),
                "newUsers": sum(1 for u in users if u.created_at >= last_month),
            },
            "currentUserSpa": {
                "locationId": location_id,
                "locationName": location.name if location else None,
                "locationAddress": location.address if location else None,
            },
        }
    )


@router.get("/activity", summary="Daily sign-ups and points of the caller's spa")
def get_spa_user_activity(session: SessionDep, current_user: CurrentUser) -> dict:
    location_id = _selected_location(current_user)

    day = func.date(User.created_at).label("day")
    rows = session.exec(
        select(day, func.count(User.id), func.coalesce(func.sum(User.points), 0))
        .where(User.selected_location_id == location_id, User.is_deleted == False)  # noqa: E712
        .group_by(day)
        .order_by(day.desc())
        .limit(30)
    ).all()

    return success(
        {
            "activity": [
                {"date": str(bucket), "newUsers": new_users, "totalPoints": int(points)}
                for bucket, new_users, points in rows
            ]
        }
    )
