from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Query
from sqlalchemy import func
from sqlmodel import or_, select

from salon_api.api.deps import CurrentUser
from salon_api.db import SessionDep
from salon_api.models import UserReward
from salon_api.schemas.base import success
from salon_api.schemas.pagination import pagination_block
from salon_api.schemas.reward import UserRewardRead

router = APIRouter()


@router.get("/my-rewards", summary="Rewards claimed by the current user")
def get_my_rewards(
    session: SessionDep,
    current_user: CurrentUser,
    status_filter: str = Query(default="all", alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> dict:
    conditions = [UserReward.user_id == current_user.id]
    if status_filter != "all":
        conditions.append(UserReward.status == status_filter)
    if status_filter == "active":
        conditions.append(or_(UserReward.expires_at.is_(None), UserReward.expires_at > datetime.utcnow()))

    total = session.exec(select(func.count()).select_from(UserReward).where(*conditions)).one()
    rewards = session.exec(
        select(UserReward)
        .where(*conditions)
        .order_by(UserReward.claimed_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    now = datetime.utcnow()
    active = [r for r in rewards if r.is_valid(now)]
    used = [r for r in rewards if r.status == "used"]
    expired = [r for r in rewards if not r.is_valid(now) and r.status != "used"]

    return success(
        {
            "userRewards": [UserRewardRead.model_validate(r).to_json() for r in rewards],
            "stats": {
                "total": total,
                "active": len(active),
                "expired": len(expired),
                "used": len(used),
            },
            "pagination": pagination_block(page, limit, total, "totalRewards"),
        }
    )
