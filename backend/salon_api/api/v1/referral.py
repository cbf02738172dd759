from __future__ import annotations

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Query

from salon_api.api.deps import CurrentUser
from salon_api.db import SessionDep
from salon_api.schemas.base import success
from salon_api.services import referrals

router = APIRouter()


@router.get("/my-stats", summary="Referral statistics of the current user")
def get_my_stats(session: SessionDep, current_user: CurrentUser) -> dict:
    return success({"stats": referrals.referral_stats(session, current_user)})


@router.get("/leaderboard", summary="Top referrers")
def get_leaderboard(
    session: SessionDep,
    current_user: CurrentUser,
    period: Literal["all", "week", "month", "year"] = Query(default="all"),
    limit: int = Query(default=10, ge=1, le=100),
) -> dict:
    return success(
        {
            "leaderboard": referrals.leaderboard(session, period=period, limit=limit),
            "period": period,
            "generatedAt": datetime.utcnow().isoformat(),
        }
    )
