from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlmodel import select

from salon_api.api.deps import get_current_user
from salon_api.db import SessionDep
from salon_api.models import PointTransaction, User, UserReward
from salon_api.schemas.base import success
from salon_api.schemas.pagination import pagination_block
from salon_api.schemas.reward import PointTransactionRead, UserRewardRead

router = APIRouter()


def require_client(current_user: User = Depends(get_current_user)) -> User:
    """Profile views are for client accounts only."""
    if current_user.role != "user":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to perform this action",
        )
    return current_user


@router.get("/my-rewards", summary="Claimed rewards with type and status filters")
def get_user_rewards(
    session: SessionDep,
    current_user: User = Depends(require_client),
    status_filter: str = Query(default="all", alias="status"),
    reward_type: str = Query(default="all", alias="type"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> dict:
    conditions = [UserReward.user_id == current_user.id]
    if status_filter != "all":
        conditions.append(UserReward.status == status_filter)
    if reward_type != "all":
        conditions.append(UserReward.reward_type == reward_type)

    total = session.exec(select(func.count()).select_from(UserReward).where(*conditions)).one()
    rewards = session.exec(
        select(UserReward)
        .where(*conditions)
        .order_by(UserReward.claimed_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    return success(
        {
            "rewards": [UserRewardRead.model_validate(r).to_json() for r in rewards],
            "stats": {
                "total": total,
                "active": sum(1 for r in rewards if r.status == "active"),
                "used": sum(1 for r in rewards if r.status == "used"),
                "expired": sum(1 for r in rewards if r.status == "expired"),
                "gameWins": sum(1 for r in rewards if r.reward_type == "game_win"),
            },
            "pagination": pagination_block(page, limit, total, "totalRewards"),
        }
    )


@router.get("/my-transactions", summary="Point transaction history")
def get_user_transactions(
    session: SessionDep,
    current_user: User = Depends(require_client),
    transaction_type: str = Query(default="all", alias="type"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> dict:
    conditions = [PointTransaction.user_id == current_user.id]
    if transaction_type != "all":
        conditions.append(PointTransaction.type == transaction_type)

    total = session.exec(select(func.count()).select_from(PointTransaction).where(*conditions)).one()
    transactions = session.exec(
        select(PointTransaction)
        .where(*conditions)
        .order_by(PointTransaction.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    return success(
        {
            "transactions": [PointTransactionRead.model_validate(t).to_json() for t in transactions],
            "stats": {
                "total": total,
                "totalEarned": sum(t.points for t in transactions if t.points > 0),
                "totalSpent": abs(sum(t.points for t in transactions if t.points < 0)),
            },
            "pagination": pagination_block(page, limit, total, "totalTransactions"),
        }
    )
