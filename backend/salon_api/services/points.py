from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from sqlmodel import Session

from salon_api.models import PointTransaction, User

logger = logging.getLogger(__name__)


def award_points(
    session: Session,
    user: User,
    points: int,
    source: str,
    description: str = "",
    type: str = "earned",
    reference_id: UUID | None = None,
    location_id: str | None = None,
) -> PointTransaction:
    """Change a user's balance and record the ledger entry. The caller commits."""
    user.points = (user.points or 0) + points
    user.updated_at = datetime.utcnow()
    transaction = PointTransaction(
        user_id=user.id,
        points=points,
        type=type,
        source=source,
        description=description,
        reference_id=reference_id,
        location_id=location_id,
        balance_after=user.points,
    )
    session.add(user)
    session.add(transaction)
    logger.info(f"{points:+d} points ({source}) for user {user.id}, balance {user.points}")
    return transaction
