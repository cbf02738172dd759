from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from salon_api.api.deps import CurrentUser
from salon_api.db import SessionDep
from salon_api.schemas.base import success
from salon_api.services.dashboard import client_dashboard, spa_dashboard

router = APIRouter()


@router.get("/data", summary="Dashboard data for the current account")
def get_dashboard_data(session: SessionDep, current_user: CurrentUser) -> dict:
    if current_user.role == "spa":
        if not current_user.spa_location_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Spa location not configured for this account",
            )
        return success(spa_dashboard(session, current_user.spa_location_id))

    return success(client_dashboard(session, current_user))
