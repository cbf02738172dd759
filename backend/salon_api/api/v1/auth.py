import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, HTTPException, Request, status
from sqlmodel import select

from salon_api.api.deps import CurrentUser
from salon_api.core.limiter import limiter
from salon_api.core.security import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_password,
    verify_token,
)
from salon_api.db import SessionDep
from salon_api.models import Location, User
from salon_api.schemas.base import success
from salon_api.schemas.user import (
    RefreshTokenRequest,
    TokenPair,
    UserCreate,
    UserLogin,
    UserRead,
)
from salon_api.services.referrals import process_referral

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_response(user: User, **user_extra) -> dict:
    return success(
        {"user": {**UserRead.model_validate(user).to_json(), **user_extra}},
        token=create_access_token(user.id, role=user.role),
        refreshToken=create_refresh_token(user.id),
    )


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
@limiter.limit("20/hour")
def register_user(request: Request, payload: UserCreate, session: SessionDep) -> dict:
    email = payload.email.lower()
    existing = session.exec(select(User).where(User.email == email)).one_or_none()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists",
        )

    user = User(
        name=payload.name,
        email=email,
        hashed_password=get_password_hash(payload.password),
        date_of_birth=payload.date_of_birth,
    )
    if payload.selected_location_id:
        location = session.exec(
            select(Location).where(
                Location.location_id == payload.selected_location_id,
                Location.is_active == True,  # noqa: E712
            )
        ).first()
        if not location:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Selected location not found or inactive",
            )
        user.selected_location_id = location.location_id
        user.selected_at = datetime.utcnow()

    session.add(user)
    session.commit()
    session.refresh(user)

    referral_processed = False
    referral_message = None
    if payload.referral_code and payload.referral_code.strip():
        result = process_referral(session, user.id, payload.referral_code)
        referral_processed, referral_message = result.success, result.message
        logger.info(f"Referral for new user {user.id}: {result.message}")
        session.refresh(user)

    return _token_response(user, referralProcessed=referral_processed, referralMessage=referral_message)


@router.post(
    "/login",
    summary="Login and obtain tokens",
)
@limiter.limit("10/minute")
def login(request: Request, payload: UserLogin, session: SessionDep) -> dict:
    email = payload.email.lower()
    user = session.exec(select(User).where(User.email == email)).one_or_none()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )
    if not user.is_active or user.is_deleted:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is inactive",
        )

    user.last_login = datetime.utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)
    return _token_response(user)


@router.post(
    "/refresh",
    response_model=TokenPair,
    summary="Refresh access token",
)
def refresh_tokens(session: SessionDep, payload: RefreshTokenRequest) -> TokenPair:
    try:
        refresh_payload = verify_token(payload.refresh_token, token_type="refresh")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        ) from None

    user_id = refresh_payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token payload",
        )

    try:
        user = session.get(User, UUID(user_id))
    except ValueError:
        user = None
    if not user or not user.is_active or user.is_deleted:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Inactive or missing user",
        )

    return TokenPair(
        access_token=create_access_token(user.id, role=user.role),
        refresh_token=create_refresh_token(user.id),
    )


@router.get("/me", summary="Current user")
def read_me(current_user: CurrentUser) -> dict:
    return success({"user": UserRead.model_validate(current_user).to_json()})
