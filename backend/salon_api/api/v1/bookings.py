from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import func
from sqlmodel import select

from salon_api.api.deps import CurrentUser
from salon_api.core.cache import invalidate_availability
from salon_api.db import SessionDep
from salon_api.models import Booking, Location, Service, UserReward
from salon_api.models.booking import ACTIVE_STATUSES, PAST_STATUSES
from salon_api.schemas.availability import AvailabilityUpdate
from salon_api.schemas.base import success
from salon_api.schemas.booking import BookingCreate, BookingRate, BookingRead
from salon_api.schemas.pagination import pagination_block
from salon_api.services import availability
from salon_api.services.points import award_points

logger = logging.getLogger(__name__)

router = APIRouter()

AVAILABILITY_EDITOR_ROLES = ("team", "spa")


def _booking_json(booking: Booking) -> dict:
    return BookingRead.model_validate(booking).to_json()


@router.get("/availability", summary="Free slots for a service on a day")
def get_availability(
    session: SessionDep,
    current_user: CurrentUser,
    location_id: Optional[str] = Query(default=None, alias="locationId"),
    day: Optional[date] = Query(default=None, alias="date"),
    service_id: Optional[UUID] = Query(default=None, alias="serviceId"),
) -> dict:
    if not location_id or not day or not service_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required parameters: locationId, date, serviceId",
        )

    service = session.get(Service, service_id)
    if not service:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")

    return success(availability.compute_availability(session, location_id, day, service))


@router.put("/availability", summary="Update business hours of the managed location")
def update_availability(
    payload: AvailabilityUpdate,
    session: SessionDep,
    current_user: CurrentUser,
) -> dict:
    if current_user.role not in AVAILABILITY_EDITOR_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only team members can update availability",
        )

    location_id = current_user.managed_location_id
    location = None
    if location_id:
        location = session.exec(select(Location).where(Location.location_id == location_id)).first()
    if not location:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No spa location configured")

    hours = {day: value.model_dump() for day, value in payload.business_hours.items()}
    business_hours = availability.update_business_hours(session, location, hours)
    return success({"businessHours": business_hours})


@router.get("/upcoming", summary="Upcoming appointments of the current user")
def get_upcoming(
    session: SessionDep,
    current_user: CurrentUser,
    limit: int = Query(default=10, ge=1, le=100),
) -> dict:
    statement = (
        select(Booking)
        .where(
            Booking.user_id == current_user.id,
            Booking.date >= datetime.utcnow(),
            Booking.status.in_(ACTIVE_STATUSES),
        )
        .order_by(Booking.date.asc())
        .limit(limit)
    )
    appointments = [_booking_json(b) for b in session.exec(statement).all()]
    return success({"appointments": appointments, "total": len(appointments)})


@router.get("/past", summary="Past visits of the current user")
def get_past(
    session: SessionDep,
    current_user: CurrentUser,
    limit: int = Query(default=20, ge=1, le=100),
    page: int = Query(default=1, ge=1),
) -> dict:
    conditions = (
        Booking.user_id == current_user.id,
        Booking.date < datetime.utcnow(),
        Booking.status.in_(PAST_STATUSES),
    )
    total = session.exec(select(func.count()).select_from(Booking).where(*conditions)).one()
    statement = (
        select(Booking)
        .where(*conditions)
        .order_by(Booking.date.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    visits = [_booking_json(b) for b in session.exec(statement).all()]
    return success({"visits": visits, "pagination": pagination_block(page, limit, total, "totalVisits")})


@router.get("/stats", summary="Booking statistics of the current user")
def get_stats(session: SessionDep, current_user: CurrentUser) -> dict:
    now = datetime.utcnow()
    mine = Booking.user_id == current_user.id

    upcoming = session.exec(
        select(func.count()).select_from(Booking).where(mine, Booking.date >= now, Booking.status.in_(ACTIVE_STATUSES))
    ).one()
    visits = session.exec(
        select(func.count()).select_from(Booking).where(mine, Booking.date < now, Booking.status == "completed")
    ).one()
    total_spent = session.exec(
        select(func.coalesce(func.sum(Booking.final_price), 0)).where(mine, Booking.status == "completed")
    ).one()
    average_rating, rating_count = session.exec(
        select(func.avg(Booking.rating), func.count(Booking.rating)).where(mine, Booking.rating.is_not(None))
    ).one()
    total_points = session.exec(
        select(func.coalesce(func.sum(Booking.points_earned), 0)).where(
            mine, Booking.status == "completed", Booking.points_earned > 0
        )
    ).one()

    return success(
        {
            "stats": {
                "upcomingAppointments": upcoming,
                "totalVisits": visits,
                "totalSpent": float(total_spent or 0),
                "averageRating": float(average_rating or 0),
                "totalRatings": rating_count or 0,
                "totalPointsEarned": int(total_points or 0),
            }
        }
    )


def _start_of(payload: BookingCreate) -> datetime:
    """Appointment start from the requested day and the slot label."""
    requested = payload.date
    if isinstance(requested, datetime) and requested.tzinfo is not None:
        requested = requested.astimezone(timezone.utc).replace(tzinfo=None)

    slot_time = availability.parse_time_label(payload.time)
    if slot_time is not None:
        day = requested.date() if isinstance(requested, datetime) else requested
        return datetime.combine(day, slot_time)
    if isinstance(requested, datetime):
        return requested
    return datetime.combine(requested, time.min)


@router.post("/create", status_code=status.HTTP_201_CREATED, summary="Book a service")
def create_booking(payload: BookingCreate, session: SessionDep, current_user: CurrentUser) -> dict:
    service = session.get(Service, payload.service_id)
    if not service or service.is_deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")

    final_price = service.calculate_price()
    discount_applied = 0.0
    reward_used_id = None

    if payload.reward_id:
        reward = session.exec(
            select(UserReward).where(
                UserReward.id == payload.reward_id,
                UserReward.user_id == current_user.id,
            )
        ).first()
        if reward and reward.is_valid():
            if reward.reward_type == "discount":
                discount = final_price * reward.value / 100
            else:
                discount = reward.value
            discount_applied = round(min(discount, final_price), 2)
            final_price = round(final_price - discount_applied, 2)
            reward_used_id = reward.id

    booking = Booking(
        user_id=current_user.id,
        service_id=service.id,
        service_name=service.name,
        service_price=service.base_price,
        final_price=final_price,
        discount_applied=discount_applied,
        reward_used_id=reward_used_id,
        date=_start_of(payload),
        time=payload.time,
        duration=service.duration,
        provider_id=payload.provider_id,
        provider_name=payload.provider_name or "Staff Member",
        location_id=current_user.selected_location_id or service.location_id,
        notes=payload.notes or "",
        status="scheduled",
    )
    session.add(booking)
    session.flush()

    if reward_used_id:
        reward.mark_as_used(discount_applied, booking_id=booking.id)
        session.add(reward)

    session.commit()
    session.refresh(booking)
    invalidate_availability(booking.location_id)

    logger.info(f"Booking {booking.id} created by user {current_user.id} at {booking.location_id}")
    return success({"booking": _booking_json(booking)}, message="Booking created successfully")


@router.post("/rate/{booking_id}", summary="Rate a completed visit")
def rate_visit(
    booking_id: UUID,
    payload: BookingRate,
    session: SessionDep,
    current_user: CurrentUser,
) -> dict:
    if not payload.rating or payload.rating < 1 or payload.rating > 5:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Valid rating (1-5) is required")

    booking = session.exec(
        select(Booking).where(
            Booking.id == booking_id,
            Booking.user_id == current_user.id,
            Booking.status == "completed",
        )
    ).first()
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found or not completed")

    if booking.rating:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="This visit has already been rated")

    booking.rating = payload.rating
    booking.review = payload.review
    booking.updated_at = datetime.utcnow()
    session.add(booking)

    location = session.exec(select(Location).where(Location.location_id == booking.location_id)).first()
    review_points = location.review_points if location and location.review_points > 0 else 0
    if review_points:
        award_points(
            session,
            current_user,
            review_points,
            source="review",
            description="Review reward",
            reference_id=booking.id,
            location_id=booking.location_id,
        )

    session.commit()
    session.refresh(booking)
    invalidate_availability(booking.location_id)

    return success(
        {"booking": _booking_json(booking), "pointsEarned": review_points},
        message="Thank you for your review!" if review_points else "Review submitted successfully",
    )


@router.get("/booked-times", summary="Taken time labels for a service on a day")
def get_booked_times(
    session: SessionDep,
    current_user: CurrentUser,
    service_id: Optional[UUID] = Query(default=None, alias="serviceId"),
    day: Optional[date] = Query(default=None, alias="date"),
) -> dict:
    if not service_id or not day:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="serviceId and date are required")

    return {"success": True, "data": {"bookedTimes": availability.booked_times(session, service_id, day)}}
