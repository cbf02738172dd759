"""Bookable slot generation for a location's business hours."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlmodel import Session, select

from salon_api.core.cache import Cache, get_cache, invalidate_availability
from salon_api.core.config import settings
from salon_api.models import Booking, Location, Service
from salon_api.models.location import WEEKDAYS

logger = logging.getLogger(__name__)

# Bookings in these states do not hold a slot
NON_BLOCKING_STATUSES = ("cancelled", "refused")

NO_HOURS_REASON = "No business hours configured"
CLOSED_REASON = "Closed on this day"


@dataclass(frozen=True)
class Slot:
    label: str
    start: datetime
    end: datetime


def parse_clock(value: str) -> time:
    """Parse a 24-hour ``HH:MM`` value."""
    hour, minute = value.split(":")
    return time(int(hour), int(minute))


def parse_time_label(label: str | None) -> Optional[time]:
    """Parse a 12-hour label such as ``"10:00 AM"``; None when unreadable."""
    if not label:
        return None
    try:
        clock, period = label.strip().split(" ")
        hour_str, minute_str = clock.split(":")
        hour, minute = int(hour_str), int(minute_str)
    except ValueError:
        return None

    period = period.upper()
    if period == "PM" and hour != 12:
        hour += 12
    elif period == "AM" and hour == 12:
        hour = 0
    if not (0 <= hour < 24 and 0 <= minute < 60):
        return None
    return time(hour, minute)


def format_slot_label(moment: datetime | time) -> str:
    """``9:00 AM`` style label, no leading zero on the hour."""
    hour = moment.hour % 12 or 12
    period = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {period}"


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def generate_slots(
    open_time: str,
    close_time: str,
    duration: int,
    day: date,
    interval: int | None = None,
    max_slots: int | None = None,
) -> list[Slot]:
    """Candidate slots between opening and closing time.

    Starts advance by ``interval`` minutes while the start is before closing
    time; at most ``max_slots`` starts are considered. A slot is kept only if
    the service fits before closing.
    """
    interval = interval or settings.SLOT_INTERVAL_MINUTES
    max_slots = max_slots or settings.MAX_SLOTS_PER_DAY

    current = datetime.combine(day, parse_clock(open_time))
    end = datetime.combine(day, parse_clock(close_time))
    length = timedelta(minutes=duration)

    slots: list[Slot] = []
    considered = 0
    while current < end and considered < max_slots:
        slot_end = current + length
        if slot_end <= end:
            slots.append(Slot(label=format_slot_label(current), start=current, end=slot_end))
        current += timedelta(minutes=interval)
        considered += 1
    return slots


def booking_window(booking: Booking) -> tuple[datetime, datetime]:
    """Start and end of a booking, taking the start time from its label."""
    start = booking.date
    label_time = parse_time_label(booking.time)
    if label_time is not None:
        start = datetime.combine(booking.date.date(), label_time)
    return start, start + timedelta(minutes=booking.duration or settings.DEFAULT_SERVICE_DURATION)


def remove_conflicts(slots: list[Slot], windows: list[tuple[datetime, datetime]]) -> list[Slot]:
    return [
        slot
        for slot in slots
        if not any(slot.start < b_end and slot.end > b_start for b_start, b_end in windows)
    ]


def day_bookings(session: Session, location_id: str, day: date) -> list[Booking]:
    """Bookings holding time at a location on the given day."""
    start_of_day = datetime.combine(day, time.min)
    end_of_day = datetime.combine(day, time.max)
    statement = select(Booking).where(
        Booking.location_id == location_id,
        Booking.date >= start_of_day,
        Booking.date <= end_of_day,
        Booking.status.not_in(NON_BLOCKING_STATUSES),
    )
    return list(session.exec(statement).all())


def availability_cache_key(location_id: str, day: date, service_id) -> tuple:
    return ("availability", location_id, day.isoformat(), str(service_id))


def compute_availability(
    session: Session,
    location_id: str,
    day: date,
    service: Service,
    cache: Cache | None = None,
) -> dict:
    """Free slot labels of ``service`` at ``location_id`` on ``day``.

    Results are cached per (location, date, service) for
    ``AVAILABILITY_CACHE_TTL`` seconds.
    """
    cache = cache or get_cache()
    key = availability_cache_key(location_id, day, service.id)
    cached = cache.get(key)
    if cached is not None:
        logger.debug(f"Availability cache hit for {key}")
        return cached

    result = _compute(session, location_id, day, service)
    cache.set(key, result, ttl=settings.AVAILABILITY_CACHE_TTL)
    return result


def _compute(session: Session, location_id: str, day: date, service: Service) -> dict:
    duration = service.duration or settings.DEFAULT_SERVICE_DURATION

    location = session.exec(select(Location).where(Location.location_id == location_id)).first()
    if not location or not location.business_hours:
        return {"slots": [], "reason": NO_HOURS_REASON}

    day_name = weekday_name(day)
    hours = location.business_hours.get(day_name)
    if not hours or hours.get("closed") or not hours.get("open") or not hours.get("close"):
        return {"slots": [], "reason": CLOSED_REASON}

    candidates = generate_slots(hours["open"], hours["close"], duration, day)
    windows = [booking_window(booking) for booking in day_bookings(session, location_id, day)]
    free = remove_conflicts(candidates, windows)

    return {
        "slots": [slot.label for slot in free],
        "day": day_name,
        "hours": {"open": hours["open"], "close": hours["close"]},
    }


def update_business_hours(session: Session, location: Location, business_hours: dict) -> dict:
    """Merge weekday hours into the location and drop its cached availability."""
    merged = dict(location.business_hours or {})
    merged.update(business_hours)
    location.business_hours = merged
    location.updated_at = datetime.utcnow()
    session.add(location)
    session.commit()
    session.refresh(location)

    invalidate_availability(location.location_id)
    logger.info(f"Business hours updated for location {location.location_id}")
    return location.business_hours


def booked_times(session: Session, service_id, day: date) -> list[str]:
    """Time labels already taken for a service on a day."""
    start_of_day = datetime.combine(day, time.min)
    end_of_day = datetime.combine(day, time.max)
    statement = select(Booking.time).where(
        Booking.service_id == service_id,
        Booking.date >= start_of_day,
        Booking.date <= end_of_day,
        Booking.status.not_in(NON_BLOCKING_STATUSES),
    )
    return list(session.exec(statement).all())
