from __future__ import annotations

import re
from typing import Optional

from pydantic import Field, field_validator

from salon_api.models.location import WEEKDAYS
from salon_api.schemas.base import CamelModel

_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d$")


class BusinessHoursDay(CamelModel):
    """Opening hours for one weekday, times in HH:MM."""

    open: Optional[str] = None
    close: Optional[str] = None
    closed: bool = False

    @field_validator("open", "close")
    @classmethod
    def validate_time(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not _TIME_RE.match(value):
            raise ValueError("Time must be in HH:MM format")
        return value


class AvailabilityUpdate(CamelModel):
    business_hours: dict[str, BusinessHoursDay] = Field(default_factory=dict)

    @field_validator("business_hours")
    @classmethod
    def validate_weekdays(cls, value: dict[str, BusinessHoursDay]) -> dict[str, BusinessHoursDay]:
        unknown = [day for day in value if day.lower() not in WEEKDAYS]
        if unknown:
            raise ValueError(f"Unknown weekday(s): {', '.join(unknown)}")
        return {day.lower(): hours for day, hours in value.items()}
