"""Validated field types shared by request schemas."""
from __future__ import annotations

from datetime import date
from typing import Annotated
from zoneinfo import ZoneInfo

from pydantic import AfterValidator, StringConstraints

from lifeplan.services.plan_normalizer import is_valid_time

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def check_calendar_date(value: str) -> str:
    """Reject strings like 2024-02-30 that match the pattern but are not real days."""
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError("Date must be a valid calendar day in YYYY-MM-DD format") from exc
    return value


def check_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (KeyError, ValueError, OSError) as exc:
        # OSError: names of zoneinfo directories such as "America"
        raise ValueError(f"Unknown timezone '{value}'") from exc
    return value


IsoDate = Annotated[str, StringConstraints(pattern=DATE_PATTERN), AfterValidator(check_calendar_date)]
TimezoneName = Annotated[str, StringConstraints(min_length=1), AfterValidator(check_timezone)]


def check_clock_time(value: str) -> str:
    if not is_valid_time(value):
        raise ValueError("Time must be HH:MM on a 24-hour clock")
    return value


ClockTime = Annotated[str, AfterValidator(check_clock_time)]
