# beautybook/core/clock.py
"""Injectable time source so lifecycle rules can be tested without waiting"""
from datetime import datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def get_clock() -> Clock:
    """FastAPI dependency; tests override it with a fixed clock"""
    return system_clock


def business_local_now(now: datetime, tz_name: str) -> datetime:
    """
    Convert an aware instant to naive wall-clock time in the business's zone.

    Booking times are stored naive in business-local time, so every
    comparison against "now" goes through here.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    try:
        zone = ZoneInfo(tz_name or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {tz_name!r}, falling back to UTC")
        zone = ZoneInfo("UTC")

    return now.astimezone(zone).replace(tzinfo=None)
