"""
Delay computation for pausing breaks until the next morning.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from core.settings import DEFAULT_MORNING_HOUR


def time_until_morning(settings, now: Optional[datetime] = None) -> int:
    """
    Return the milliseconds left until the next morning boundary.

    The boundary is ``morningHour`` o'clock local time, taken from
    ``settings`` when available. Once today's boundary has passed the next
    day's is used.
    """
    current = now or datetime.now()
    morning_hour = DEFAULT_MORNING_HOUR
    if settings is not None:
        morning_hour = settings.get("morningHour")

    morning = current.replace(hour=morning_hour, minute=0, second=0, microsecond=0)
    if morning <= current:
        morning += timedelta(days=1)
    return (morning - current) // timedelta(milliseconds=1)
