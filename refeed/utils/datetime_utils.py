from __future__ import annotations

import time as _time
from datetime import date, datetime, timezone
from typing import Optional, Union

from dateutil import parser as date_parser

TimestampInput = Union[str, _time.struct_time, datetime, date, int, float, None]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_utc(value: TimestampInput) -> Optional[datetime]:
    """
    Parse the timestamp forms feeds hand us into an aware UTC datetime.

    Naive values are taken as UTC. Anything unparseable yields ``None``
    instead of raising; callers treat that as "unknown publish time".
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        if isinstance(value, datetime):
            dt = value
        elif isinstance(value, date):
            dt = datetime(value.year, value.month, value.day)
        elif isinstance(value, _time.struct_time):
            dt = datetime(*value[:6], tzinfo=timezone.utc)
        elif isinstance(value, (int, float)):
            dt = datetime.fromtimestamp(value, tz=timezone.utc)
        else:
            text = str(value).strip()
            if not text:
                return None
            dt = date_parser.parse(text)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        # offsets at either end of the calendar can shift past datetime.min/max
        return dt.astimezone(timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None


def hours_between(a: Optional[datetime], b: Optional[datetime]) -> Optional[float]:
    """Absolute distance in hours, or ``None`` when either side is unknown."""
    if a is None or b is None:
        return None
    return abs((a - b).total_seconds()) / 3600.0


__all__ = ["TimestampInput", "coerce_utc", "hours_between", "utcnow"]
