from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from refeed.contracts import Record
from refeed.utils.datetime_utils import coerce_utc, utcnow

DEFAULT_WINDOW_DAYS = 7
DEFAULT_WINDOW_LIMIT = 100


def select_window(
    records: Iterable[Record],
    now: Optional[datetime] = None,
    days: int = DEFAULT_WINDOW_DAYS,
    limit: int = DEFAULT_WINDOW_LIMIT,
) -> List[Record]:
    """
    Pick the recent records a candidate should be compared against.

    Records published at or after ``now - days`` are kept, newest first, at
    most ``limit`` of them. Records without a publish time are skipped.
    """
    cutoff = (coerce_utc(now) or utcnow()) - timedelta(days=days)
    recent = [
        record
        for record in records
        if record.published_at is not None and record.published_at >= cutoff
    ]
    recent.sort(key=lambda record: record.published_at, reverse=True)
    return recent[: max(0, limit)]


__all__ = ["DEFAULT_WINDOW_DAYS", "DEFAULT_WINDOW_LIMIT", "select_window"]
