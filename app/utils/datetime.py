"""Timestamps for event rows, localized to ``APP_TIMEZONE``.

Event and notification columns are plain ``DateTime`` (naive) so the same
schema works on SQLite. Values are written as naive local time and read back
as aware datetimes.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config import get_settings

_UTC_OFFSET = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


@lru_cache(maxsize=1)
def _app_timezone() -> tzinfo:
    name = (get_settings().app_timezone or "").strip() or "UTC"
    offset = _UTC_OFFSET.match(name)
    if offset:
        delta = timedelta(
            hours=int(offset.group("hours")), minutes=int(offset.group("minutes") or 0)
        )
        return timezone(-delta if offset.group("sign") == "-" else delta)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Express ``value`` in the app timezone; naive values are taken as local."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=_app_timezone())
    return value.astimezone(_app_timezone())


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    localized = ensure_app_timezone(value)
    return localized.replace(tzinfo=None) if localized is not None else None


def now_in_app_naive_datetime() -> datetime:
    """Current local time as stored in the ``DateTime`` columns."""

    return datetime.now(tz=_app_timezone()).replace(tzinfo=None)
