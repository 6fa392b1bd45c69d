from __future__ import annotations

"""Day keys: one canonical, zero-padded `YYYY_MM_DD` string per calendar day."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

KEY_FORMAT = "%Y_%m_%d"


def todays_key(now: datetime, time_zone: str) -> str:
    """Return the day key for `now` as seen in `time_zone`.

    Naive datetimes are taken to be UTC. Month and day are zero-padded so
    keys sort lexicographically in calendar order.

    Raises:
        ZoneInfoNotFoundError: if `time_zone` is not a known IANA zone.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(ZoneInfo(time_zone))
    return local.strftime(KEY_FORMAT)


def is_valid_zone(time_zone: str) -> bool:
    try:
        ZoneInfo(time_zone)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def to_hyphenated(key: str) -> str:
    return key.replace("_", "-")


def to_underscore(date_str: str) -> str:
    return date_str.replace("-", "_")


def parse_key(text: str) -> str:
    """Normalise `YYYY-MM-DD`, `YYYY_MM_DD` or unpadded variants to a day key."""
    parts = to_underscore(str(text).strip()).split("_")
    if len(parts) != 3:
        raise ValueError(f"Invalid date: {text!r}")
    try:
        year, month, day = (int(p) for p in parts)
        d = date(year, month, day)
    except ValueError:
        raise ValueError(f"Invalid date: {text!r}") from None
    return d.strftime(KEY_FORMAT)
