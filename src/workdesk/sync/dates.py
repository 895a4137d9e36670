# src/workdesk/sync/dates.py

"""
Local-date helpers.

Day grouping always uses the viewer's local calendar, never UTC: a task due at
23:30 local time belongs to that local day even when it is already tomorrow in UTC.
"""

from __future__ import annotations

from datetime import date, datetime, tzinfo


def parse_instant(raw: str) -> datetime:
    """
    Parse an ISO-8601 string.

    A trailing "Z" is accepted. Strings without an offset are local wall time
    (same as the browser's Date for "YYYY-MM-DDTHH:MM:SS").
    Raises ValueError for anything unparsable.
    """
    s = (raw or "").strip()
    if not s:
        raise ValueError("empty date string")
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    return datetime.fromisoformat(s)


def to_local(instant: datetime, tz: tzinfo | None = None) -> datetime:
    if instant.tzinfo is None:
        # Naive values are already local wall time.
        return instant
    if tz is None:
        return instant.astimezone()
    return instant.astimezone(tz)


def date_key(year: int, month: int, day: int) -> str:
    """YYYY-MM-DD for a calendar day (month is 1-based)."""
    return f"{year:04d}-{month:02d}-{day:02d}"


def local_date_key(instant: datetime | date | str, tz: tzinfo | None = None) -> str:
    if isinstance(instant, str):
        instant = parse_instant(instant)
    if isinstance(instant, datetime):
        local = to_local(instant, tz)
        return date_key(local.year, local.month, local.day)
    return date_key(instant.year, instant.month, instant.day)


def now_local(tz: tzinfo | None = None) -> datetime:
    return datetime.now(tz) if tz is not None else datetime.now().astimezone()


def today_key(now: datetime | None = None, tz: tzinfo | None = None) -> str:
    return local_date_key(now if now is not None else now_local(tz), tz)


def is_same_local_date(
    a: datetime | date | str,
    b: datetime | date | str,
    tz: tzinfo | None = None,
) -> bool:
    return local_date_key(a, tz) == local_date_key(b, tz)


def safe_local_date_key(raw: str | None, tz: tzinfo | None = None) -> str | None:
    """Like local_date_key, but None for missing or unparsable values."""
    if not raw:
        return None
    try:
        return local_date_key(raw, tz)
    except ValueError:
        return None


def is_date_key(raw: str) -> bool:
    try:
        parsed = date.fromisoformat(raw)
    except ValueError:
        return False
    return date_key(parsed.year, parsed.month, parsed.day) == raw


def local_instant(key: str, *, hour: int = 9, tz: tzinfo | None = None) -> str:
    """
    ISO instant (with offset) for `hour`:00 local time on day `key`.

    Used when a due date is entered as a bare YYYY-MM-DD.
    """
    day = date.fromisoformat(key)
    naive = datetime(day.year, day.month, day.day, hour)
    aware = naive.replace(tzinfo=tz) if tz is not None else naive.astimezone()
    return aware.isoformat(timespec="seconds")
