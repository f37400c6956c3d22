"""Time parsing and formatting utilities."""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta, timezone, tzinfo

from zoneinfo import ZoneInfo

from reindeer_tracks.models import DateRange

_OFFSET_RE = re.compile(r"^(?:UTC)?([+-])(\d{2}):?(\d{2})$")


def tzinfo_from_name(tz_name: str) -> tzinfo:
    """Create tzinfo from an IANA timezone name or a fixed ``+HH:MM`` offset.

    Args:
        tz_name: Timezone like "Europe/Oslo", "+01:00" or "UTC+0100".

    Returns:
        tzinfo instance.

    Raises:
        ValueError: If the name is neither a valid offset nor a known zone.
    """

    m = _OFFSET_RE.match(tz_name.strip())
    if m:
        sign = -1 if m.group(1) == "-" else 1
        delta = timedelta(hours=int(m.group(2)), minutes=int(m.group(3)))
        return timezone(sign * delta)
    try:
        return ZoneInfo(tz_name)
    except Exception as exc:  # ZoneInfo raises KeyError / ZoneInfoNotFoundError (platform dependent)
        raise ValueError(f"Invalid timezone: {tz_name!r}. Examples: Europe/Oslo, +01:00") from exc


def parse_timestamp(text: str) -> datetime:
    """Parse an ISO-8601 timestamp as reported by the source.

    The zone representation is preserved: naive strings stay naive and
    offsets stay as given, so calendar-day keys match the reported wall time.

    Raises:
        ValueError: If cannot parse.
    """

    try:
        return datetime.fromisoformat(text.strip())
    except (ValueError, AttributeError) as exc:
        raise ValueError(f"Cannot parse timestamp: {text!r}") from exc


def format_source_datetime(dt: datetime, tz: tzinfo) -> str:
    """Format a datetime the way the source expects: 2004-01-01T00:00:00+01:00."""

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(tz).replace(microsecond=0).isoformat()


def year_range(year: int, tz: tzinfo, now: datetime | None = None) -> DateRange:
    """Return [Jan 1 of year, Jan 1 of next year) in ``tz``, clipped to now.

    Both bounds are clipped, so a future year collapses to an empty range at now.
    """

    if now is None:
        now = datetime.now(UTC)
    start = datetime(year, 1, 1, tzinfo=tz)
    end = datetime(year + 1, 1, 1, tzinfo=tz)
    if end > now:
        end = now.astimezone(tz)
    if start > now:
        start = now.astimezone(tz)
    return DateRange(start=start, end=end)
