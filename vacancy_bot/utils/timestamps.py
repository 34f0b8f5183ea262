"""UTC timestamp helpers."""

import re
from datetime import datetime, timezone
from typing import Optional

# "+0300" style offsets as emitted by api.hh.ru
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


def utc_now() -> datetime:
    """Current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Make ``dt`` timezone-aware UTC; naive values are taken as UTC.

    Example:
        >>> ensure_utc(datetime(2025, 11, 4, 12, 0)).tzinfo == timezone.utc
        True
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def parse_iso_datetime(iso_string: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 string into a UTC datetime.

    Accepts:
    - 2025-11-04T12:00:00Z
    - 2025-11-04T12:00:00+03:00
    - 2025-11-04T12:00:00+0300
    - 2025-11-04T12:00:00
    - 2025-11-04

    Returns:
        Timezone-aware UTC datetime, or None if the text cannot be parsed
    """
    if not iso_string or not iso_string.strip():
        return None

    cleaned = iso_string.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"
    cleaned = _COMPACT_OFFSET.sub(r"\1:\2", cleaned)

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        pass

    for fmt in ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%d"):
        try:
            return ensure_utc(datetime.strptime(iso_string.strip(), fmt))
        except ValueError:
            continue

    return None


def format_timestamp(dt: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SSZ`` in UTC."""
    return ensure_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")
