from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

# Lenient about fractional second width, which PostgREST trims
_DATETIME = TypeAdapter(datetime)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def parse_iso8601_utc(val: Any) -> Optional[datetime]:
    """
    Accepts:
      - ISO-8601 strings ('2025-04-12T18:59:50Z', '2025-04-12T11:59:50-07:00',
        '2025-04-24T10:15:30.12345+00:00', '2025-04-12T18:59')
      - datetime (naive or tz-aware)
      - None / empty
    Returns a timezone-aware UTC datetime, or None if not set/parsable.
    Naive values are taken to be UTC.
    """
    if not val:
        return None

    if isinstance(val, datetime):
        dt = val
    else:
        try:
            dt = _DATETIME.validate_python(str(val).strip())
        except ValidationError:
            return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def deadline_passed(deadline: Any, now: Optional[datetime] = None) -> bool:
    """True when the deadline is in the past or cannot be read."""
    parsed = parse_iso8601_utc(deadline)
    if parsed is None:
        return True
    return (now or utc_now()) > parsed
