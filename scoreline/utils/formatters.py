"""
Display helpers shared by the API and server-rendered views.
"""

from datetime import datetime, timezone
from typing import Any, NamedTuple, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

from scoreline.config import settings
from scoreline.utils.dates import parse_iso8601_utc

logger = logging.getLogger(__name__)

DATE_UNAVAILABLE = "Date unavailable"
INVALID_DATE = "Invalid Date"

# en-GB medium month names, fixed so output does not depend on the process locale
MONTH_ABBREVIATIONS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


class MovementIndicator(NamedTuple):
    text: str
    css_class: str


def _display_zone(tz_name: Optional[str]):
    name = tz_name or settings.display_timezone
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        logger.warning(f"Unknown display timezone {name!r}, falling back to UTC")
        return timezone.utc


def _to_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return parse_iso8601_utc(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        # Epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    return parse_iso8601_utc(value)


def format_date_time(value: Any, tz_name: Optional[str] = None) -> str:
    """Format a timestamp as "D Mon YYYY, HH:mm" (en-GB, 24-hour).

    Returns "Date unavailable" for None/empty input and "Invalid Date" when
    the value cannot be parsed.
    """
    if value is None or value == "":
        return DATE_UNAVAILABLE
    dt = _to_datetime(value)
    if dt is None:
        logger.debug(f"Error formatting date: {value!r}")
        return INVALID_DATE
    local = dt.astimezone(_display_zone(tz_name))
    return f"{local.day} {MONTH_ABBREVIATIONS[local.month - 1]} {local.year}, {local:%H:%M}"


def movement_indicator(movement: Optional[int]) -> MovementIndicator:
    """Arrow text and CSS classes for a rank movement between two standings snapshots."""
    if movement is None or movement == 0:
        return MovementIndicator("–", "text-gray-500")
    if movement > 0:
        return MovementIndicator(f"▲{movement}", "text-green-600 font-semibold")
    return MovementIndicator(f"▼{abs(movement)}", "text-red-600 font-semibold")
