"""Timezone-safe calendar date helpers.

Calendar dates cross the engine boundary as ``YYYY-MM-DD`` strings or native
``date`` values. Strings are always split into integer components and fed to
``date(year, month, day)``; nothing here goes through a UTC-normalising parse,
so the calendar day never shifts with the host's offset.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from bondicar.config import get_settings
from bondicar.utils.logging import engine_logger

MIN_YEAR = 1900
MAX_YEAR = 2100


def current_date(tz_name: str | None = None) -> date:
    """Today's calendar date in the marketplace timezone."""
    zone = ZoneInfo(tz_name or get_settings().marketplace_timezone)
    return datetime.now(zone).date()


def parse_local_date(value: str, *, today: date | None = None) -> date:
    """Parse ``YYYY-MM-DD`` into a calendar date.

    Never raises. Malformed input (wrong segment count, non-numeric parts,
    out-of-range components, impossible day for the month) is logged and
    replaced by today's date.

    Args:
        value: Wire string, e.g. "2024-01-05"
        today: Fallback date (defaults to the marketplace's current date)

    Returns:
        Calendar date built from the string's components, or the fallback
    """
    reason = _check_components(value)
    if reason is None:
        year, month, day = (int(part) for part in value.strip().split("-"))
        try:
            return date(year, month, day)
        except ValueError:
            reason = "invalid_day_for_month"

    engine_logger.log_fallback("date_parser", reason, input=repr(value))
    return today if today is not None else current_date()


def _check_components(value: object) -> str | None:
    if not isinstance(value, str):
        return "not_a_string"

    parts = value.strip().split("-")
    if len(parts) != 3:
        return "wrong_segment_count"
    if not all(part.isascii() and part.isdigit() for part in parts):
        return "non_numeric"

    year, month, day = (int(part) for part in parts)
    if not MIN_YEAR <= year <= MAX_YEAR:
        return "year_out_of_range"
    if not 1 <= month <= 12:
        return "month_out_of_range"
    if not 1 <= day <= 31:
        return "day_out_of_range"
    return None


def coerce_departure_date(value: object, *, today: date | None = None) -> date:
    """Read a stored departure date: native date, datetime, or ``YYYY-MM-DD``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_local_date(value, today=today)

    engine_logger.log_fallback("date_parser", "unsupported_type", input=type(value).__name__)
    return today if today is not None else current_date()


def format_display_date(value: date) -> str:
    """Render as dd/mm/yyyy."""
    return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"


def to_wire(value: date) -> str:
    """Render as YYYY-MM-DD."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
