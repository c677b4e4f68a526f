"""Next-occurrence resolver."""

from collections.abc import Iterable
from datetime import date, timedelta

from bondicar.recurrence.dates import current_date
from bondicar.recurrence.weekdays import Weekday, normalize_weekdays
from bondicar.utils.logging import engine_logger

DEFAULT_WINDOW_DAYS = 14


def next_occurrence(
    weekdays: Iterable[Weekday | str],
    start_date: date,
    *,
    today: date | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> date:
    """Nearest date at or after today (and at or after ``start_date``) on a series weekday.

    A future ``start_date`` that itself falls on a series weekday is returned
    as-is. If the scan window holds no qualifying day, ``start_date`` is
    returned unchanged and the fallback is logged.
    """
    if today is None:
        today = current_date()

    targets = normalize_weekdays(weekdays)

    if start_date > today and start_date.weekday() in targets:
        return start_date

    for offset in range(window_days):
        candidate = today + timedelta(days=offset)
        if candidate.weekday() in targets and candidate >= start_date:
            return candidate

    engine_logger.log_fallback(
        "resolver",
        "no_occurrence_in_window",
        start_date=str(start_date),
        today=str(today),
        window_days=window_days,
    )
    return start_date
