"""Occurrence expander: recurrence definition -> publishable calendar dates."""

from collections.abc import Iterable
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from bondicar.recurrence.dates import current_date
from bondicar.recurrence.weekdays import Weekday, normalize_weekdays
from bondicar.utils.logging import engine_logger

DEFAULT_MAX_STEPS = 1000
DEFAULT_HORIZON_YEARS = 1


def horizon_end(start_date: date, end_date: date | None, horizon_years: int = DEFAULT_HORIZON_YEARS) -> date:
    """Last calendar day (inclusive) a series can occupy.

    Never raises: an open-ended horizon past the last representable date is
    clamped to ``date.max`` and logged.
    """
    if end_date is not None:
        return end_date
    # Open-ended series stop just before start + N years.
    try:
        return start_date + relativedelta(years=horizon_years) - timedelta(days=1)
    except (ValueError, OverflowError):
        engine_logger.log_fallback(
            "expander",
            "horizon_out_of_range",
            start_date=str(start_date),
            horizon_years=horizon_years,
        )
        return date.max


def expand(
    weekdays: Iterable[Weekday | str],
    start_date: date,
    end_date: date | None = None,
    publish_days_before: int = 0,
    *,
    today: date | None = None,
    max_steps: int = DEFAULT_MAX_STEPS,
    horizon_years: int = DEFAULT_HORIZON_YEARS,
) -> list[date]:
    """Dates that should exist as published instances as of ``today``.

    A day D is included when its weekday is in ``weekdays``, it lies within
    ``[start_date, end_date]`` (or the open-ended horizon), and D is at most
    ``publish_days_before`` days after ``today``.

    Args:
        weekdays: Weekday members or names (English or Spanish)
        start_date: First day of the series (inclusive)
        end_date: Last day of the series (inclusive), None for open-ended
        publish_days_before: Lead days; negative values are treated as 0
        today: Evaluation date (defaults to the marketplace's current date)
        max_steps: Day-step cap; hitting it truncates the result
        horizon_years: Open-ended search horizon

    Returns:
        Ascending list of dates; empty means nothing is publishable yet
    """
    if today is None:
        today = current_date()

    targets = normalize_weekdays(weekdays)
    if not targets:
        return []

    # Compared as day counts so huge lead values never build an out-of-range date
    lead_days = max(0, publish_days_before)
    last = horizon_end(start_date, end_date, horizon_years)

    dates: list[date] = []
    current = start_date
    steps = 0

    while current <= last:
        if (current - today).days > lead_days:
            # Every later day publishes even later.
            break
        if steps >= max_steps:
            engine_logger.log_fallback(
                "expander",
                "iteration_cap",
                start_date=str(start_date),
                stopped_at=str(current),
                max_steps=max_steps,
                generated=len(dates),
            )
            break

        if current.weekday() in targets:
            dates.append(current)

        if current == date.max:
            break
        current += timedelta(days=1)
        steps += 1

    return dates
