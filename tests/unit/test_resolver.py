"""Unit tests for the next-occurrence resolver."""

import logging
from datetime import date

import pytest

from bondicar.models.common import Weekday
from bondicar.recurrence.resolver import next_occurrence

# Monday
TODAY = date(2024, 1, 1)


def test_future_start_on_pattern_is_returned_as_is() -> None:
    """Test the series' own first occurrence is the next one."""
    start = date(2024, 1, 19)  # Friday, beyond the scan window
    assert next_occurrence([Weekday.friday], start, today=TODAY) == start


def test_past_start_scans_forward_from_today() -> None:
    assert next_occurrence(["wednesday"], date(2023, 6, 1), today=TODAY) == date(2024, 1, 3)


def test_today_counts_as_next() -> None:
    assert next_occurrence(["monday"], date(2023, 6, 1), today=TODAY) == TODAY


def test_future_start_off_pattern_skips_days_before_start() -> None:
    """Test matches before start_date are ignored."""
    # Start Thursday 2024-01-04; the Tuesday before it is not eligible
    result = next_occurrence(["tuesday"], date(2024, 1, 4), today=TODAY)
    assert result == date(2024, 1, 9)


def test_no_match_in_window_falls_back_to_start(caplog: pytest.LogCaptureFixture) -> None:
    """Test the fallback returns start_date and is logged."""
    start = date(2024, 2, 1)  # Thursday, 31 days out

    with caplog.at_level(logging.WARNING):
        result = next_occurrence(["monday"], start, today=TODAY)

    assert result == start
    logged = [r.structured for r in caplog.records if hasattr(r, "structured")]
    assert logged[0]["component"] == "resolver"
    assert logged[0]["reason"] == "no_occurrence_in_window"


def test_empty_weekdays_falls_back(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        assert next_occurrence([], TODAY, today=TODAY) == TODAY

    assert any(getattr(r, "structured", {}).get("component") == "resolver" for r in caplog.records)


def test_window_is_configurable() -> None:
    start = date(2023, 1, 1)
    assert next_occurrence(["sunday"], start, today=TODAY, window_days=6) == start
    assert next_occurrence(["sunday"], start, today=TODAY, window_days=7) == date(2024, 1, 7)
