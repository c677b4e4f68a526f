"""Unit tests for the local-date parser and date helpers."""

import logging
import time
from datetime import date, datetime

import pytest

from bondicar.recurrence.dates import (
    coerce_departure_date,
    format_display_date,
    parse_local_date,
    to_wire,
)

FALLBACK = date(2030, 6, 15)


def _fallbacks(caplog: pytest.LogCaptureFixture) -> list[dict]:
    return [r.structured for r in caplog.records if hasattr(r, "structured")]


def test_parse_valid_date() -> None:
    """Test components map straight onto the calendar date."""
    assert parse_local_date("2024-01-05", today=FALLBACK) == date(2024, 1, 5)


def test_parse_leap_day() -> None:
    assert parse_local_date("2024-02-29", today=FALLBACK) == date(2024, 2, 29)


@pytest.mark.parametrize(
    "tz_name", ["UTC", "America/Argentina/Buenos_Aires", "Pacific/Kiritimati", "Pacific/Pago_Pago"]
)
def test_round_trip_is_stable_across_host_offsets(
    tz_name: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test formatting a parsed date reproduces the input under any host TZ."""
    monkeypatch.setenv("TZ", tz_name)
    time.tzset()
    try:
        for wire in ("2024-01-01", "2024-03-10", "2024-12-31", "2100-12-31"):
            assert to_wire(parse_local_date(wire, today=FALLBACK)) == wire
    finally:
        monkeypatch.undo()
        time.tzset()


@pytest.mark.parametrize("tz_name", ["UTC", "America/Argentina/Buenos_Aires", "Pacific/Kiritimati"])
def test_display_keeps_calendar_components_across_host_offsets(
    tz_name: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test dd/mm/yyyy shows exactly the day, month and year that were parsed."""
    monkeypatch.setenv("TZ", tz_name)
    time.tzset()
    try:
        for wire in ("2024-01-01", "2024-02-29", "2024-03-10", "2024-12-31"):
            year, month, day = wire.split("-")
            assert format_display_date(parse_local_date(wire, today=FALLBACK)) == f"{day}/{month}/{year}"
    finally:
        monkeypatch.undo()
        time.tzset()


@pytest.mark.parametrize(
    ("value", "reason"),
    [
        ("2024/01/05", "wrong_segment_count"),
        ("2024-01", "wrong_segment_count"),
        ("", "wrong_segment_count"),
        ("2024-0a-05", "non_numeric"),
        ("-2024-01", "non_numeric"),
        ("1899-12-31", "year_out_of_range"),
        ("2101-01-01", "year_out_of_range"),
        ("2024-13-01", "month_out_of_range"),
        ("2024-00-10", "month_out_of_range"),
        ("2024-01-32", "day_out_of_range"),
        ("2023-02-30", "invalid_day_for_month"),
    ],
)
def test_malformed_input_falls_back_and_logs(
    value: str, reason: str, caplog: pytest.LogCaptureFixture
) -> None:
    """Test malformed strings return the fallback date with a structured log."""
    with caplog.at_level(logging.WARNING):
        result = parse_local_date(value, today=FALLBACK)

    assert result == FALLBACK
    logged = _fallbacks(caplog)
    assert len(logged) == 1
    assert logged[0]["component"] == "date_parser"
    assert logged[0]["reason"] == reason
    assert logged[0]["input"] == repr(value)


def test_non_string_input_falls_back(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        result = parse_local_date(20240105, today=FALLBACK)  # type: ignore[arg-type]

    assert result == FALLBACK
    assert _fallbacks(caplog)[0]["reason"] == "not_a_string"


def test_valid_input_does_not_log(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        parse_local_date("2024-07-09", today=FALLBACK)

    assert _fallbacks(caplog) == []


def test_coerce_departure_date_accepts_native_values() -> None:
    """Test stored dates may be date, datetime or wire strings."""
    assert coerce_departure_date(date(2024, 5, 1)) == date(2024, 5, 1)
    assert coerce_departure_date(datetime(2024, 5, 1, 23, 59)) == date(2024, 5, 1)
    assert coerce_departure_date("2024-05-01", today=FALLBACK) == date(2024, 5, 1)


def test_coerce_departure_date_unsupported_type(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        result = coerce_departure_date(3.5, today=FALLBACK)

    assert result == FALLBACK
    assert _fallbacks(caplog)[0]["reason"] == "unsupported_type"


def test_format_display_date() -> None:
    assert format_display_date(date(2024, 1, 5)) == "05/01/2024"
    assert to_wire(date(2024, 1, 5)) == "2024-01-05"
