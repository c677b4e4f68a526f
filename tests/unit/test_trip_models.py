"""Unit tests for trip model validation and weekday vocabulary."""

from datetime import date

import pytest
from pydantic import ValidationError

from bondicar.models.common import ContactInfo, TripKind, Weekday
from bondicar.models.trip import RecurrenceRule, TripDraft
from bondicar.recurrence.weekdays import normalize_weekdays

CONTACT = ContactInfo(name="Ana", phone="5491122334455")


class TestWeekday:
    """Test Weekday parsing and ordering."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("monday", Weekday.monday),
            ("Friday", Weekday.friday),
            ("miércoles", Weekday.wednesday),
            ("SÁBADO", Weekday.saturday),
            (" domingo ", Weekday.sunday),
        ],
    )
    def test_from_name(self, name: str, expected: Weekday) -> None:
        assert Weekday.from_name(name) == expected

    def test_unknown_name(self) -> None:
        assert Weekday.from_name("funday") is None

    def test_ordinal_matches_date_weekday(self) -> None:
        # 2024-01-01 is a Monday
        for offset, day in enumerate(Weekday):
            assert day.ordinal == offset
            assert Weekday.of(date(2024, 1, 1 + offset)) == day

    def test_normalize_drops_unknown_and_duplicates(self) -> None:
        assert normalize_weekdays(["monday", "lunes", Weekday.friday, "nope"]) == frozenset({0, 4})


class TestRecurrenceRule:
    """Test RecurrenceRule validation."""

    def test_weekdays_are_deduplicated_and_sorted(self) -> None:
        rule = RecurrenceRule(weekdays=["viernes", "monday", "friday"], start_date=date(2024, 1, 1))
        assert rule.weekdays == [Weekday.monday, Weekday.friday]

    def test_empty_weekdays_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RecurrenceRule(weekdays=[], start_date=date(2024, 1, 1))

    def test_unknown_weekday_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RecurrenceRule(weekdays=["funday"], start_date=date(2024, 1, 1))

    def test_end_before_start_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RecurrenceRule(
                weekdays=["monday"], start_date=date(2024, 1, 10), end_date=date(2024, 1, 9)
            )

    def test_end_equal_to_start_allowed(self) -> None:
        rule = RecurrenceRule(
            weekdays=["monday"], start_date=date(2024, 1, 1), end_date=date(2024, 1, 1)
        )
        assert rule.end_date == rule.start_date

    def test_negative_lead_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RecurrenceRule(weekdays=["monday"], start_date=date(2024, 1, 1), publish_days_before=-1)

    def test_lead_above_one_year_rejected(self) -> None:
        rule = RecurrenceRule(
            weekdays=["monday"], start_date=date(2024, 1, 1), publish_days_before=365
        )
        assert rule.publish_days_before == 365

        for lead in (366, 800_000):
            with pytest.raises(ValidationError):
                RecurrenceRule(
                    weekdays=["monday"], start_date=date(2024, 1, 1), publish_days_before=lead
                )


class TestTripDraft:
    """Test TripDraft cross-field rules."""

    def test_one_off_requires_departure_date(self) -> None:
        with pytest.raises(ValidationError):
            TripDraft(
                contact=CONTACT,
                origin="A",
                destination="B",
                departure_time="08:00",
                seats_offered=2,
                price=100,
            )

    def test_driver_offer_requires_seats_and_price(self) -> None:
        with pytest.raises(ValidationError):
            TripDraft(
                contact=CONTACT,
                origin="A",
                destination="B",
                departure_date=date(2024, 1, 5),
                departure_time="08:00",
                seats_offered=0,
                price=100,
            )
        with pytest.raises(ValidationError):
            TripDraft(
                contact=CONTACT,
                origin="A",
                destination="B",
                departure_date=date(2024, 1, 5),
                departure_time="08:00",
                seats_offered=2,
            )

    def test_passenger_request_needs_neither(self) -> None:
        draft = TripDraft(
            kind=TripKind.passenger_request,
            contact=CONTACT,
            origin="A",
            destination="B",
            departure_date=date(2024, 1, 5),
            departure_time="08:00",
            max_price=500,
        )
        assert draft.seats_offered == 0

    @pytest.mark.parametrize("value", ["8:00", "24:00", "12:60", "noon"])
    def test_invalid_time_rejected(self, value: str) -> None:
        with pytest.raises(ValidationError):
            TripDraft(
                contact=CONTACT,
                origin="A",
                destination="B",
                departure_date=date(2024, 1, 5),
                departure_time=value,
                seats_offered=2,
                price=100,
            )

    def test_recurring_draft_does_not_need_departure_date(self) -> None:
        draft = TripDraft(
            contact=CONTACT,
            origin="A",
            destination="B",
            departure_time="08:00",
            seats_offered=2,
            price=100,
            recurrence=RecurrenceRule(weekdays=["monday"], start_date=date(2024, 1, 1)),
        )
        assert draft.departure_date is None


def test_contact_phone_keeps_digits() -> None:
    assert ContactInfo(name="Bruno", phone="+54 9 11 5566-7788").phone == "5491155667788"
