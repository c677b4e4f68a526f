"""Group collapser: many materialized instances -> one card per series.

The collapser performs no status or date filtering. Callers decide what goes
in: search and the home page pass only active, today-or-later instances; the
owner's dashboard passes everything so expired series stay visible.
"""

from collections.abc import Iterable, Sequence
from datetime import date

from bondicar.models.trip import RecurringSeries, RecurringTripGroup, Trip
from bondicar.recurrence.dates import current_date
from bondicar.recurrence.expander import DEFAULT_HORIZON_YEARS, horizon_end
from bondicar.recurrence.resolver import DEFAULT_WINDOW_DAYS, next_occurrence


def _anchor(member: Trip, today: date, window_days: int) -> date:
    rule = member.recurrence
    if rule is None:
        # Series fields missing on the record: the instance date is all we know.
        return max(member.departure_date, today)
    return next_occurrence(rule.weekdays, rule.start_date, today=today, window_days=window_days)


def _last_possible_date(members: Sequence[Trip], horizon_years: int) -> date:
    rule = members[0].recurrence
    if rule is None:
        return max(member.departure_date for member in members)
    return horizon_end(rule.start_date, rule.end_date, horizon_years)


def select_next_instance(
    members: Sequence[Trip],
    *,
    today: date | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
    horizon_years: int = DEFAULT_HORIZON_YEARS,
) -> tuple[date, Trip | None]:
    """Pick the series instance a user would see or book next.

    Returns the member with the earliest ``departure_date`` at or after the
    resolver's anchor date. When no member qualifies, returns the anchor date
    (never later than the series' last possible date) and None.
    """
    if not members:
        raise ValueError("select_next_instance needs at least one member")
    if today is None:
        today = current_date()

    anchor = _anchor(members[0], today, window_days)
    upcoming = [member for member in members if member.departure_date >= anchor]
    if not upcoming:
        return min(anchor, _last_possible_date(members, horizon_years)), None

    chosen = min(upcoming, key=lambda member: (member.departure_date, member.id))
    return chosen.departure_date, chosen


def _group_from(
    members: list[Trip], today: date, window_days: int, horizon_years: int
) -> RecurringTripGroup:
    next_date, next_trip = select_next_instance(
        members, today=today, window_days=window_days, horizon_years=horizon_years
    )
    # Shared fields are identical across members; prefer the bookable one.
    rep = next_trip or members[0]

    return RecurringTripGroup(
        id=rep.recurrence_id or "",
        kind=rep.kind,
        owner_id=rep.owner_id,
        owner=rep.owner,
        origin=rep.origin,
        destination=rep.destination,
        departure_time=rep.departure_time,
        seats_offered=rep.seats_offered,
        available_seats=rep.available_seats,
        price=rep.price,
        max_price=rep.max_price,
        description=rep.description,
        car_model=rep.car_model,
        car_color=rep.car_color,
        recurrence=rep.recurrence,
        next_trip_date=next_date,
        next_trip_id=next_trip.id if next_trip else None,
        instance_count=len(members),
        created_at=min(member.created_at for member in members),
        status=rep.status,
    )


def collapse(
    instances: Iterable[Trip],
    *,
    today: date | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
    horizon_years: int = DEFAULT_HORIZON_YEARS,
) -> list[Trip | RecurringTripGroup]:
    """Collapse instances into standalone entries plus one group per recurrence_id.

    Standalone instances come first in input order, then groups in order of
    first appearance.
    """
    if today is None:
        today = current_date()

    standalone: list[Trip] = []
    series: dict[str, list[Trip]] = {}

    for instance in instances:
        if instance.recurrence_id:
            series.setdefault(instance.recurrence_id, []).append(instance)
        else:
            standalone.append(instance)

    groups = [
        _group_from(members, today, window_days, horizon_years) for members in series.values()
    ]
    return [*standalone, *groups]


def scheduled_group(
    series: RecurringSeries,
    *,
    today: date | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
    horizon_years: int = DEFAULT_HORIZON_YEARS,
) -> RecurringTripGroup:
    """Card for a stored series with no materialized instance yet."""
    if today is None:
        today = current_date()

    rule = series.recurrence
    next_date = min(
        next_occurrence(rule.weekdays, rule.start_date, today=today, window_days=window_days),
        horizon_end(rule.start_date, rule.end_date, horizon_years),
    )

    return RecurringTripGroup(
        id=series.id,
        kind=series.kind,
        owner_id=series.owner_id,
        owner=series.owner,
        origin=series.origin,
        destination=series.destination,
        departure_time=series.departure_time,
        seats_offered=series.seats_offered,
        available_seats=series.seats_offered,
        price=series.price,
        max_price=series.max_price,
        description=series.description,
        car_model=series.car_model,
        car_color=series.car_color,
        recurrence=rule,
        next_trip_date=next_date,
        next_trip_id=None,
        instance_count=0,
        created_at=series.created_at,
        status=series.status,
    )


def split_entries(
    entries: Iterable[Trip | RecurringTripGroup],
) -> tuple[list[Trip], list[RecurringTripGroup]]:
    """Separate collapsed output into one-off trips and series cards."""
    trips: list[Trip] = []
    groups: list[RecurringTripGroup] = []
    for entry in entries:
        if isinstance(entry, RecurringTripGroup):
            groups.append(entry)
        else:
            trips.append(entry)
    return trips, groups
