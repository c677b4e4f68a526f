"""Collision-resistant opaque identifiers for trips and recurring series."""

import hashlib
import secrets
import time
from datetime import date

_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def _time_component() -> str:
    return _base36(time.time_ns() // 1_000_000)


def _random_component(length: int) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def _series_digest(origin: str, destination: str, departure_time: str, start_date: date | str) -> str:
    key = "|".join(
        part.strip().lower()
        for part in (origin, destination, departure_time, str(start_date))
    )
    return hashlib.sha1(key.encode("utf-8")).hexdigest()[:6].upper()


def new_trip_id() -> str:
    """Generate a trip instance ID: time component + random component."""
    return f"{_time_component()}{_random_component(10)}"


def new_recurrence_id(
    origin: str, destination: str, departure_time: str, start_date: date | str
) -> str:
    """Generate a series ID shared by every instance of one recurring trip.

    Format: ``REC-<time>-<digest>-<random>``. The digest is deterministic in the
    series' defining fields; the random suffix keeps two identical series
    created in the same millisecond apart.
    """
    digest = _series_digest(origin, destination, departure_time, start_date)
    return f"REC-{_time_component()}-{digest}-{_random_component(6)}"
