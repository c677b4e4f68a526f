"""Weekday vocabulary shared by the recurrence engine and the models."""

import unicodedata
from collections.abc import Iterable
from datetime import date
from enum import Enum

from bondicar.utils.logging import engine_logger


class Weekday(str, Enum):
    """Day of the week; definition order matches date.weekday()."""

    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"

    @property
    def ordinal(self) -> int:
        """Monday=0 ... Sunday=6."""
        return _ORDER.index(self)

    @classmethod
    def of(cls, day: date) -> "Weekday":
        """Weekday of a calendar date."""
        return _ORDER[day.weekday()]

    @classmethod
    def from_name(cls, name: str) -> "Weekday | None":
        """Resolve an English or Spanish weekday name, None if unknown."""
        key = _strip_accents(name.strip().lower())
        return _ALIASES.get(key)


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


_ORDER: list[Weekday] = list(Weekday)

_ALIASES: dict[str, Weekday] = {day.value: day for day in Weekday}
_ALIASES.update(
    {
        "lunes": Weekday.monday,
        "martes": Weekday.tuesday,
        "miercoles": Weekday.wednesday,
        "jueves": Weekday.thursday,
        "viernes": Weekday.friday,
        "sabado": Weekday.saturday,
        "domingo": Weekday.sunday,
    }
)


def normalize_weekdays(weekdays: Iterable[Weekday | str]) -> frozenset[int]:
    """Collapse a weekday collection into a set of date.weekday() ordinals.

    Unknown names are dropped and logged; duplicates collapse.
    """
    ordinals: set[int] = set()
    for item in weekdays:
        day = item if isinstance(item, Weekday) else Weekday.from_name(str(item))
        if day is None:
            engine_logger.log_fallback("weekdays", "unknown_weekday", input=str(item))
            continue
        ordinals.add(day.ordinal)
    return frozenset(ordinals)
