"""Weekday date arithmetic (core domain).

All helpers are pure. Weekday indices follow the 0=Sunday .. 6=Saturday
convention used by the catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Union


class DayKey(str, Enum):
    """Canonical weekday identifiers used as catalog keys."""

    LUNDI = "lundi"
    MARDI = "mardi"
    MERCREDI = "mercredi"
    JEUDI = "jeudi"
    VENDREDI = "vendredi"
    SAMEDI = "samedi"
    DIMANCHE = "dimanche"

    @property
    def weekday_index(self) -> int:
        return _WEEKDAY_INDEX[self]

    @property
    def english_name(self) -> str:
        return _ENGLISH_NAMES[self]


_WEEKDAY_INDEX = {
    DayKey.DIMANCHE: 0,
    DayKey.LUNDI: 1,
    DayKey.MARDI: 2,
    DayKey.MERCREDI: 3,
    DayKey.JEUDI: 4,
    DayKey.VENDREDI: 5,
    DayKey.SAMEDI: 6,
}

_ENGLISH_NAMES = {
    DayKey.LUNDI: "Monday",
    DayKey.MARDI: "Tuesday",
    DayKey.MERCREDI: "Wednesday",
    DayKey.JEUDI: "Thursday",
    DayKey.VENDREDI: "Friday",
    DayKey.SAMEDI: "Saturday",
    DayKey.DIMANCHE: "Sunday",
}

_BY_ENGLISH_NAME = {name.lower(): key for key, name in _ENGLISH_NAMES.items()}

# Display order for grouped output (Monday first).
DAY_ORDER = (
    DayKey.LUNDI,
    DayKey.MARDI,
    DayKey.MERCREDI,
    DayKey.JEUDI,
    DayKey.VENDREDI,
    DayKey.SAMEDI,
    DayKey.DIMANCHE,
)

DayLike = Union[DayKey, str]


@dataclass(frozen=True)
class WeekPair:
    """Resolved calendar dates for a day pair in one week."""

    day1: date
    day2: date


def parse_day_key(value: DayLike) -> DayKey:
    """Return the DayKey for a canonical key or an English weekday name.

    Unknown identifiers raise ValueError: they point at a catalog or config
    bug rather than bad runtime data.
    """

    if isinstance(value, DayKey):
        return value
    lowered = str(value).strip().lower()
    try:
        return DayKey(lowered)
    except ValueError:
        pass
    if lowered in _BY_ENGLISH_NAME:
        return _BY_ENGLISH_NAME[lowered]
    raise ValueError(f"Unknown weekday identifier: {value!r}")


def weekday_index_of(value: date) -> int:
    """Return the 0=Sunday based weekday index of a date."""

    # date.weekday() is 0=Monday; shift so Sunday becomes 0.
    return (value.weekday() + 1) % 7


def day_key_of(value: date) -> DayKey:
    index = weekday_index_of(value)
    for key, key_index in _WEEKDAY_INDEX.items():
        if key_index == index:
            return key
    raise AssertionError(f"No DayKey for weekday index {index}")


def most_recent_occurrence(reference: date, weekday: DayLike) -> date:
    """Return the latest date on or before ``reference`` falling on ``weekday``."""

    key = parse_day_key(weekday)
    days_diff = (weekday_index_of(reference) - key.weekday_index + 7) % 7
    return reference - timedelta(days=days_diff)


def resolve_week_pair(reference: date, day1: DayLike, day2: DayLike) -> WeekPair:
    """Resolve both days of a pair relative to ``reference``.

    day2 never lands before day1: pairs crossing a week boundary push day2
    back one more week.
    """

    first = most_recent_occurrence(reference, day1)
    second = most_recent_occurrence(reference, day2)
    if second < first:
        second = second - timedelta(days=7)
    return WeekPair(day1=first, day2=second)


def resolve_previous_week(
    reference: date,
    day1: DayLike,
    day2: DayLike,
    weeks_back: int,
) -> WeekPair:
    """Resolve a day pair ``weeks_back`` weeks before ``reference``.

    ``weeks_back=1`` is the most recent occurrence on or before the reference.
    """

    shifted = reference - timedelta(days=(weeks_back - 1) * 7)
    return resolve_week_pair(shifted, day1, day2)


def resolve_single_day_previous_week(reference: date, target_day: DayLike, weeks_back: int) -> date:
    shifted = reference - timedelta(days=(weeks_back - 1) * 7)
    return most_recent_occurrence(shifted, target_day)
