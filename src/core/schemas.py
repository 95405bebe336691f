"""Record families and the location registry.

Each store table belongs to one record family. The family fixes which
integer fields a row carries and how the analysis inputs are labelled, so the
analyzer dispatches on the schema instead of comparing table names.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

DATE_FIELD = "complete_date"


class RecordFamily(str, Enum):
    SEVEN_FIELD = "seven_field"
    TEN_FIELD = "ten_field"


@dataclass(frozen=True)
class InputGroup:
    """A named slice of the input slots analysed as one stage."""

    name: str
    indices: Tuple[int, ...]


@dataclass(frozen=True)
class RecordSchema:
    family: RecordFamily
    number_fields: Tuple[str, ...]
    input_labels: Tuple[str, ...]
    input_groups: Tuple[InputGroup, ...]

    @property
    def input_count(self) -> int:
        return len(self.input_labels)

    def label_for(self, index: int) -> str:
        if index < self.input_count:
            return self.input_labels[index]
        return f"Input {index + 1}"


SEVEN_FIELD = RecordSchema(
    family=RecordFamily.SEVEN_FIELD,
    number_fields=(
        "date_number",
        "first_am_day",
        "second_am_day",
        "third_am_day",
        "first_pm_moon",
        "second_pm_moon",
        "third_pm_moon",
    ),
    input_labels=("1er-AM", "2em-AM", "3em-AM", "1er-PM", "2em-PM", "3em-PM"),
    input_groups=(
        InputGroup("AM", (0, 1, 2)),
        InputGroup("PM", (3, 4, 5)),
    ),
)

TEN_FIELD = RecordSchema(
    family=RecordFamily.TEN_FIELD,
    number_fields=(
        "date_number",
        "first_day",
        "second_day",
        "third_day",
        "first_moon",
        "second_moon",
        "third_moon",
        "first_night",
        "second_night",
        "third_night",
    ),
    input_labels=(
        "1er-Day",
        "2em-Day",
        "3em-Day",
        "1er-Moon",
        "2em-Moon",
        "3em-Moon",
        "1er-Night",
        "2em-Night",
        "3em-Night",
    ),
    input_groups=(
        InputGroup("Day", (0, 1, 2)),
        InputGroup("Moon", (3, 4, 5)),
        InputGroup("Night", (6, 7, 8)),
    ),
)


@dataclass(frozen=True)
class Location:
    name: str
    table_name: str
    schema: RecordSchema


LOCATIONS: Tuple[Location, ...] = (
    Location("New York", "new_york_data", SEVEN_FIELD),
    Location("Florida", "florida_data", SEVEN_FIELD),
    Location("New Jersey", "new_jersey_data", SEVEN_FIELD),
    Location("Georgia", "georgia_data", TEN_FIELD),
)

_BY_TABLE: Dict[str, Location] = {location.table_name: location for location in LOCATIONS}


def location_for_table(table_name: str) -> Location:
    """Return the registered location for a table, failing fast on unknown names."""

    try:
        return _BY_TABLE[table_name]
    except KeyError:
        raise ValueError(f"Unknown table: {table_name}") from None


def schema_for_table(table_name: str) -> RecordSchema:
    return location_for_table(table_name).schema
