"""Pattern catalog lookups (core domain).

The catalog is an immutable value built once and passed to whoever needs it,
so tests can swap in a small catalog without touching module state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from core.catalog_data import PATTERN_DATA
from core.dates import DAY_ORDER, DayKey, parse_day_key
from core.matching import MatchType, check_match, dedupe_key


@dataclass(frozen=True)
class PatternSet:
    """One subcategory of the catalog: weekday -> target numbers."""

    category: str
    sub_category: str
    days: Mapping[DayKey, Tuple[int, ...]]

    @property
    def id(self) -> str:
        return f"{self.category}-{self.sub_category}"

    @property
    def day_keys(self) -> List[DayKey]:
        return list(self.days)


@dataclass(frozen=True)
class ArrayMatch:
    """Catalog array containing one or more of the searched numbers."""

    location: str
    array: Tuple[int, ...]
    found_numbers: Tuple[int, ...]

    @property
    def match_count(self) -> int:
        return len(self.found_numbers)

    @property
    def percentage(self) -> int:
        return round(self.match_count / len(self.array) * 100)


@dataclass(frozen=True)
class DayMatchResult:
    day: DayKey
    matches: Tuple[ArrayMatch, ...]

    @property
    def name(self) -> str:
        return self.day.english_name

    @property
    def total_arrays_found(self) -> int:
        return len(self.matches)

    @property
    def total_numbers_matched(self) -> int:
        return sum(match.match_count for match in self.matches)


@dataclass(frozen=True)
class CatalogDayHit:
    number: int
    match_type: MatchType
    original_input: int


@dataclass(frozen=True)
class PatternCatalog:
    sets: Tuple[PatternSet, ...] = field(default_factory=tuple)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Mapping[str, Mapping[str, Iterable[int]]]]) -> "PatternCatalog":
        """Build a catalog from the nested literal form.

        Every number must be in [0, 99]; anything else is a catalog bug.
        """

        sets: List[PatternSet] = []
        for category, sub_categories in raw.items():
            for sub_category, days in sub_categories.items():
                parsed = {}
                for day, numbers in days.items():
                    values = tuple(int(n) for n in numbers)
                    out_of_range = [n for n in values if not 0 <= n <= 99]
                    if out_of_range:
                        raise ValueError(
                            f"Catalog {category}-{sub_category}/{day} has out-of-range numbers: {out_of_range}"
                        )
                    parsed[parse_day_key(day)] = values
                sets.append(
                    PatternSet(
                        category=category,
                        sub_category=sub_category,
                        days=MappingProxyType(parsed),
                    )
                )
        return cls(sets=tuple(sets))

    def lookup(self, number: int) -> List[PatternSet]:
        """Return every set with a day array containing ``number``."""

        return [
            pattern_set
            for pattern_set in self.sets
            if any(number in values for values in pattern_set.days.values())
        ]

    def first_match(self, number: int) -> Optional[PatternSet]:
        matches = self.lookup(number)
        return matches[0] if matches else None

    def day_matches(self, numbers: Iterable[int]) -> List[DayMatchResult]:
        """Group catalog arrays containing any of ``numbers`` by weekday.

        Arrays are consolidated per (set, day) with the distinct numbers found,
        ordered by descending match count; days run Monday to Sunday.
        """

        wanted = list(dict.fromkeys(numbers))
        found: dict[DayKey, dict[str, tuple[Tuple[int, ...], List[int]]]] = {}
        for number in wanted:
            for pattern_set in self.sets:
                for day, values in pattern_set.days.items():
                    if number not in values:
                        continue
                    per_day = found.setdefault(day, {})
                    location = f"{pattern_set.category}.{pattern_set.sub_category}"
                    _, hits = per_day.setdefault(location, (values, []))
                    if number not in hits:
                        hits.append(number)

        results: List[DayMatchResult] = []
        for day in DAY_ORDER:
            if day not in found:
                continue
            matches = [
                ArrayMatch(location=location, array=values, found_numbers=tuple(sorted(hits)))
                for location, (values, hits) in found[day].items()
            ]
            matches.sort(key=lambda match: match.match_count, reverse=True)
            results.append(DayMatchResult(day=day, matches=tuple(matches)))
        return results

    def day_hits(self, numbers: Iterable[int]) -> dict[str, List[CatalogDayHit]]:
        """Return strict/reverse hits of each input against every catalog day.

        Keys are English weekday names in Monday-first order; hits are unique
        per (input, match type) within a day and sorted by input.
        """

        grouped: dict[DayKey, List[CatalogDayHit]] = {}
        seen: dict[DayKey, set] = {}
        for number in numbers:
            for pattern_set in self.sets:
                for day, values in pattern_set.days.items():
                    match = check_match(number, values)
                    if match is None:
                        continue
                    key = dedupe_key(number, match.match_type)
                    day_seen = seen.setdefault(day, set())
                    if key in day_seen:
                        continue
                    day_seen.add(key)
                    grouped.setdefault(day, []).append(
                        CatalogDayHit(number=number, match_type=match.match_type, original_input=number)
                    )

        return {
            day.english_name: sorted(grouped[day], key=lambda hit: hit.original_input)
            for day in DAY_ORDER
            if day in grouped
        }


def default_catalog() -> PatternCatalog:
    """Return the compiled-in catalog."""

    return PatternCatalog.from_mapping(PATTERN_DATA)
