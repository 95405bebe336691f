"""Result aggregation helpers (core domain)."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date
from itertools import combinations
from typing import Iterable, List, Union

from core.dates import DAY_ORDER, day_key_of
from core.matching import MatchType, dedupe_key
from core.models import AnalysisLogEntry, RawHit

RawEntry = Union[RawHit, str]


@dataclass(frozen=True)
class FormattedResult:
    number: str
    count: int
    match_type: MatchType
    display: str


@dataclass(frozen=True)
class DayHit:
    number: int
    match_type: MatchType


def _as_hits(raw: Iterable[RawEntry]) -> List[RawHit]:
    return [entry if isinstance(entry, RawHit) else RawHit.parse(entry) for entry in raw]


def format_final_results(raw: Iterable[RawEntry]) -> List[FormattedResult]:
    """Count hits per (number, match type) and render them for display.

    Numbers hit more than once read ``"70 (2 times)"``. Results are sorted by
    numeric value, strict before reverse for the same number.
    """

    counts = Counter(dedupe_key(hit.number, hit.match_type) for hit in _as_hits(raw))
    ordered = sorted(counts.items(), key=lambda item: (item[0][0], item[0][1] != MatchType.STRICT.value))

    results = []
    for (number, match_type), count in ordered:
        display = f"{number} ({count} times)" if count > 1 else str(number)
        results.append(
            FormattedResult(
                number=str(number),
                count=count,
                match_type=MatchType(match_type),
                display=display,
            )
        )
    return results


def unique_numbers(raw: Iterable[RawEntry]) -> List[int]:
    return sorted({hit.number for hit in _as_hits(raw)})


def multi_hit_numbers(raw: Iterable[RawEntry]) -> List[str]:
    """Return numbers hit more than once regardless of match type."""

    counts = Counter(hit.number for hit in _as_hits(raw))
    return [f"{number} ({count} times)" for number, count in sorted(counts.items()) if count > 1]


def find_mariage_pairs(numbers: Iterable[int]) -> List[str]:
    """Return ``"(AA x BB)"`` for each pair sharing exactly one digit.

    Digits are compared as sets of the zero-padded forms, so 12/21 (two shared)
    and 11/22 (none shared) are not pairs. Each unordered pair appears once.
    """

    distinct = list(dict.fromkeys(numbers))
    seen: set = set()
    pairs: List[str] = []
    for first, second in combinations(distinct, 2):
        key = tuple(sorted((first, second)))
        if key in seen:
            continue
        first_text = f"{first:02d}"
        second_text = f"{second:02d}"
        if len(set(first_text) & set(second_text)) != 1:
            continue
        seen.add(key)
        pairs.append(f"({first_text} x {second_text})")
    return pairs


def group_hits_by_day(detailed_log: Iterable[AnalysisLogEntry]) -> dict[str, List[DayHit]]:
    """Group logged hits by the English weekday name of their date.

    Each day keeps one entry per (number, match type), sorted by number.
    """

    grouped: dict = {}
    seen: dict = {}
    for entry in detailed_log:
        for check in entry.week_checks:
            for hit in check.historical_hits:
                day = day_key_of(date.fromisoformat(hit.date))
                key = dedupe_key(hit.number_found, hit.match_type)
                day_seen = seen.setdefault(day, set())
                if key in day_seen:
                    continue
                day_seen.add(key)
                grouped.setdefault(day, []).append(DayHit(number=hit.number_found, match_type=hit.match_type))

    return {
        day.english_name: sorted(grouped[day], key=lambda hit: hit.number)
        for day in DAY_ORDER
        if day in grouped
    }
