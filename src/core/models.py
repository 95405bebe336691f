"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any storage-specific types.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Optional, Sequence

from core.catalog import PatternSet
from core.matching import MatchType

_RAW_HIT_PATTERN = re.compile(
    r"^(?P<label>.*?):\s*Week\s+(?P<week>\d+):\s*(?P<number>\d+)(?:\|(?P<type>strict|reverse))?$"
)


@dataclass(frozen=True)
class AnalysisRequest:
    """Input of one multi-week analysis run."""

    reference_date: date
    numbers: Sequence[str]
    table_name: str


@dataclass
class AnalysisSet:
    """Input slots that resolved to the same pattern set during one run."""

    id: str
    input_indices: List[int]
    matching_result: PatternSet


@dataclass(frozen=True)
class HistoricalHit:
    week: int
    date: str
    number_found: int
    match_type: MatchType

    def to_dict(self) -> dict[str, Any]:
        return {
            "week": self.week,
            "date": self.date,
            "numberFound": self.number_found,
            "matchType": self.match_type.value,
        }


@dataclass
class WeekCheck:
    """Outcome of one week for one set; recorded even when nothing hit."""

    week: int
    date1: str
    date2: str
    historical_hits: List[HistoricalHit] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "week": self.week,
            "date1": self.date1,
            "date2": self.date2,
            "historicalHits": [hit.to_dict() for hit in self.historical_hits],
        }


@dataclass
class AnalysisLogEntry:
    input_label: str
    input_number: int
    analysis_set_id: str
    week_checks: List[WeekCheck]

    def to_dict(self) -> dict[str, Any]:
        return {
            "inputLabel": self.input_label,
            "inputNumber": self.input_number,
            "analysisSetId": self.analysis_set_id,
            "weekChecks": [check.to_dict() for check in self.week_checks],
        }


@dataclass(frozen=True)
class RawHit:
    """One hit attributed to one input slot.

    ``str(hit)`` gives the legacy ``"<label>: Week <n>: <number>|<type>"`` form.
    """

    input_label: str
    week: int
    number: int
    match_type: MatchType
    input_index: Optional[int] = None
    date: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.input_label}: Week {self.week}: {self.number}|{self.match_type.value}"

    @classmethod
    def parse(cls, text: str) -> "RawHit":
        """Read a legacy encoded hit; entries without a type are strict."""

        matched = _RAW_HIT_PATTERN.match(text.strip())
        if not matched:
            raise ValueError(f"Unrecognized raw hit: {text!r}")
        return cls(
            input_label=matched.group("label"),
            week=int(matched.group("week")),
            number=int(matched.group("number")),
            match_type=MatchType(matched.group("type") or MatchType.STRICT.value),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "inputLabel": self.input_label,
            "inputIndex": self.input_index,
            "week": self.week,
            "date": self.date,
            "number": self.number,
            "matchType": self.match_type.value,
        }


@dataclass
class AnalysisResult:
    raw_results: List[RawHit] = field(default_factory=list)
    detailed_log: List[AnalysisLogEntry] = field(default_factory=list)
    analysis_sets: List[AnalysisSet] = field(default_factory=list)

    def extend(self, other: "AnalysisResult") -> None:
        self.raw_results.extend(other.raw_results)
        self.detailed_log.extend(other.detailed_log)
        self.analysis_sets.extend(other.analysis_sets)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rawResults": [str(hit) for hit in self.raw_results],
            "detailedLog": [entry.to_dict() for entry in self.detailed_log],
        }


@dataclass(frozen=True)
class VerificationHit:
    week: int
    date: str
    number_found: int
    match_type: MatchType
    table_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "week": self.week,
            "date": self.date,
            "numberFound": self.number_found,
            "matchType": self.match_type.value,
            "tableName": self.table_name,
        }
