"""Historical analysis pipeline.

This module is integration-agnostic. It only relies on the record store port,
enabling other storage backends without changes here.

A multi-week run follows a fixed order:
1) Parse trigger numbers and group input slots into analysis sets
2) For each set, walk weeks 1..N back from the reference date
3) Resolve the set's two weekdays and fetch both dates in one query
4) Match each record against its own day's numbers only
5) Fan every hit out to all input slots that share the set
6) Assemble one log entry per input slot
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from core.catalog import PatternCatalog
from core.config import AnalysisConfig
from core.dates import DayLike, resolve_previous_week, resolve_single_day_previous_week
from core.matching import check_match, dedupe_key
from core.models import (
    AnalysisLogEntry,
    AnalysisRequest,
    AnalysisResult,
    AnalysisSet,
    HistoricalHit,
    RawHit,
    VerificationHit,
    WeekCheck,
)
from core.ports import RecordStorePort, StoreQueryError
from core.schemas import DATE_FIELD, RecordSchema, schema_for_table

LOGGER = logging.getLogger(__name__)


def parse_trigger(value: Any) -> Optional[int]:
    """Return a trigger number in [0, 99], or None for blank or malformed input."""

    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value if 0 <= value <= 99 else None
    text = str(value).strip()
    if not text or len(text) > 2 or not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def parse_triggers(numbers: Iterable[Any]) -> List[Tuple[int, int]]:
    """Return (slot index, number) pairs for every usable input slot."""

    parsed = []
    for index, value in enumerate(numbers):
        number = parse_trigger(value)
        if number is not None:
            parsed.append((index, number))
    return parsed


def _iso(value: Any) -> str:
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def _record_number(raw: Any) -> Optional[int]:
    if isinstance(raw, bool) or not isinstance(raw, int):
        return None
    return raw if 0 <= raw <= 99 else None


def _field_values(record: Mapping[str, Any], schema: RecordSchema) -> List[int]:
    """Return the record's usable numbers; nulls and bad values are skipped."""

    values = []
    for name in schema.number_fields:
        value = _record_number(record.get(name))
        if value is not None:
            values.append(value)
    return values


class HistoricalAnalyzer:
    """Orchestrates set building, date resolution, queries, and matching."""

    def __init__(
        self,
        catalog: PatternCatalog,
        store: RecordStorePort,
        config: Optional[AnalysisConfig] = None,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._config = config or AnalysisConfig()

    def build_analysis_sets(
        self,
        numbers: Sequence[Any],
        indices: Optional[Iterable[int]] = None,
    ) -> List[AnalysisSet]:
        """Group input slots by the first pattern set their number belongs to.

        Slots without a usable number or without a catalog hit contribute
        nothing. Sets with fewer than two weekdays cannot be paired and are
        dropped here.
        """

        allowed = set(indices) if indices is not None else None
        grouped: dict[str, AnalysisSet] = {}
        for index, number in parse_triggers(numbers):
            if allowed is not None and index not in allowed:
                continue
            pattern_set = self._catalog.first_match(number)
            if pattern_set is None:
                continue
            if len(pattern_set.days) < 2:
                LOGGER.debug("Skipping %s: needs two weekdays", pattern_set.id)
                continue
            existing = grouped.get(pattern_set.id)
            if existing is None:
                grouped[pattern_set.id] = AnalysisSet(
                    id=pattern_set.id,
                    input_indices=[index],
                    matching_result=pattern_set,
                )
            else:
                existing.input_indices.append(index)
        return list(grouped.values())

    async def analyze(
        self,
        request: AnalysisRequest,
        analysis_sets: Optional[List[AnalysisSet]] = None,
    ) -> AnalysisResult:
        """Run the multi-week scan for every analysis set of the request."""

        schema = schema_for_table(request.table_name)
        sets = analysis_sets if analysis_sets is not None else self.build_analysis_sets(request.numbers)
        result = AnalysisResult(analysis_sets=list(sets))
        if not sets:
            return result

        LOGGER.info(
            "Starting %s-week analysis for %s (reference %s, %s sets)",
            self._config.weeks,
            request.table_name,
            request.reference_date.isoformat(),
            len(sets),
        )

        for analysis_set in sets:
            checks = await self._scan_set(request, schema, analysis_set)
            for check in checks:
                for hit in check.historical_hits:
                    # Every slot sharing the set gets credit for the hit.
                    for input_index in analysis_set.input_indices:
                        result.raw_results.append(
                            RawHit(
                                input_label=schema.label_for(input_index),
                                week=check.week,
                                number=hit.number_found,
                                match_type=hit.match_type,
                                input_index=input_index,
                                date=hit.date,
                            )
                        )
            for input_index in analysis_set.input_indices:
                result.detailed_log.append(
                    AnalysisLogEntry(
                        input_label=schema.label_for(input_index),
                        input_number=parse_trigger(request.numbers[input_index]),
                        analysis_set_id=analysis_set.id,
                        week_checks=checks,
                    )
                )

        LOGGER.info("Analysis complete for %s: %s hits", request.table_name, len(result.raw_results))
        return result

    async def analyze_staged(self, request: AnalysisRequest) -> AnalysisResult:
        """Analyse input groups one after another when every slot is filled.

        With all slots holding two digits, sets are built per input group
        (AM/PM or Day/Moon/Night) so slots only pair within their group.
        Otherwise the run is a single step over all usable slots.
        """

        schema = schema_for_table(request.table_name)
        slots = list(request.numbers)[: schema.input_count]
        all_filled = len(slots) == schema.input_count and all(
            len(str(value).strip()) == 2 and parse_trigger(value) is not None for value in slots
        )
        if not all_filled:
            return await self.analyze(request)

        combined = AnalysisResult()
        for group in schema.input_groups:
            LOGGER.info("Analyzing %s inputs", group.name)
            sets = self.build_analysis_sets(request.numbers, group.indices)
            combined.extend(await self.analyze(request, sets))
        return combined

    async def verify(
        self,
        reference: date,
        table_name: str,
        target_day: DayLike,
        numbers: Iterable[Any],
    ) -> List[VerificationHit]:
        """Check one weekday over the verifier horizon against a flat number list."""

        schema = schema_for_table(table_name)
        targets = [number for _, number in parse_triggers(numbers)]
        if not targets:
            return []

        hits: List[VerificationHit] = []
        for weeks_back in range(1, self._config.verifier_weeks + 1):
            target_date = resolve_single_day_previous_week(reference, target_day, weeks_back)
            try:
                records = await self._store.fetch_by_dates(table_name, [target_date])
            except StoreQueryError:
                LOGGER.warning("Query failed for %s on %s", table_name, target_date.isoformat(), exc_info=True)
                continue
            if not records:
                continue

            # One record per date is expected; only the first one is read.
            seen: set = set()
            for value in _field_values(records[0], schema):
                match = check_match(value, targets)
                if match is None:
                    continue
                key = dedupe_key(match.number, match.match_type)
                if key in seen:
                    continue
                seen.add(key)
                hits.append(
                    VerificationHit(
                        week=weeks_back,
                        date=target_date.isoformat(),
                        number_found=match.number,
                        match_type=match.match_type,
                        table_name=table_name,
                    )
                )
        return hits

    async def load_recent_inputs(self, reference: date, table_name: str, limit: int = 3) -> List[str]:
        """Return the latest records on or before ``reference`` as input strings.

        Date numbers are left out; missing records and null fields become
        blanks so the result always has ``limit`` rows worth of slots.
        """

        schema = schema_for_table(table_name)
        fields = [name for name in schema.number_fields if name != "date_number"]
        try:
            records = await self._store.fetch_latest(table_name, reference, limit)
        except StoreQueryError:
            LOGGER.warning("Failed to load recent records for %s", table_name, exc_info=True)
            records = []

        inputs: List[str] = []
        for row_index in range(limit):
            record = records[row_index] if row_index < len(records) else {}
            for name in fields:
                value = _record_number(record.get(name))
                inputs.append("" if value is None else f"{value:02d}")
        return inputs

    async def _scan_set(
        self,
        request: AnalysisRequest,
        schema: RecordSchema,
        analysis_set: AnalysisSet,
    ) -> List[WeekCheck]:
        weeks = range(1, self._config.weeks + 1)
        if self._config.max_concurrency <= 1:
            return [await self._check_week(request, schema, analysis_set, week) for week in weeks]

        semaphore = asyncio.Semaphore(self._config.max_concurrency)

        async def bounded(week: int) -> WeekCheck:
            async with semaphore:
                return await self._check_week(request, schema, analysis_set, week)

        # gather keeps argument order, so checks stay sorted by week.
        return list(await asyncio.gather(*(bounded(week) for week in weeks)))

    async def _check_week(
        self,
        request: AnalysisRequest,
        schema: RecordSchema,
        analysis_set: AnalysisSet,
        weeks_back: int,
    ) -> WeekCheck:
        pattern_set = analysis_set.matching_result
        day1, day2 = pattern_set.day_keys[:2]
        pair = resolve_previous_week(request.reference_date, day1, day2, weeks_back)
        date1 = pair.day1.isoformat()
        date2 = pair.day2.isoformat()
        check = WeekCheck(week=weeks_back, date1=date1, date2=date2)

        LOGGER.debug(
            "Set %s week %s: querying %s (%s) and %s (%s)",
            analysis_set.id,
            weeks_back,
            date1,
            day1.value,
            date2,
            day2.value,
        )
        try:
            records = await self._store.fetch_by_dates(request.table_name, [pair.day1, pair.day2])
        except StoreQueryError:
            LOGGER.warning(
                "Query failed for %s week %s; recording no hits",
                request.table_name,
                weeks_back,
                exc_info=True,
            )
            return check

        for record in records:
            record_date = _iso(record.get(DATE_FIELD))
            if record_date == date1:
                targets = pattern_set.days[day1]
            elif record_date == date2:
                targets = pattern_set.days[day2]
            else:
                continue

            for value in _field_values(record, schema):
                match = check_match(value, targets)
                if match is None:
                    continue
                check.historical_hits.append(
                    HistoricalHit(
                        week=weeks_back,
                        date=record_date,
                        number_found=match.number,
                        match_type=match.match_type,
                    )
                )
                LOGGER.debug("Hit %s (%s) on %s", match.number, match.match_type.value, record_date)

        return check
