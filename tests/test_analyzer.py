from __future__ import annotations

import asyncio
import json
from datetime import date, datetime
from typing import Any, Optional

from core.analyzer import HistoricalAnalyzer, parse_trigger, parse_triggers
from core.catalog import PatternCatalog, default_catalog
from core.config import AnalysisConfig
from core.matching import MatchType
from core.models import AnalysisRequest
from core.ports import StoreQueryError

TUESDAY = date(2024, 1, 9)
WEDNESDAY = date(2024, 1, 10)


class FakeStore:
    def __init__(self, rows: Optional[dict[str, list[dict[str, Any]]]] = None) -> None:
        self.rows = rows or {}
        self.calls: list[tuple[str, list[str]]] = []
        self.failing_dates: set[str] = set()

    async def fetch_by_dates(self, table: str, dates) -> list[dict[str, Any]]:
        wanted = [value.isoformat() for value in dates]
        self.calls.append((table, wanted))
        if self.failing_dates.intersection(wanted):
            raise StoreQueryError("boom")
        return [row for row in self.rows.get(table, []) if row["complete_date"] in wanted]

    async def fetch_latest(self, table: str, on_or_before: date, limit: int) -> list[dict[str, Any]]:
        rows = [row for row in self.rows.get(table, []) if row["complete_date"] <= on_or_before.isoformat()]
        rows.sort(key=lambda row: row["complete_date"], reverse=True)
        return rows[:limit]


def _row(day: str, **fields: Optional[int]) -> dict[str, Any]:
    row: dict[str, Any] = {
        "complete_date": day,
        "date_number": None,
        "first_am_day": None,
        "second_am_day": None,
        "third_am_day": None,
        "first_pm_moon": None,
        "second_pm_moon": None,
        "third_pm_moon": None,
    }
    row.update(fields)
    return row


def test_parse_trigger_filters_malformed() -> None:
    assert parse_trigger("07") == 7
    assert parse_trigger(" 5 ") == 5
    assert parse_trigger("") is None
    assert parse_trigger("ab") is None
    assert parse_trigger("100") is None
    assert parse_trigger(-1) is None
    assert parse_trigger("\u00b2") is None
    assert parse_trigger("\u0667") is None
    assert parse_triggers(["10", "", "x", "99"]) == [(0, 10), (3, 99)]


def test_build_analysis_sets_groups_by_first_set() -> None:
    analyzer = HistoricalAnalyzer(default_catalog(), FakeStore())
    sets = analyzer.build_analysis_sets(["07", "89", "54", "", "06", "4"])
    assert [(s.id, s.input_indices) for s in sets] == [
        ("lunMar-firstLM", [0, 2]),
        ("lunMar-secondLM", [1]),
        ("samDim-thirdSD", [5]),
    ]


def test_build_analysis_sets_skips_single_day_sets() -> None:
    catalog = PatternCatalog.from_mapping({"solo": {"only": {"lundi": [10]}}})
    analyzer = HistoricalAnalyzer(catalog, FakeStore())
    assert analyzer.build_analysis_sets(["10"]) == []


def test_single_strict_hit_end_to_end() -> None:
    catalog = PatternCatalog.from_mapping({"marMer": {"test": {"mardi": [10], "mercredi": [10]}}})
    store = FakeStore({"new_york_data": [_row("2024-01-09", first_am_day=10)]})
    analyzer = HistoricalAnalyzer(catalog, store)

    result = asyncio.run(analyzer.analyze(AnalysisRequest(WEDNESDAY, ["10"], "new_york_data")))

    assert len(result.detailed_log) == 1
    checks = result.detailed_log[0].week_checks
    assert len(checks) == 6
    assert (checks[0].date1, checks[0].date2) == ("2024-01-09", "2024-01-10")
    assert len(checks[0].historical_hits) == 1
    hit = checks[0].historical_hits[0]
    assert (hit.week, hit.number_found, hit.match_type) == (1, 10, MatchType.STRICT)
    assert all(not check.historical_hits for check in checks[1:])
    assert [str(raw) for raw in result.raw_results] == ["1er-AM: Week 1: 10|strict"]


def test_one_batched_query_per_week() -> None:
    store = FakeStore()
    analyzer = HistoricalAnalyzer(default_catalog(), store)
    asyncio.run(analyzer.analyze(AnalysisRequest(TUESDAY, ["07"], "new_york_data")))
    assert len(store.calls) == 6
    assert store.calls[0] == ("new_york_data", ["2024-01-08", "2024-01-09"])


def test_records_only_match_their_own_day() -> None:
    catalog = PatternCatalog.from_mapping({"lunMar": {"t": {"lundi": [7], "mardi": [55]}}})
    store = FakeStore(
        {
            "new_york_data": [
                # 55 belongs to Tuesday's numbers only, so Monday's record must not hit.
                _row("2024-01-08", first_am_day=55, second_am_day=70),
                _row("2024-01-09", first_pm_moon=55),
            ]
        }
    )
    analyzer = HistoricalAnalyzer(catalog, store)
    result = asyncio.run(analyzer.analyze(AnalysisRequest(TUESDAY, ["7"], "new_york_data")))

    hits = result.detailed_log[0].week_checks[0].historical_hits
    assert [(hit.date, hit.number_found, hit.match_type) for hit in hits] == [
        ("2024-01-08", 70, MatchType.REVERSE),
        ("2024-01-09", 55, MatchType.STRICT),
    ]


def test_hits_fan_out_to_every_input_of_the_set() -> None:
    store = FakeStore({"new_york_data": [_row("2024-01-09", third_pm_moon=10)]})
    analyzer = HistoricalAnalyzer(default_catalog(), store)
    result = asyncio.run(analyzer.analyze(AnalysisRequest(TUESDAY, ["07", "54"], "new_york_data")))

    assert [str(raw) for raw in result.raw_results] == [
        "1er-AM: Week 1: 10|strict",
        "2em-AM: Week 1: 10|strict",
    ]
    assert [entry.input_label for entry in result.detailed_log] == ["1er-AM", "2em-AM"]
    assert all(len(entry.week_checks[0].historical_hits) == 1 for entry in result.detailed_log)


def test_query_failure_degrades_to_empty_week() -> None:
    store = FakeStore(
        {
            "new_york_data": [
                _row("2024-01-09", first_am_day=55),
                _row("2024-01-02", first_am_day=55),
                _row("2023-12-26", first_am_day=55),
            ]
        }
    )
    store.failing_dates.add("2024-01-02")
    analyzer = HistoricalAnalyzer(default_catalog(), store)
    result = asyncio.run(analyzer.analyze(AnalysisRequest(TUESDAY, ["55"], "new_york_data")))

    checks = result.detailed_log[0].week_checks
    assert len(checks) == 6
    assert [len(check.historical_hits) for check in checks[:3]] == [1, 0, 1]
    assert [raw.week for raw in result.raw_results] == [1, 3]


def test_analysis_is_idempotent() -> None:
    store = FakeStore(
        {"new_york_data": [_row("2024-01-09", first_am_day=55), _row("2024-01-01", second_am_day=45)]}
    )
    analyzer = HistoricalAnalyzer(default_catalog(), store)
    request = AnalysisRequest(TUESDAY, ["07", "55", "14"], "new_york_data")

    first = json.dumps(asyncio.run(analyzer.analyze(request)).to_dict())
    second = json.dumps(asyncio.run(analyzer.analyze(request)).to_dict())
    assert first == second


def test_bounded_concurrency_matches_sequential() -> None:
    rows = {
        "new_york_data": [
            _row("2024-01-09", first_am_day=55),
            _row("2023-12-25", second_am_day=45),
            _row("2023-12-04", third_am_day=7),
        ]
    }
    request = AnalysisRequest(TUESDAY, ["07", "89"], "new_york_data")
    sequential = HistoricalAnalyzer(default_catalog(), FakeStore(rows))
    concurrent = HistoricalAnalyzer(default_catalog(), FakeStore(rows), AnalysisConfig(max_concurrency=3))

    assert asyncio.run(concurrent.analyze(request)).to_dict() == asyncio.run(sequential.analyze(request)).to_dict()


def test_week_horizon_follows_config() -> None:
    store = FakeStore()
    analyzer = HistoricalAnalyzer(default_catalog(), store, AnalysisConfig(weeks=3))
    result = asyncio.run(analyzer.analyze(AnalysisRequest(TUESDAY, ["07"], "new_york_data")))
    assert [check.week for check in result.detailed_log[0].week_checks] == [1, 2, 3]


def test_no_sets_means_no_queries() -> None:
    store = FakeStore()
    analyzer = HistoricalAnalyzer(default_catalog(), store)
    result = asyncio.run(analyzer.analyze(AnalysisRequest(TUESDAY, ["06", "", "zz"], "new_york_data")))
    assert result.raw_results == []
    assert result.detailed_log == []
    assert store.calls == []


def test_staged_analysis_groups_inputs() -> None:
    analyzer = HistoricalAnalyzer(default_catalog(), FakeStore())
    numbers = ["07", "54", "89", "55", "10", "70"]

    single = asyncio.run(analyzer.analyze(AnalysisRequest(TUESDAY, numbers[:5] + [""], "new_york_data")))
    assert [(s.id, s.input_indices) for s in single.analysis_sets] == [
        ("lunMar-firstLM", [0, 1, 3, 4]),
        ("lunMar-secondLM", [2]),
    ]

    staged = asyncio.run(analyzer.analyze_staged(AnalysisRequest(TUESDAY, numbers, "new_york_data")))
    assert [(s.id, s.input_indices) for s in staged.analysis_sets] == [
        ("lunMar-firstLM", [0, 1]),
        ("lunMar-secondLM", [2]),
        ("lunMar-firstLM", [3, 4, 5]),
    ]
    assert len(staged.detailed_log) == 6


def test_bad_record_values_are_skipped() -> None:
    store = FakeStore({"new_york_data": [_row("2024-01-09", first_am_day=-1, second_am_day=55, third_am_day=150)]})
    analyzer = HistoricalAnalyzer(default_catalog(), store)
    result = asyncio.run(analyzer.analyze(AnalysisRequest(TUESDAY, ["55"], "new_york_data")))
    assert [str(raw) for raw in result.raw_results] == ["1er-AM: Week 1: 55|strict"]


def test_verify_skips_bad_record_values() -> None:
    row = _row("2024-01-08", date_number=-7, first_am_day=150, second_am_day=7)
    row["third_am_day"] = "07"
    store = FakeStore({"new_york_data": [row]})
    analyzer = HistoricalAnalyzer(default_catalog(), store)
    hits = asyncio.run(analyzer.verify(TUESDAY, "new_york_data", "lundi", ["07"]))
    assert [(hit.date, hit.number_found, hit.match_type) for hit in hits] == [
        ("2024-01-08", 7, MatchType.STRICT)
    ]


def test_recent_inputs_blank_bad_values() -> None:
    store = FakeStore({"new_york_data": [_row("2024-01-08", first_am_day=-1, second_am_day=42)]})
    analyzer = HistoricalAnalyzer(default_catalog(), store)
    inputs = asyncio.run(analyzer.load_recent_inputs(TUESDAY, "new_york_data", limit=1))
    assert inputs == ["", "42", "", "", "", ""]


class DatetimeStore(FakeStore):
    async def fetch_by_dates(self, table: str, dates) -> list[dict[str, Any]]:
        rows = await super().fetch_by_dates(table, dates)
        return [
            {**row, "complete_date": datetime.fromisoformat(row["complete_date"]).replace(hour=12)}
            for row in rows
        ]


def test_datetime_record_dates_are_matched_by_day() -> None:
    store = DatetimeStore({"new_york_data": [_row("2024-01-09", second_am_day=55)]})
    analyzer = HistoricalAnalyzer(default_catalog(), store)
    result = asyncio.run(analyzer.analyze(AnalysisRequest(TUESDAY, ["55"], "new_york_data")))
    assert [str(raw) for raw in result.raw_results] == ["1er-AM: Week 1: 55|strict"]
    assert result.raw_results[0].date == "2024-01-09"


def test_georgia_records_use_ten_fields() -> None:
    row = {"complete_date": "2024-01-09", "third_night": 55, "first_day": None}
    store = FakeStore({"georgia_data": [row]})
    analyzer = HistoricalAnalyzer(default_catalog(), store)
    result = asyncio.run(analyzer.analyze(AnalysisRequest(TUESDAY, ["", "", "", "", "", "", "07"], "georgia_data")))
    assert [str(raw) for raw in result.raw_results] == ["1er-Night: Week 1: 55|strict"]


def test_verify_dedupes_within_a_record() -> None:
    store = FakeStore(
        {
            "new_york_data": [
                _row("2024-01-01", date_number=70, first_am_day=70, second_am_day=7),
                _row("2024-01-02", first_am_day=7),
            ]
        }
    )
    analyzer = HistoricalAnalyzer(default_catalog(), store)
    hits = asyncio.run(analyzer.verify(TUESDAY, "new_york_data", "Monday", ["07"]))

    assert [(hit.week, hit.date, hit.number_found, hit.match_type) for hit in hits] == [
        (2, "2024-01-01", 70, MatchType.REVERSE),
        (2, "2024-01-01", 7, MatchType.STRICT),
    ]
    assert len(store.calls) == 7
    assert all(len(dates) == 1 for _, dates in store.calls)


def test_verify_without_numbers_skips_queries() -> None:
    store = FakeStore()
    analyzer = HistoricalAnalyzer(default_catalog(), store)
    assert asyncio.run(analyzer.verify(TUESDAY, "new_york_data", "lundi", ["", "abc"])) == []
    assert store.calls == []


def test_verify_skips_failed_weeks() -> None:
    store = FakeStore({"new_york_data": [_row("2024-01-08", first_am_day=7), _row("2024-01-01", first_am_day=7)]})
    store.failing_dates.add("2024-01-08")
    analyzer = HistoricalAnalyzer(default_catalog(), store)
    hits = asyncio.run(analyzer.verify(TUESDAY, "new_york_data", "lundi", ["07"]))
    assert [hit.date for hit in hits] == ["2024-01-01"]


def test_load_recent_inputs_pads_missing_rows() -> None:
    store = FakeStore(
        {
            "new_york_data": [
                _row("2024-01-08", first_am_day=7, third_pm_moon=99),
                _row("2024-01-09", first_am_day=1),
                _row("2024-01-10", first_am_day=2),
            ]
        }
    )
    analyzer = HistoricalAnalyzer(default_catalog(), store)
    inputs = asyncio.run(analyzer.load_recent_inputs(TUESDAY, "new_york_data"))

    assert len(inputs) == 18
    assert inputs[:6] == ["01", "", "", "", "", ""]
    assert inputs[6:12] == ["07", "", "", "", "", "99"]
    assert inputs[12:] == [""] * 6
