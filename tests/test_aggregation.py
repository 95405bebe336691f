from __future__ import annotations

from core.aggregation import (
    FormattedResult,
    find_mariage_pairs,
    format_final_results,
    group_hits_by_day,
    multi_hit_numbers,
    unique_numbers,
)
from core.matching import MatchType
from core.models import AnalysisLogEntry, HistoricalHit, RawHit, WeekCheck


def test_format_final_results_counts_legacy_strings() -> None:
    results = format_final_results(["L1: Week 1: 70|strict", "L2: Week 2: 70|strict"])
    assert results == [
        FormattedResult(number="70", count=2, match_type=MatchType.STRICT, display="70 (2 times)")
    ]


def test_format_final_results_keeps_types_apart_and_sorts() -> None:
    raw = [
        RawHit(input_label="1er-AM", week=1, number=70, match_type=MatchType.REVERSE),
        RawHit(input_label="1er-AM", week=2, number=5, match_type=MatchType.STRICT),
        RawHit(input_label="2em-AM", week=1, number=70, match_type=MatchType.STRICT),
    ]
    results = format_final_results(raw)
    assert [(item.number, item.match_type) for item in results] == [
        ("5", MatchType.STRICT),
        ("70", MatchType.STRICT),
        ("70", MatchType.REVERSE),
    ]
    assert all(item.display == item.number for item in results)


def test_raw_hit_text_roundtrip() -> None:
    hit = RawHit(input_label="3em-PM", week=4, number=7, match_type=MatchType.REVERSE)
    assert str(hit) == "3em-PM: Week 4: 7|reverse"
    assert RawHit.parse(str(hit)) == hit


def test_find_mariage_pairs() -> None:
    assert find_mariage_pairs([24, 45]) == ["(24 x 45)"]
    assert find_mariage_pairs([11, 22]) == []
    assert find_mariage_pairs([12, 21]) == []


def test_find_mariage_pairs_pads_and_dedupes() -> None:
    assert find_mariage_pairs([5, 50, 5]) == []
    assert find_mariage_pairs([7, 17, 7]) == ["(07 x 17)"]


def test_unique_and_multi_hit_numbers() -> None:
    raw = ["A: Week 1: 70|strict", "B: Week 1: 70|reverse", "A: Week 2: 12|strict"]
    assert unique_numbers(raw) == [12, 70]
    assert multi_hit_numbers(raw) == ["70 (2 times)"]


def test_group_hits_by_day_dedupes_across_entries() -> None:
    checks = [
        WeekCheck(
            week=1,
            date1="2024-01-08",
            date2="2024-01-09",
            historical_hits=[
                HistoricalHit(week=1, date="2024-01-09", number_found=55, match_type=MatchType.STRICT),
                HistoricalHit(week=1, date="2024-01-08", number_found=45, match_type=MatchType.REVERSE),
                HistoricalHit(week=1, date="2024-01-08", number_found=7, match_type=MatchType.STRICT),
            ],
        )
    ]
    log = [
        AnalysisLogEntry(input_label="1er-AM", input_number=7, analysis_set_id="s", week_checks=checks),
        AnalysisLogEntry(input_label="2em-AM", input_number=54, analysis_set_id="s", week_checks=checks),
    ]
    grouped = group_hits_by_day(log)
    assert list(grouped) == ["Monday", "Tuesday"]
    assert [hit.number for hit in grouped["Monday"]] == [7, 45]
    assert len(grouped["Tuesday"]) == 1
