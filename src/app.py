"""Application entry point for the dayscope analyzer."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
from datetime import date
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint

import settings
from adapters.report_formatting import format_report, format_verification
from adapters.sqlite_records import SQLiteRecordStore
from core.analyzer import HistoricalAnalyzer, parse_triggers
from core.catalog import default_catalog
from core.dates import parse_day_key
from core.models import AnalysisRequest
from core.schemas import LOCATIONS, location_for_table

NAME = "DAYSCOPE"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/dayscope.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _build_analyzer() -> tuple[HistoricalAnalyzer, SQLiteRecordStore]:
    store = SQLiteRecordStore(settings.DB_PATH)
    store.init_db()
    analyzer = HistoricalAnalyzer(default_catalog(), store, settings.analysis_config())
    return analyzer, store


def _init_db(args: argparse.Namespace) -> None:
    logger = logging.getLogger(__name__)
    _, store = _build_analyzer()
    for location in LOCATIONS:
        logger.info("%s: %s records", location.table_name, store.count_records(location.table_name))


def _analyze(args: argparse.Namespace) -> None:
    location = location_for_table(args.table)
    analyzer, _ = _build_analyzer()
    request = AnalysisRequest(
        reference_date=args.date,
        numbers=args.numbers,
        table_name=location.table_name,
    )
    if args.staged:
        result = asyncio.run(analyzer.analyze_staged(request))
    else:
        result = asyncio.run(analyzer.analyze(request))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return
    print(format_report(result, location, args.date.isoformat(), args.format))


def _verify(args: argparse.Namespace) -> None:
    location = location_for_table(args.table)
    day = parse_day_key(args.day)
    analyzer, _ = _build_analyzer()
    hits = asyncio.run(analyzer.verify(args.date, location.table_name, day, args.numbers))

    if args.json:
        print(json.dumps([hit.to_dict() for hit in hits], indent=2))
        return
    print(format_verification(hits, location, day.english_name))


def _lookup(args: argparse.Namespace) -> None:
    catalog = default_catalog()
    numbers = [number for _, number in parse_triggers(args.numbers)]
    for number in numbers:
        sets = catalog.lookup(number)
        if not sets:
            print(f"{number:02d}: not in catalog")
            continue
        for pattern_set in sets:
            days = " | ".join(
                f"{day.english_name}: [{', '.join(str(n) for n in values)}]"
                for day, values in pattern_set.days.items()
            )
            print(f"{number:02d}: {pattern_set.id} {days}")

    for day_result in catalog.day_matches(numbers):
        print(
            f"{day_result.name}: {day_result.total_arrays_found} array(s), "
            f"{day_result.total_numbers_matched} number(s)"
        )
        for match in day_result.matches:
            found = ", ".join(f"{n:02d}" for n in match.found_numbers)
            print(f"  {match.location} [{found}] {match.percentage}%")


def _recent(args: argparse.Namespace) -> None:
    analyzer, _ = _build_analyzer()
    inputs = asyncio.run(analyzer.load_recent_inputs(args.date, args.table, args.limit))
    print(" ".join(value or "--" for value in inputs))


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="dayscope")
    subparsers = parser.add_subparsers(dest="command", required=True)
    tables = [location.table_name for location in LOCATIONS]

    subparsers.add_parser("init-db", help="Create the record tables")

    analyze = subparsers.add_parser("analyze", help="Scan past weeks for catalog hits")
    analyze.add_argument("--table", choices=tables, required=True)
    analyze.add_argument("--date", type=date.fromisoformat, default=date.today())
    analyze.add_argument("--staged", action="store_true", help="Analyse input groups separately")
    analyze.add_argument("--format", choices=["text", "markdown"], default=settings.REPORT_FORMAT)
    analyze.add_argument("--json", action="store_true")
    analyze.add_argument("numbers", nargs="+")

    verify = subparsers.add_parser("verify", help="Check one weekday over past weeks")
    verify.add_argument("--table", choices=tables, required=True)
    verify.add_argument("--day", required=True)
    verify.add_argument("--date", type=date.fromisoformat, default=date.today())
    verify.add_argument("--json", action="store_true")
    verify.add_argument("numbers", nargs="+")

    lookup = subparsers.add_parser("lookup", help="Show catalog sets containing numbers")
    lookup.add_argument("numbers", nargs="+")

    recent = subparsers.add_parser("recent", help="Load the latest records as inputs")
    recent.add_argument("--table", choices=tables, required=True)
    recent.add_argument("--date", type=date.fromisoformat, default=date.today())
    recent.add_argument("--limit", type=int, default=3)

    args = parser.parse_args(argv)
    # JSON output must stay machine-readable.
    if not getattr(args, "json", False):
        _print_banner()
    _configure_logging()

    handlers = {
        "init-db": _init_db,
        "analyze": _analyze,
        "verify": _verify,
        "lookup": _lookup,
        "recent": _recent,
    }
    handlers[args.command](args)


if __name__ == "__main__":
    main()
