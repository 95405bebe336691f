"""SQLite record store adapter.

Implements the core RecordStorePort using a simple SQLite database with one
table per location.
"""

from __future__ import annotations

import asyncio
import sqlite3
from datetime import date
from typing import Any, Mapping, Optional, Sequence

from core.ports import StoreQueryError
from core.schemas import DATE_FIELD, LOCATIONS, RecordSchema, location_for_table


def _schema(table: str) -> RecordSchema:
    # Table names come from the location registry only; they are interpolated
    # into SQL, so anything else is rejected here.
    try:
        return location_for_table(table).schema
    except ValueError as exc:
        raise StoreQueryError(str(exc)) from exc


class SQLiteRecordStore:
    """Thin SQLite wrapper that satisfies the RecordStorePort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create one table per registered location if missing.

        Each table holds one row per draw date:
        - complete_date: ISO date (UNIQUE), the only column queries filter on
        - one nullable INTEGER column per number field of the record family
        """

        with self._connect() as conn:
            for location in LOCATIONS:
                columns = ",\n".join(f"{name} INTEGER" for name in location.schema.number_fields)
                conn.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {location.table_name} (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        {DATE_FIELD} TEXT NOT NULL UNIQUE,
                        {columns},
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                    """
                )

    def save_record(self, table: str, complete_date: date, values: Mapping[str, Optional[int]]) -> None:
        """Upsert the row for one date; fields not given are stored as NULL."""

        schema = _schema(table)
        unknown = set(values) - set(schema.number_fields)
        if unknown:
            raise ValueError(f"Unknown fields for {table}: {sorted(unknown)}")

        fields = list(schema.number_fields)
        placeholders = ", ".join("?" for _ in range(len(fields) + 1))
        updates = ", ".join(f"{name} = excluded.{name}" for name in fields)
        with self._connect() as conn:
            conn.execute(
                f"""
                INSERT INTO {table} ({DATE_FIELD}, {", ".join(fields)})
                VALUES ({placeholders})
                ON CONFLICT({DATE_FIELD}) DO UPDATE SET {updates}
                """,
                (complete_date.isoformat(), *(values.get(name) for name in fields)),
            )

    def _select_by_dates(self, table: str, dates: Sequence[date]) -> list[dict[str, Any]]:
        _schema(table)
        if not dates:
            return []
        placeholders = ", ".join("?" for _ in dates)
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    f"SELECT * FROM {table} WHERE {DATE_FIELD} IN ({placeholders}) ORDER BY {DATE_FIELD}",
                    tuple(value.isoformat() for value in dates),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreQueryError(f"Query on {table} failed: {exc}") from exc
        return [dict(row) for row in rows]

    def _select_latest(self, table: str, on_or_before: date, limit: int) -> list[dict[str, Any]]:
        _schema(table)
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    f"SELECT * FROM {table} WHERE {DATE_FIELD} <= ? ORDER BY {DATE_FIELD} DESC LIMIT ?",
                    (on_or_before.isoformat(), limit),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreQueryError(f"Query on {table} failed: {exc}") from exc
        return [dict(row) for row in rows]

    async def fetch_by_dates(self, table: str, dates: Sequence[date]) -> list[dict[str, Any]]:
        """Return whole rows whose date is one of ``dates``."""

        return await asyncio.to_thread(self._select_by_dates, table, list(dates))

    async def fetch_latest(self, table: str, on_or_before: date, limit: int) -> list[dict[str, Any]]:
        """Return up to ``limit`` rows on or before a date, newest first."""

        return await asyncio.to_thread(self._select_latest, table, on_or_before, limit)

    def count_records(self, table: str) -> int:
        _schema(table)
        with self._connect() as conn:
            row = conn.execute(f"SELECT COUNT(*) AS total FROM {table}").fetchone()
        return int(row["total"])
