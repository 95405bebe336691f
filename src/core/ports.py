"""Ports (interfaces) used by the core analyzer.

Ports define the minimal contract for record store adapters so that the core
can be reused with different backends.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Protocol, Sequence


class StoreQueryError(Exception):
    """Raised by store adapters when a query cannot be answered."""


class RecordStorePort(Protocol):
    """Read operations required by the analyzer.

    Rows are whole records keyed by column name; the analyzer inspects the
    number fields itself.
    """

    async def fetch_by_dates(self, table: str, dates: Sequence[date]) -> list[Mapping[str, Any]]:
        ...

    async def fetch_latest(self, table: str, on_or_before: date, limit: int) -> list[Mapping[str, Any]]:
        ...
