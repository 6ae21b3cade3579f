"""Filter base class and query-parameter parsing shared by all filters."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, time
from typing import Any

from app.core.exceptions import BadRequestError
from app.query.builder import QueryBuilder

DATE_FORMAT = "%Y-%m-%d"


def parse_int(params: Mapping[str, str], name: str) -> int | None:
    raw = (params.get(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise BadRequestError(f"Invalid {name}: must be an integer") from None


def parse_date(params: Mapping[str, str], name: str, end_of_day: bool = False) -> datetime | None:
    """Parse a ``YYYY-MM-DD`` parameter. ``end_of_day`` makes the bound inclusive of that day."""
    raw = (params.get(name) or "").strip()
    if not raw:
        return None
    try:
        parsed = datetime.strptime(raw, DATE_FORMAT)
    except ValueError:
        raise BadRequestError(f"Invalid {name}: expected YYYY-MM-DD") from None
    return datetime.combine(parsed.date(), time.max) if end_of_day else parsed


class Filter:
    """Owns a QueryBuilder populated from request parameters.

    Subclasses implement ``apply(params)``; callers use ``from_query`` and then
    ``get_query`` / ``get_query_for_count`` with the repository's base SELECT.
    """

    def __init__(self) -> None:
        self.builder = QueryBuilder()

    @classmethod
    def from_query(cls, params: Mapping[str, str] | None = None) -> Filter:
        instance = cls()
        instance.apply(params or {})
        return instance

    def apply(self, params: Mapping[str, str]) -> None:
        raise NotImplementedError

    def add_bounds(self, field: str, low: Any, high: Any) -> None:
        """Range when both bounds are given, otherwise the single bound that is."""
        if low is not None and high is not None:
            self.builder.add_range(field, low, high)
        elif low is not None:
            self.builder.add_min(field, low)
        elif high is not None:
            self.builder.add_max(field, high)

    def add_date_range(self, field: str, params: Mapping[str, str]) -> None:
        """``dateRangeStart`` / ``dateRangeEnd`` on *field*; the end day is inclusive."""
        start = parse_date(params, "dateRangeStart")
        end = parse_date(params, "dateRangeEnd", end_of_day=True)
        if start is not None and end is not None and start > end:
            raise BadRequestError("dateRangeStart must not be after dateRangeEnd")
        self.add_bounds(field, start, end)

    def get_query(
        self,
        base: str,
        group_by: str = "",
        order_by: str = "",
        limit: int = 0,
        offset: int = 0,
    ) -> tuple[str, list[Any]]:
        return self.builder.build(base, group_by, order_by, limit, offset)

    def get_query_for_count(self, base: str, group_by: str = "") -> tuple[str, list[Any]]:
        return self.builder.build(base, group_by, count_only=True)


class DateRangeFilter(Filter):
    """``dateRangeStart`` / ``dateRangeEnd`` applied to one ``created_at`` column."""

    column: str = ""

    def apply(self, params: Mapping[str, str]) -> None:
        self.add_date_range(self.column, params)
