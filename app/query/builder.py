"""Parameterised SQL assembly for list and analytics queries.

Conditions are small immutable values. Each renders itself given the next free
placeholder index and reports the index after it, so numbering is decided
only at ``build`` time::

    qb = QueryBuilder()
    qb.add_equal("v.make", "Toyota")
    qb.add_range("v.mileage_km", 10000, 80000)
    sql, args = qb.build("SELECT ... FROM cars.vehicles v", limit=5, offset=5)
    # ... WHERE v.make = $1 AND v.mileage_km BETWEEN $2 AND $3 LIMIT $4 OFFSET $5
    # args == ["Toyota", 10000, 80000, 5, 5]

Numbering restarts on every ``build`` call, so the count query and the data
query built from the same instance share an identical WHERE clause and the
count arguments are a prefix of the data arguments.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Equal:
    field: str
    value: Any

    def render(self, index: int) -> tuple[str, list[Any], int]:
        return f"{self.field} = ${index}", [self.value], index + 1


@dataclass(frozen=True)
class Like:
    """Case-insensitive substring match; the value is wrapped in ``%`` here."""

    field: str
    value: str

    def render(self, index: int) -> tuple[str, list[Any], int]:
        return f"{self.field} ILIKE ${index}", [f"%{self.value}%"], index + 1


@dataclass(frozen=True)
class Range:
    field: str
    low: Any
    high: Any

    def render(self, index: int) -> tuple[str, list[Any], int]:
        return (
            f"{self.field} BETWEEN ${index} AND ${index + 1}",
            [self.low, self.high],
            index + 2,
        )


@dataclass(frozen=True)
class Min:
    field: str
    value: Any

    def render(self, index: int) -> tuple[str, list[Any], int]:
        return f"{self.field} >= ${index}", [self.value], index + 1


@dataclass(frozen=True)
class Max:
    field: str
    value: Any

    def render(self, index: int) -> tuple[str, list[Any], int]:
        return f"{self.field} <= ${index}", [self.value], index + 1


Condition = Union[Equal, Like, Range, Min, Max]


@dataclass(frozen=True)
class OrderBy:
    field: str
    direction: str = "ASC"
    tiebreaker: str = ""

    def __post_init__(self) -> None:
        direction = (self.direction or "").strip().upper()
        if direction not in ("ASC", "DESC"):
            direction = "ASC"
        object.__setattr__(self, "direction", direction)

    def render(self) -> str:
        clause = f"ORDER BY {self.field} {self.direction}"
        if self.tiebreaker and self.tiebreaker != self.field:
            clause += f", {self.tiebreaker} {self.direction}"
        return clause


class QueryBuilder:
    """Collects conditions and renders a statement with its argument vector."""

    def __init__(self) -> None:
        self._conditions: list[Condition] = []
        self._order_by: OrderBy | None = None

    @property
    def conditions(self) -> tuple[Condition, ...]:
        return tuple(self._conditions)

    @property
    def order(self) -> OrderBy | None:
        return self._order_by

    def add(self, condition: Condition) -> QueryBuilder:
        self._conditions.append(condition)
        return self

    def add_equal(self, field: str, value: Any) -> QueryBuilder:
        return self.add(Equal(field, value))

    def add_like(self, field: str, value: str) -> QueryBuilder:
        return self.add(Like(field, value))

    def add_range(self, field: str, low: Any, high: Any) -> QueryBuilder:
        return self.add(Range(field, low, high))

    def add_min(self, field: str, value: Any) -> QueryBuilder:
        return self.add(Min(field, value))

    def add_max(self, field: str, value: Any) -> QueryBuilder:
        return self.add(Max(field, value))

    def set_order_by(self, field: str, direction: str = "ASC", tiebreaker: str = "") -> QueryBuilder:
        self._order_by = OrderBy(field, direction, tiebreaker)
        return self

    def build(
        self,
        base: str,
        group_by: str = "",
        order_by: str = "",
        limit: int = 0,
        offset: int = 0,
        count_only: bool = False,
    ) -> tuple[str, list[Any]]:
        """Render *base* plus WHERE, GROUP BY, ORDER BY, LIMIT and OFFSET.

        ``order_by`` is used only when no ``OrderBy`` was set on the builder and
        must come from static code or the field allow-list. ORDER BY is skipped
        when ``count_only`` is true; LIMIT/OFFSET are emitted only when positive.
        """
        sql = base
        args: list[Any] = []
        index = 1

        if self._conditions:
            fragments = []
            for condition in self._conditions:
                fragment, values, index = condition.render(index)
                fragments.append(fragment)
                args.extend(values)
            sql += " WHERE " + " AND ".join(fragments)

        if group_by:
            sql += f" GROUP BY {group_by}"

        if not count_only:
            if self._order_by is not None:
                sql += " " + self._order_by.render()
            elif order_by:
                sql += f" ORDER BY {order_by}"

        if limit > 0:
            sql += f" LIMIT ${index}"
            args.append(limit)
            index += 1

        if offset > 0:
            sql += f" OFFSET ${index}"
            args.append(offset)
            index += 1

        return sql, args
