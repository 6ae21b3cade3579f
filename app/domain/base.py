"""Entity base: rows returned by the Executor are materialised with ``Entity.from_row``."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel

E = TypeVar("E", bound="Entity")


class Entity(BaseModel):
    model_config = {"from_attributes": True, "extra": "ignore", "protected_namespaces": ()}

    @classmethod
    def from_row(cls: type[E], row: dict[str, Any] | None) -> E | None:
        return cls.model_validate(row) if row is not None else None

    @classmethod
    def from_rows(cls: type[E], rows: list[dict[str, Any]]) -> list[E]:
        return [cls.model_validate(r) for r in rows]
