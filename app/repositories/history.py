"""Append-only shipping and purchase status history.

Both tables share the same shape (vehicle_id, old_status, new_status,
changed_by, change_remarks, changed_at) plus a few snapshot columns of the
sibling row at the time of the change. ``StatusHistoryRepository`` holds the
shared reads; the two subclasses name the table and snapshot columns.
"""

from __future__ import annotations

from typing import Any

from app.db.executor import Executor
from app.domain.history import CurrentStatus, PurchaseHistory, ShippingHistory, StatusHistory

RECENT_DEFAULT_LIMIT = 50
RECENT_MAX_LIMIT = 200


class StatusHistoryRepository:
    table: str = ""
    alias: str = "h"
    snapshot_columns: tuple[str, ...] = ()
    entity: type[StatusHistory] = StatusHistory

    def _select(self, with_duration: bool = False) -> str:
        a = self.alias
        columns = [
            f"{a}.id", f"{a}.vehicle_id", f"{a}.old_status", f"{a}.new_status",
            f"{a}.changed_by", f"{a}.change_remarks", f"{a}.changed_at",
            *(f"{a}.{c}" for c in self.snapshot_columns),
            "v.code AS vehicle_code", "v.make", "v.model", "v.chassis_id",
        ]
        if with_duration:
            columns.append(
                f"EXTRACT(EPOCH FROM ({a}.changed_at - LAG({a}.changed_at) "
                f"OVER (PARTITION BY {a}.vehicle_id ORDER BY {a}.changed_at))) / 3600 "
                "AS hours_in_previous_status"
            )
        return (
            "SELECT " + ", ".join(columns)
            + f" FROM {self.table} {a} JOIN cars.vehicles v ON v.id = {a}.vehicle_id"
        )

    async def get_by_vehicle_id(self, db: Executor, vehicle_id: int) -> list[StatusHistory]:
        rows = await db.query(
            self._select(with_duration=True)
            + f" WHERE {self.alias}.vehicle_id = $1"
            + f" ORDER BY {self.alias}.changed_at DESC, {self.alias}.id DESC",
            vehicle_id,
        )
        return self.entity.from_rows(rows)

    async def get_recent(self, db: Executor, limit: int = RECENT_DEFAULT_LIMIT) -> list[StatusHistory]:
        if limit <= 0:
            limit = RECENT_DEFAULT_LIMIT
        limit = min(limit, RECENT_MAX_LIMIT)
        rows = await db.query(
            self._select()
            + f" ORDER BY {self.alias}.changed_at DESC, {self.alias}.id DESC LIMIT $1",
            limit,
        )
        return self.entity.from_rows(rows)

    async def get_by_status(self, db: Executor, status: str) -> list[StatusHistory]:
        rows = await db.query(
            self._select()
            + f" WHERE {self.alias}.new_status = $1"
            + f" ORDER BY {self.alias}.changed_at DESC, {self.alias}.id DESC",
            status,
        )
        return self.entity.from_rows(rows)

    async def get_current_status_for_all_vehicles(self, db: Executor) -> list[CurrentStatus]:
        rows = await db.query(
            f"""SELECT DISTINCT ON (vehicle_id) vehicle_id, new_status
                FROM {self.table}
                ORDER BY vehicle_id, changed_at DESC, id DESC"""
        )
        return CurrentStatus.from_rows(rows)

    async def insert_entry(
        self,
        db: Executor,
        vehicle_id: int,
        old_status: str | None,
        new_status: str,
        changed_by: str | None,
        remarks: str | None,
        snapshot: dict[str, Any] | None = None,
    ) -> int:
        """Append one history row stamped with CURRENT_TIMESTAMP; returns its id."""
        snapshot = snapshot or {}
        columns = ["vehicle_id", "old_status", "new_status", "changed_by", "change_remarks"]
        values: list[Any] = [vehicle_id, old_status, new_status, changed_by, remarks]
        for column in self.snapshot_columns:
            columns.append(column)
            values.append(snapshot.get(column))
        placeholders = ", ".join(f"${i}" for i in range(1, len(values) + 1))
        row = await db.query_row(
            f"""INSERT INTO {self.table} ({", ".join(columns)}, changed_at)
                VALUES ({placeholders}, CURRENT_TIMESTAMP)
                RETURNING id""",
            *values,
        )
        return int(row["id"])


class ShippingHistoryRepository(StatusHistoryRepository):
    table = "cars.vehicle_shipping_history"
    alias = "vsh"
    snapshot_columns = (
        "vessel_name", "departure_harbour", "shipment_date", "arrival_date", "clearing_date",
    )
    entity = ShippingHistory


class PurchaseHistoryRepository(StatusHistoryRepository):
    table = "cars.vehicle_purchase_history"
    alias = "vph"
    snapshot_columns = (
        "supplier_id", "lc_bank", "lc_number", "lc_cost_jpy", "purchase_date", "purchase_remarks",
    )
    entity = PurchaseHistory

    async def get_by_supplier(self, db: Executor, supplier_id: int) -> list[StatusHistory]:
        rows = await db.query(
            self._select()
            + " WHERE vph.supplier_id = $1 ORDER BY vph.changed_at DESC, vph.id DESC",
            supplier_id,
        )
        return self.entity.from_rows(rows)
