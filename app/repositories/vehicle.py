"""Vehicle repository: the vehicles table plus the joined list/analytics reads.

All methods take the Executor as their first argument and never open
transactions; the service decides whether they run inside one.
"""

from __future__ import annotations

from typing import Any

from app.db.executor import Executor, Row
from app.domain.vehicle import (
    Vehicle,
    VehicleComplete,
    VehicleFinancials,
    VehicleImage,
    VehiclePurchase,
    VehicleSales,
    VehicleShipping,
)
from app.filters.base import Filter
from app.filters.vehicle import DEFAULT_ORDER
from app.repositories.image import IMAGE_COLUMNS
from app.schemas.vehicle import VehicleCreate, VehicleUpdate

VEHICLE_COLUMNS = (
    "id", "code", "make", "make_id", "model", "trim_level", "year_of_manufacture",
    "color", "mileage_km", "chassis_id", "condition_status", "year_of_registration",
    "license_plate", "auction_grade", "auction_price", "cif_value", "currency",
    "hs_code", "invoice_fob_jpy", "registration_number", "record_date",
    "is_featured", "featured_at", "created_at", "updated_at",
)

# columns written on insert / COALESCE-updated on edit
_WRITABLE = (
    "code", "make", "make_id", "model", "trim_level", "year_of_manufacture",
    "color", "mileage_km", "chassis_id", "condition_status", "year_of_registration",
    "license_plate", "auction_grade", "auction_price", "cif_value", "currency",
    "hs_code", "invoice_fob_jpy", "registration_number", "record_date",
)

SHIPPING_COLUMNS = (
    "id", "vehicle_id", "vessel_name", "departure_harbour", "shipment_date",
    "arrival_date", "clearing_date", "shipping_status", "created_at", "updated_at",
)
FINANCIAL_COLUMNS = (
    "id", "vehicle_id", "charges_lkr", "tt_lkr", "duty_lkr", "clearing_lkr",
    "other_expenses_lkr", "total_cost_lkr", "created_at", "updated_at",
)
SALES_COLUMNS = (
    "id", "vehicle_id", "customer_id", "sold_date", "revenue", "profit",
    "sold_to_name", "sold_to_title", "contact_number", "customer_address",
    "other_contacts", "sale_remarks", "sale_status", "created_at", "updated_at",
)
PURCHASE_COLUMNS = (
    "id", "vehicle_id", "supplier_id", "bought_from_name", "bought_from_title",
    "bought_from_contact", "bought_from_address", "bought_from_other_contacts",
    "purchase_remarks", "lc_bank", "lc_number", "lc_cost_jpy", "exchange_rate",
    "purchase_date", "purchase_status", "created_at", "updated_at",
)

# alias → (columns, entity, VehicleComplete attribute)
SIBLINGS: dict[str, tuple[tuple[str, ...], type, str]] = {
    "vs": (SHIPPING_COLUMNS, VehicleShipping, "shipping"),
    "vf": (FINANCIAL_COLUMNS, VehicleFinancials, "financials"),
    "vsl": (SALES_COLUMNS, VehicleSales, "sales"),
    "vp": (PURCHASE_COLUMNS, VehiclePurchase, "purchase"),
}

JOINS = """
        FROM cars.vehicles v
        LEFT JOIN cars.vehicle_shipping vs ON vs.vehicle_id = v.id
        LEFT JOIN cars.vehicle_financials vf ON vf.vehicle_id = v.id
        LEFT JOIN cars.vehicle_sales vsl ON vsl.vehicle_id = v.id
        LEFT JOIN cars.vehicle_purchases vp ON vp.vehicle_id = v.id"""

_SELECT_VEHICLE = ", ".join(f"v.{c}" for c in VEHICLE_COLUMNS)
_RETURNING_VEHICLE = ", ".join(VEHICLE_COLUMNS)


def _prefixed(alias: str, columns: tuple[str, ...]) -> str:
    return ", ".join(f"{alias}.{c} AS {alias}_{c}" for c in columns)


def _split(row: Row, alias: str, columns: tuple[str, ...]) -> dict[str, Any] | None:
    """Extract one joined sibling from a prefixed row; None when the LEFT JOIN missed."""
    values = {c: row.get(f"{alias}_{c}") for c in columns}
    return values if values.get("vehicle_id") is not None else None


class VehicleRepository:

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list_query(self, visible: tuple[str, ...]) -> str:
        """Base SELECT for list reads; *visible* names the sibling aliases to project."""
        select = [_SELECT_VEHICLE]
        for alias in visible:
            columns, _, _ = SIBLINGS[alias]
            select.append(_prefixed(alias, columns))
        return "SELECT " + ", ".join(select) + JOINS

    async def get_all(
        self,
        db: Executor,
        limit: int,
        offset: int,
        filter: Filter,
        visible: tuple[str, ...] = (),
    ) -> list[VehicleComplete]:
        sql, args = filter.get_query(
            self.list_query(visible), order_by=DEFAULT_ORDER, limit=limit, offset=offset,
        )
        rows = await db.query(sql, *args)

        items: list[VehicleComplete] = []
        for row in rows:
            complete: dict[str, Any] = {"vehicle": {c: row.get(c) for c in VEHICLE_COLUMNS}}
            for alias in visible:
                columns, _, attr = SIBLINGS[alias]
                complete[attr] = _split(row, alias, columns)
            items.append(VehicleComplete.model_validate(complete))

        images = await self.get_images_by_vehicle_ids(db, [i.vehicle.id for i in items])
        for item in items:
            item.images = images.get(item.vehicle.id, [])
        return items

    async def count(self, db: Executor, filter: Filter) -> int:
        sql, args = filter.get_query_for_count("SELECT COUNT(*) AS total" + JOINS)
        row = await db.query_row(sql, *args)
        return int(row["total"]) if row else 0

    async def get_images_by_vehicle_ids(
        self, db: Executor, vehicle_ids: list[int]
    ) -> dict[int, list[VehicleImage]]:
        if not vehicle_ids:
            return {}
        rows = await db.query(
            f"""SELECT {", ".join(IMAGE_COLUMNS)}
                FROM cars.vehicle_images
                WHERE vehicle_id = ANY($1)
                ORDER BY vehicle_id, display_order, id""",
            vehicle_ids,
        )
        grouped: dict[int, list[VehicleImage]] = {}
        for row in rows:
            grouped.setdefault(row["vehicle_id"], []).append(VehicleImage.model_validate(row))
        return grouped

    async def get_by_id(self, db: Executor, vehicle_id: int) -> Vehicle | None:
        row = await db.query_row(
            f"SELECT {_SELECT_VEHICLE} FROM cars.vehicles v WHERE v.id = $1",
            vehicle_id,
        )
        return Vehicle.from_row(row)

    async def exists(self, db: Executor, vehicle_id: int) -> bool:
        row = await db.query_row("SELECT 1 AS found FROM cars.vehicles WHERE id = $1", vehicle_id)
        return row is not None

    async def get_featured(self, db: Executor, limit: int) -> list[Vehicle]:
        rows = await db.query(
            f"""SELECT {_SELECT_VEHICLE}
                FROM cars.vehicles v
                WHERE v.is_featured = true
                ORDER BY v.featured_at DESC NULLS LAST, v.id DESC
                LIMIT $1""",
            limit,
        )
        return Vehicle.from_rows(rows)

    async def get_brand_count(self, db: Executor, filter: Filter) -> dict[str, int]:
        sql, args = filter.get_query_for_count(
            "SELECT v.make AS make, COUNT(*) AS vehicle_count" + JOINS, group_by="v.make",
        )
        rows = await db.query(sql, *args)
        return {r["make"]: int(r["vehicle_count"]) for r in rows}

    async def get_dropdown_values(self, db: Executor) -> dict[str, list]:
        makes_models = await db.query(
            "SELECT DISTINCT v.make, v.model FROM cars.vehicles v ORDER BY v.make, v.model"
        )
        colors = await db.query(
            """SELECT DISTINCT v.color FROM cars.vehicles v
               WHERE v.color IS NOT NULL AND v.color <> ''
               ORDER BY v.color"""
        )
        years = await db.query(
            """SELECT DISTINCT v.year_of_manufacture FROM cars.vehicles v
               WHERE v.year_of_manufacture IS NOT NULL
               ORDER BY v.year_of_manufacture DESC"""
        )
        return {
            "makes_models": [{"make": r["make"], "model": r["model"]} for r in makes_models],
            "colors": [r["color"] for r in colors],
            "years": [r["year_of_manufacture"] for r in years],
        }

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def insert(self, db: Executor, data: VehicleCreate) -> Vehicle:
        values = [getattr(data, c) for c in _WRITABLE]
        placeholders = ", ".join(f"${i}" for i in range(1, len(_WRITABLE) + 1))
        row = await db.query_row(
            f"""INSERT INTO cars.vehicles ({", ".join(_WRITABLE)})
                VALUES ({placeholders})
                RETURNING {_RETURNING_VEHICLE}""",
            *values,
        )
        return Vehicle.model_validate(row)

    async def update(self, db: Executor, vehicle_id: int, data: VehicleUpdate) -> int:
        assignments = ",\n                ".join(
            f"{c} = COALESCE(${i}, {c})" for i, c in enumerate(_WRITABLE, start=2)
        )
        return await db.exec(
            f"""UPDATE cars.vehicles
            SET {assignments},
                updated_at = CURRENT_TIMESTAMP
            WHERE id = $1""",
            vehicle_id,
            *[getattr(data, c) for c in _WRITABLE],
        )

    async def set_featured(self, db: Executor, vehicle_id: int, is_featured: bool) -> int:
        return await db.exec(
            """UPDATE cars.vehicles
               SET is_featured = $2,
                   featured_at = CASE WHEN $2 THEN CURRENT_TIMESTAMP ELSE NULL END,
                   updated_at = CURRENT_TIMESTAMP
               WHERE id = $1""",
            vehicle_id,
            is_featured,
        )

    async def delete(self, db: Executor, vehicle_id: int) -> int:
        return await db.exec("DELETE FROM cars.vehicles WHERE id = $1", vehicle_id)
