from __future__ import annotations

from app.db.executor import Executor
from app.domain.enums import DEFAULT_SHIPPING_STATUS
from app.domain.vehicle import VehicleShipping
from app.filters.base import Filter
from app.repositories.vehicle import SHIPPING_COLUMNS
from app.schemas.vehicle import ShippingUpdate

_SELECT = ", ".join(SHIPPING_COLUMNS)


class VehicleShippingRepository:

    async def insert_default(self, db: Executor, vehicle_id: int) -> int:
        return await db.exec(
            "INSERT INTO cars.vehicle_shipping (vehicle_id, shipping_status) VALUES ($1, $2)",
            vehicle_id,
            DEFAULT_SHIPPING_STATUS,
        )

    async def get_by_vehicle_id(
        self, db: Executor, vehicle_id: int, for_update: bool = False
    ) -> VehicleShipping | None:
        """``for_update`` locks the row until the enclosing transaction ends."""
        row = await db.query_row(
            f"SELECT {_SELECT} FROM cars.vehicle_shipping WHERE vehicle_id = $1"
            + (" FOR UPDATE" if for_update else ""),
            vehicle_id,
        )
        return VehicleShipping.from_row(row)

    async def update_shipping_status(self, db: Executor, vehicle_id: int, data: ShippingUpdate) -> int:
        """Overwrite every mutable shipping field; unset fields become NULL."""
        return await db.exec(
            """UPDATE cars.vehicle_shipping
               SET vessel_name = $2,
                   departure_harbour = $3,
                   shipment_date = $4,
                   arrival_date = $5,
                   clearing_date = $6,
                   shipping_status = $7,
                   updated_at = CURRENT_TIMESTAMP
               WHERE vehicle_id = $1""",
            vehicle_id,
            data.vessel_name,
            data.departure_harbour,
            data.shipment_date,
            data.arrival_date,
            data.clearing_date,
            data.shipping_status,
        )

    async def get_status_count(self, db: Executor, filter: Filter) -> dict[str, int]:
        sql, args = filter.get_query_for_count(
            """SELECT vs.shipping_status AS status, COUNT(*) AS vehicle_count
               FROM cars.vehicle_shipping vs""",
            group_by="vs.shipping_status",
        )
        rows = await db.query(sql, *args)
        return {r["status"]: int(r["vehicle_count"]) for r in rows}

    async def delete_by_vehicle_id(self, db: Executor, vehicle_id: int) -> int:
        return await db.exec("DELETE FROM cars.vehicle_shipping WHERE vehicle_id = $1", vehicle_id)
