from __future__ import annotations

from app.db.executor import Executor
from app.domain.enums import DEFAULT_SALE_STATUS
from app.domain.vehicle import VehicleSales
from app.filters.base import Filter
from app.repositories.vehicle import SALES_COLUMNS
from app.schemas.vehicle import SalesUpdate

_SELECT = ", ".join(SALES_COLUMNS)


class VehicleSalesRepository:

    async def insert_default(self, db: Executor, vehicle_id: int) -> int:
        return await db.exec(
            "INSERT INTO cars.vehicle_sales (vehicle_id, sale_status) VALUES ($1, $2)",
            vehicle_id,
            DEFAULT_SALE_STATUS,
        )

    async def get_by_vehicle_id(self, db: Executor, vehicle_id: int) -> VehicleSales | None:
        row = await db.query_row(
            f"SELECT {_SELECT} FROM cars.vehicle_sales WHERE vehicle_id = $1",
            vehicle_id,
        )
        return VehicleSales.from_row(row)

    async def update(self, db: Executor, vehicle_id: int, data: SalesUpdate) -> int:
        return await db.exec(
            """UPDATE cars.vehicle_sales
               SET customer_id = $2,
                   sold_date = $3,
                   revenue = $4,
                   profit = $5,
                   sold_to_name = $6,
                   sold_to_title = $7,
                   contact_number = $8,
                   customer_address = $9,
                   other_contacts = $10,
                   sale_remarks = $11,
                   sale_status = $12,
                   updated_at = CURRENT_TIMESTAMP
               WHERE vehicle_id = $1""",
            vehicle_id,
            data.customer_id,
            data.sold_date,
            data.revenue,
            data.profit,
            data.sold_to_name,
            data.sold_to_title,
            data.contact_number,
            data.customer_address,
            data.other_contacts,
            data.sale_remarks,
            data.sale_status,
        )

    async def assign_customer(self, db: Executor, vehicle_id: int, customer_id: int) -> int:
        return await db.exec(
            """UPDATE cars.vehicle_sales
               SET customer_id = $2, updated_at = CURRENT_TIMESTAMP
               WHERE vehicle_id = $1""",
            vehicle_id,
            customer_id,
        )

    async def remove_customer(self, db: Executor, vehicle_id: int) -> int:
        return await db.exec(
            """UPDATE cars.vehicle_sales
               SET customer_id = NULL, updated_at = CURRENT_TIMESTAMP
               WHERE vehicle_id = $1""",
            vehicle_id,
        )

    async def get_status_count(self, db: Executor, filter: Filter) -> dict[str, int]:
        sql, args = filter.get_query_for_count(
            """SELECT vsl.sale_status AS status, COUNT(*) AS vehicle_count
               FROM cars.vehicle_sales vsl""",
            group_by="vsl.sale_status",
        )
        rows = await db.query(sql, *args)
        return {r["status"]: int(r["vehicle_count"]) for r in rows}

    async def delete_by_vehicle_id(self, db: Executor, vehicle_id: int) -> int:
        return await db.exec("DELETE FROM cars.vehicle_sales WHERE vehicle_id = $1", vehicle_id)
