from __future__ import annotations

from app.db.executor import Executor
from app.domain.enums import DEFAULT_PURCHASE_STATUS
from app.domain.vehicle import VehiclePurchase
from app.schemas.vehicle import PurchaseUpdate

_SELECT = f"""id, vehicle_id, supplier_id, bought_from_name, bought_from_title,
    bought_from_contact, bought_from_address, bought_from_other_contacts,
    purchase_remarks, lc_bank, lc_number, lc_cost_jpy, exchange_rate, purchase_date,
    COALESCE(purchase_status, '{DEFAULT_PURCHASE_STATUS}') AS purchase_status,
    created_at, updated_at"""

# COALESCE-updated: omitted fields keep their stored value
_UPDATABLE = (
    "supplier_id", "bought_from_name", "bought_from_title", "bought_from_contact",
    "bought_from_address", "bought_from_other_contacts", "purchase_remarks",
    "lc_bank", "lc_number", "lc_cost_jpy", "exchange_rate", "purchase_date",
    "purchase_status",
)


class VehiclePurchaseRepository:

    async def insert_default(self, db: Executor, vehicle_id: int) -> int:
        return await db.exec(
            "INSERT INTO cars.vehicle_purchases (vehicle_id, purchase_status) VALUES ($1, $2)",
            vehicle_id,
            DEFAULT_PURCHASE_STATUS,
        )

    async def get_by_vehicle_id(
        self, db: Executor, vehicle_id: int, for_update: bool = False
    ) -> VehiclePurchase | None:
        """``for_update`` locks the row until the enclosing transaction ends."""
        row = await db.query_row(
            f"SELECT {_SELECT} FROM cars.vehicle_purchases WHERE vehicle_id = $1"
            + (" FOR UPDATE" if for_update else ""),
            vehicle_id,
        )
        return VehiclePurchase.from_row(row)

    async def update(self, db: Executor, vehicle_id: int, data: PurchaseUpdate) -> int:
        assignments = ",\n                   ".join(
            f"{c} = COALESCE(${i}, {c})" for i, c in enumerate(_UPDATABLE, start=2)
        )
        return await db.exec(
            f"""UPDATE cars.vehicle_purchases
               SET {assignments},
                   updated_at = CURRENT_TIMESTAMP
               WHERE vehicle_id = $1""",
            vehicle_id,
            *[getattr(data, c) for c in _UPDATABLE],
        )

    async def delete_by_vehicle_id(self, db: Executor, vehicle_id: int) -> int:
        return await db.exec("DELETE FROM cars.vehicle_purchases WHERE vehicle_id = $1", vehicle_id)
