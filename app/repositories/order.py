from __future__ import annotations

from typing import Any

from app.db.executor import Executor
from app.domain.order import CustomerOrder

_COLUMNS = (
    "id", "order_number", "customer_id", "preferred_make", "preferred_model",
    "preferred_year_min", "preferred_year_max", "preferred_color", "preferred_trim_level",
    "max_mileage_km", "min_auction_grade", "required_features", "order_type",
    "expected_delivery_date", "priority_level", "preferred_port", "shipping_method",
    "include_insurance", "budget_min", "budget_max", "payment_method", "down_payment",
    "special_requests", "internal_notes", "order_status", "is_draft", "order_date",
    "completed_date", "created_at", "updated_at",
)
_SELECT = ", ".join(f"co.{c}" for c in _COLUMNS)
_FROM = "FROM cars.customer_orders co LEFT JOIN cars.customers c ON c.id = co.customer_id"

# written by insert(), in placeholder order; order_date is NOW()
_INSERT_COLUMNS = _COLUMNS[1:26]


class CustomerOrderRepository:

    async def insert(self, db: Executor, values: dict[str, Any]) -> int:
        placeholders = ", ".join(f"${i}" for i in range(1, len(_INSERT_COLUMNS) + 1))
        row = await db.query_row(
            f"""INSERT INTO cars.customer_orders ({", ".join(_INSERT_COLUMNS)}, order_date)
                VALUES ({placeholders}, NOW())
                RETURNING id""",
            *[values.get(c) for c in _INSERT_COLUMNS],
        )
        return int(row["id"])

    async def get_by_id(self, db: Executor, order_id: int) -> CustomerOrder | None:
        row = await db.query_row(
            f"SELECT {_SELECT}, c.customer_name, c.contact_number {_FROM} WHERE co.id = $1",
            order_id,
        )
        return CustomerOrder.from_row(row)

    async def get_all(self, db: Executor, limit: int, offset: int) -> list[CustomerOrder]:
        rows = await db.query(
            f"""SELECT {_SELECT}, c.customer_name, c.contact_number {_FROM}
                ORDER BY co.created_at DESC, co.id DESC
                LIMIT $1 OFFSET $2""",
            limit,
            offset,
        )
        return CustomerOrder.from_rows(rows)

    async def count(self, db: Executor) -> int:
        row = await db.query_row("SELECT COUNT(*) AS total FROM cars.customer_orders")
        return int(row["total"]) if row else 0

    async def update_status(self, db: Executor, order_id: int, status: str, completed: bool = False) -> int:
        return await db.exec(
            """UPDATE cars.customer_orders
               SET order_status = $2,
                   completed_date = CASE WHEN $3 THEN CURRENT_TIMESTAMP ELSE completed_date END,
                   updated_at = CURRENT_TIMESTAMP
               WHERE id = $1""",
            order_id,
            status,
            completed,
        )
