"""Customer order intake.

Submitting an order upserts the customer by contact number and inserts the
order in one transaction. The order number is ``ORD-<unix>-<customer id>``.
"""


import json
import logging
import time
from datetime import datetime

from app.core.exceptions import BadRequestError, NotFoundError
from app.core.log import with_fields
from app.core.pagination import PaginationParams
from app.db.executor import TransactionalExecutor
from app.domain.enums import ORDER_STATUSES
from app.domain.order import CustomerOrder
from app.repositories.order import CustomerOrderRepository
from app.repositories.party import CustomerRepository
from app.schemas.order import OrderCreate
from app.schemas.party import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)

ORDER_CUSTOMER_TYPE = "INDIVIDUAL"


class OrderService:
    def __init__(self, db: TransactionalExecutor):
        self._db = db
        self._orders = CustomerOrderRepository()
        self._customers = CustomerRepository()

    async def create_order(self, data: OrderCreate) -> CustomerOrder:
        required = (data.customer_name, data.contact_number, data.preferred_make, data.preferred_model)
        if not all(v.strip() for v in required):
            raise BadRequestError("Missing required fields")
        expected_delivery = _parse_day(data.expected_delivery, "expected_delivery")

        async with self._db.transaction() as tx:
            customer = await self._customers.get_by_contact_number(tx, data.contact_number)
            if customer:
                await self._customers.update(
                    tx,
                    customer.id,
                    CustomerUpdate(
                        customer_title=data.customer_title,
                        email=data.email,
                        address=data.address,
                    ),
                )
                customer_id = customer.id
            else:
                created = await self._customers.insert(
                    tx,
                    CustomerCreate(
                        customer_title=data.customer_title,
                        customer_name=data.customer_name.strip(),
                        contact_number=data.contact_number,
                        email=data.email,
                        address=data.address,
                        customer_type=ORDER_CUSTOMER_TYPE,
                    ),
                )
                customer_id = created.id

            order_id = await self._orders.insert(
                tx,
                {
                    "order_number": f"ORD-{int(time.time())}-{customer_id}",
                    "customer_id": customer_id,
                    "preferred_make": data.preferred_make,
                    "preferred_model": data.preferred_model,
                    "preferred_year_min": data.preferred_year,
                    "preferred_year_max": data.preferred_year,
                    "preferred_color": data.preferred_color,
                    "preferred_trim_level": data.trim_level,
                    "max_mileage_km": data.max_mileage,
                    "min_auction_grade": data.min_auction_grade,
                    "required_features": json.dumps(data.required_features),
                    "order_type": data.order_type,
                    "expected_delivery_date": expected_delivery,
                    "priority_level": data.priority,
                    "preferred_port": data.preferred_port,
                    "shipping_method": data.shipping_method,
                    "include_insurance": data.include_insurance,
                    "budget_min": data.budget_min,
                    "budget_max": data.budget_max,
                    "payment_method": data.payment_method,
                    "down_payment": data.down_payment,
                    "special_requests": data.special_requests,
                    "internal_notes": data.internal_notes,
                    "order_status": "DRAFT" if data.is_draft else "SUBMITTED",
                    "is_draft": data.is_draft,
                },
            )

        with_fields(logger, order_id=order_id, customer_id=customer_id).info("Order created")
        return await self.get_order(order_id)

    async def get_order(self, order_id: int) -> CustomerOrder:
        order = await self._orders.get_by_id(self._db, order_id)
        if not order:
            raise NotFoundError("Order", order_id)
        return order

    async def list_orders(self, pagination: PaginationParams) -> tuple[list[CustomerOrder], int]:
        items = await self._orders.get_all(self._db, pagination.limit, pagination.offset)
        total = await self._orders.count(self._db)
        return items, total

    async def update_status(self, order_id: int, status: str) -> None:
        if status not in ORDER_STATUSES:
            raise BadRequestError("Invalid order status")
        updated = await self._orders.update_status(
            self._db, order_id, status, completed=status == "COMPLETED"
        )
        if not updated:
            raise NotFoundError("Order", order_id)


def _parse_day(value: str | None, name: str) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise BadRequestError(f"Invalid {name}: expected YYYY-MM-DD") from None
