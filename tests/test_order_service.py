import json

import pytest

from app.core.exceptions import BadRequestError, NotFoundError
from app.schemas.order import OrderCreate
from app.services.order import OrderService

from conftest import customer_row

ORDER_ROW = {
    "id": 40,
    "order_number": "ORD-1700000000-12",
    "customer_id": 12,
    "order_status": "SUBMITTED",
    "required_features": '["sunroof"]',
}


def _order(**overrides):
    data = {
        "customer_name": "Sunil",
        "contact_number": "0719999999",
        "preferred_make": "Honda",
        "preferred_model": "Vezel",
        "required_features": ["sunroof"],
    }
    data.update(overrides)
    return OrderCreate(**data)


async def test_order_for_new_customer_creates_customer(db):
    db.on("WHERE contact_number = $1", rows=[])
    db.on("INSERT INTO cars.customers", rows=[customer_row(12, customer_name="Sunil")])
    db.on("INSERT INTO cars.customer_orders", rows=[{"id": 40}])
    db.on("FROM cars.customer_orders co", rows=[ORDER_ROW])

    order = await OrderService(db).create_order(_order(expected_delivery="2025-01-15"))

    assert order.id == 40
    assert order.required_features == ["sunroof"]
    assert db.events == ["begin", "commit"]
    (_, customer_args), = db.statements("INSERT INTO cars.customers")
    assert "INDIVIDUAL" in customer_args
    (_, args), = db.statements("INSERT INTO cars.customer_orders")
    assert args[0].startswith("ORD-") and args[0].endswith("-12")
    assert args[1] == 12
    assert json.loads(args[10]) == ["sunroof"]
    assert args[12].year == 2025
    assert args[23] == "SUBMITTED"


async def test_order_for_known_contact_updates_customer(db):
    db.on("WHERE contact_number = $1", rows=[customer_row(7)])
    db.on("INSERT INTO cars.customer_orders", rows=[{"id": 41}])
    db.on("FROM cars.customer_orders co", rows=[dict(ORDER_ROW, id=41, customer_id=7)])

    await OrderService(db).create_order(_order(email="sunil@example.com", is_draft=True))

    assert db.statements("INSERT INTO cars.customers") == []
    (_, update_args), = db.statements("UPDATE cars.customers")
    assert "sunil@example.com" in update_args
    (_, args), = db.statements("INSERT INTO cars.customer_orders")
    assert args[1] == 7
    assert args[23] == "DRAFT"


async def test_order_requires_fields(db):
    with pytest.raises(BadRequestError) as exc:
        await OrderService(db).create_order(_order(preferred_model=" "))
    assert exc.value.message == "Missing required fields"
    assert db.calls == []


async def test_order_rejects_malformed_delivery_date(db):
    with pytest.raises(BadRequestError):
        await OrderService(db).create_order(_order(expected_delivery="15/01/2025"))
    assert db.calls == []


async def test_update_status_validation_and_missing_order(db):
    with pytest.raises(BadRequestError):
        await OrderService(db).update_status(1, "SHIPPED")

    db.on("UPDATE cars.customer_orders", rowcount=0)
    with pytest.raises(NotFoundError):
        await OrderService(db).update_status(1, "COMPLETED")
