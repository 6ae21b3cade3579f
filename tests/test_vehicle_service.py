import pytest

from app.core.exceptions import BadRequestError, NotFoundError
from app.core.security import Principal
from app.schemas.vehicle import (
    FinancialsUpdate,
    PurchaseUpdate,
    SalesUpdate,
    ShippingUpdate,
    VehicleCreate,
    VehicleUpdate,
)
from app.services.vehicle import IncomingFile, VehicleService, visible_siblings

from conftest import FakeStorage, customer_row, vehicle_row

VEHICLE_BY_ID = "FROM cars.vehicles v WHERE v.id"
SHIPPING_ROW = "FROM cars.vehicle_shipping WHERE vehicle_id"
PURCHASE_ROW = "FROM cars.vehicle_purchases WHERE vehicle_id"
SALES_ROW = "FROM cars.vehicle_sales WHERE vehicle_id"
CUSTOMER_BY_ID = "FROM cars.customers WHERE id"
SUPPLIER_BY_ID = "FROM cars.suppliers WHERE id"


@pytest.fixture
def service(db, actor, notifier, mailer, store):
    return VehicleService(db, actor, notifier=notifier, mailer=mailer, store=store)


# ---------------------------------------------------------------------------
# Create / delete
# ---------------------------------------------------------------------------

async def test_create_vehicle_inserts_vehicle_and_siblings_in_one_transaction(service, db, notifier):
    db.on("INSERT INTO cars.vehicles (", rows=[vehicle_row(5)])

    vehicle = await service.create_vehicle(
        VehicleCreate(make="Toyota", model="Prius", chassis_id="ZVW30-00005", currency="JPY")
    )

    assert vehicle.id == 5
    assert db.events == ["begin", "commit"]
    for table in ("vehicle_shipping", "vehicle_financials", "vehicle_sales", "vehicle_purchases"):
        (sql, args), = db.statements(f"INSERT INTO cars.{table}")
        assert args[0] == 5
    assert db.statements("INSERT INTO cars.vehicle_shipping (")[0][1] == (5, "PROCESSING")
    assert db.statements("INSERT INTO cars.vehicle_sales (")[0][1] == (5, "AVAILABLE")
    assert db.statements("INSERT INTO cars.vehicle_purchases (")[0][1] == (5, "LC_PENDING")
    assert notifier.types() == ["vehicle_created"]
    assert notifier.published[0].reference_id == "VEH-5"


async def test_create_vehicle_rolls_back_when_a_sibling_insert_fails(service, db, notifier):
    db.on("INSERT INTO cars.vehicles (", rows=[vehicle_row(5)])
    db.fail_on = "INSERT INTO cars.vehicle_sales"

    with pytest.raises(RuntimeError):
        await service.create_vehicle(VehicleCreate(make="Toyota", model="Prius", chassis_id="C1"))

    assert db.events == ["begin", "rollback"]
    assert notifier.published == []


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"make": " ", "model": "Prius", "chassis_id": "C1"}, "Missing required fields"),
        ({"make": "Toyota", "model": "Prius", "chassis_id": "C1", "condition_status": "NEW"}, "Invalid condition status"),
        ({"make": "Toyota", "model": "Prius", "chassis_id": "C1", "currency": "BTC"}, "Invalid currency"),
    ],
)
async def test_create_vehicle_validation(service, db, payload, message):
    with pytest.raises(BadRequestError) as exc:
        await service.create_vehicle(VehicleCreate(**payload))
    assert exc.value.message == message
    assert db.calls == []


@pytest.mark.parametrize(
    "update, message",
    [
        (lambda s: s.update_sales(1, SalesUpdate(sale_status="GONE")), "Invalid sale status"),
        (lambda s: s.update_vehicle(1, VehicleUpdate(currency="BTC")), "Invalid currency"),
        (lambda s: s.update_vehicle(1, VehicleUpdate(condition_status="NEW")), "Invalid condition status"),
    ],
)
async def test_disallowed_enum_on_update_writes_nothing(service, db, update, message):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(1)])

    with pytest.raises(BadRequestError) as exc:
        await update(service)

    assert exc.value.message == message
    assert db.statements("UPDATE") == []


async def test_delete_vehicle_removes_dependents_but_keeps_history(service, db, notifier):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(3)])

    await service.delete_vehicle(3)

    assert db.events == ["begin", "commit"]
    deleted = [sql for sql, _ in db.calls if sql.startswith("DELETE")]
    assert deleted[-1] == "DELETE FROM cars.vehicles WHERE id = $1"
    assert len(deleted) == 8
    assert not any("history" in sql for sql in deleted)
    assert notifier.types() == ["vehicle_deleted"]
    assert notifier.published[0].priority == "high"


async def test_missing_vehicle_is_not_found(service):
    with pytest.raises(NotFoundError):
        await service.get_vehicle(404)


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------

async def test_shipping_update_appends_history_and_notifies_customer(service, db, notifier, mailer):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(1)])
    db.on(SHIPPING_ROW, rows=[{"vehicle_id": 1, "shipping_status": "PROCESSING"}])
    db.on("INSERT INTO cars.vehicle_shipping_history", rows=[{"id": 11}])
    db.on(SALES_ROW, rows=[{"vehicle_id": 1, "sale_status": "RESERVED", "customer_id": 7}])
    db.on(CUSTOMER_BY_ID, rows=[customer_row(7)])

    await service.update_shipping(1, ShippingUpdate(shipping_status="SHIPPED", vessel_name="Morning Cara"))

    assert db.events == ["begin", "commit"]
    (_, args), = db.statements("INSERT INTO cars.vehicle_shipping_history")
    assert args[:4] == (1, "PROCESSING", "SHIPPED", "user-1")
    assert "Morning Cara" in args

    request, = notifier.published
    assert request.notification_type == "shipping_status"
    assert request.priority == "high"
    assert request.payload["email"] == "nimal@example.com"
    assert request.metadata["event"] == "shipping_status_update"

    email, = mailer.shipping
    assert email.to_email == "nimal@example.com"
    assert (email.old_status, email.new_status) == ("PROCESSING", "SHIPPED")


async def test_shipping_update_without_customer_skips_email(service, db, notifier, mailer):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(1)])
    db.on(SHIPPING_ROW, rows=[{"vehicle_id": 1, "shipping_status": "SHIPPED"}])
    db.on("INSERT INTO cars.vehicle_shipping_history", rows=[{"id": 12}])
    db.on(SALES_ROW, rows=[{"vehicle_id": 1, "sale_status": "AVAILABLE"}])

    await service.update_shipping(1, ShippingUpdate(shipping_status="DELIVERED"))

    assert notifier.published[0].priority == "urgent"
    assert "email" not in notifier.published[0].payload
    assert mailer.shipping == []


async def test_shipping_update_rolls_back_when_history_insert_fails(service, db, notifier):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(1)])
    db.on(SHIPPING_ROW, rows=[{"vehicle_id": 1, "shipping_status": "PROCESSING"}])
    db.fail_on = "INSERT INTO cars.vehicle_shipping_history"

    with pytest.raises(RuntimeError):
        await service.update_shipping(1, ShippingUpdate(shipping_status="SHIPPED"))

    assert db.events == ["begin", "rollback"]
    assert notifier.published == []


async def test_transition_reads_current_status_under_lock(service, db):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(1)])
    db.on(SHIPPING_ROW, rows=[{"vehicle_id": 1, "shipping_status": "ARRIVED"}])
    db.on(PURCHASE_ROW, rows=[{"vehicle_id": 1, "purchase_status": "LC_OPENED"}])
    db.on("INSERT INTO cars.vehicle_shipping_history", rows=[{"id": 1}])
    db.on("INSERT INTO cars.vehicle_purchase_history", rows=[{"id": 2}])

    await service.update_shipping(1, ShippingUpdate(shipping_status="CLEARED"))
    await service.update_purchase(1, PurchaseUpdate(purchase_status="PAYMENT_COMPLETED"))

    statements = [sql for sql, _ in db.calls]
    for table in ("vehicle_shipping", "vehicle_purchases"):
        locked = next(i for i, sql in enumerate(statements) if sql.endswith("FOR UPDATE") and f"cars.{table} " in sql)
        assert statements[locked + 1].startswith(f"UPDATE cars.{table}")
    assert db.events == ["begin", "commit", "begin", "commit"]


async def test_missing_shipping_row_rolls_back(service, db):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(1)])

    with pytest.raises(NotFoundError):
        await service.update_shipping(1, ShippingUpdate(shipping_status="SHIPPED"))

    assert db.events == ["begin", "rollback"]
    assert db.statements("UPDATE") == []


@pytest.mark.parametrize(
    "status, message",
    [("", "Shipping status is required"), ("LOST", "Invalid shipping status")],
)
async def test_shipping_update_validation(service, db, status, message):
    with pytest.raises(BadRequestError) as exc:
        await service.update_shipping(1, ShippingUpdate(shipping_status=status))
    assert exc.value.message == message
    assert db.calls == []


async def test_purchase_update_with_status_writes_history(service, db, notifier):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(2)])
    db.on(SUPPLIER_BY_ID, rows=[{"id": 4, "supplier_name": "USS Tokyo", "supplier_type": "AUCTION"}])
    db.on(PURCHASE_ROW, rows=[{"vehicle_id": 2, "purchase_status": "LC_PENDING"}])
    db.on("INSERT INTO cars.vehicle_purchase_history", rows=[{"id": 30}])

    await service.update_purchase(2, PurchaseUpdate(purchase_status="LC_OPENED", supplier_id=4, lc_bank="BOC"))

    (_, args), = db.statements("INSERT INTO cars.vehicle_purchase_history")
    assert args[:3] == (2, "LC_PENDING", "LC_OPENED")
    assert 4 in args and "BOC" in args
    request, = notifier.published
    assert request.notification_type == "purchase_status"
    assert request.payload["supplier_name"] == "USS Tokyo"


async def test_purchase_update_without_status_writes_no_history(service, db, notifier):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(2)])
    db.on(PURCHASE_ROW, rows=[{"vehicle_id": 2, "purchase_status": "LC_OPENED"}])

    await service.update_purchase(2, PurchaseUpdate(lc_number="LC-1"))

    assert db.statements("vehicle_purchase_history") == []
    assert db.statements("UPDATE cars.vehicle_purchases")
    assert notifier.published == []


async def test_purchase_update_rejects_unknown_supplier(service, db):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(2)])
    with pytest.raises(BadRequestError) as exc:
        await service.update_purchase(2, PurchaseUpdate(supplier_id=99))
    assert exc.value.message == "Invalid supplier ID"


# ---------------------------------------------------------------------------
# Financials and sales
# ---------------------------------------------------------------------------

async def test_financial_total_is_computed_when_not_given(service, db):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(1)])

    await service.update_financials(
        1,
        FinancialsUpdate(charges_lkr=100, tt_lkr=200, duty_lkr=300, clearing_lkr=50,
                         other_expenses_lkr={"transport": 25}),
    )

    (_, args), = db.statements("UPDATE cars.vehicle_financials")
    assert args[5] == '{"transport": 25.0}'
    assert args[6] == 675


async def test_negative_financial_amount_is_rejected(service):
    with pytest.raises(BadRequestError) as exc:
        await service.update_financials(1, FinancialsUpdate(duty_lkr=-1))
    assert exc.value.message == "Financial amounts cannot be negative"


async def test_sold_requires_customer_name_and_revenue(service):
    with pytest.raises(BadRequestError) as exc:
        await service.update_sales(1, SalesUpdate(sale_status="SOLD", revenue=10))
    assert exc.value.message == "Customer name is required when status is SOLD"

    with pytest.raises(BadRequestError) as exc:
        await service.update_sales(1, SalesUpdate(sale_status="SOLD", sold_to_name="Kamal"))
    assert exc.value.message == "Revenue is required when status is SOLD"


async def test_sold_defaults_sold_date(service, db):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(1)])

    await service.update_sales(1, SalesUpdate(sale_status="SOLD", sold_to_name="Kamal", revenue=5000000))

    (_, args), = db.statements("UPDATE cars.vehicle_sales")
    assert any(getattr(a, "tzinfo", None) is not None for a in args)


# ---------------------------------------------------------------------------
# Images and documents
# ---------------------------------------------------------------------------

async def test_partial_image_upload_reports_errors(db, actor, notifier, mailer):
    store = FakeStorage(fail={"b.jpg"})
    service = VehicleService(db, actor, notifier=notifier, mailer=mailer, store=store)
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(1)])
    db.on("MAX(display_order)", rows=[{"max_order": 2}])
    db.on(
        "INSERT INTO cars.vehicle_images",
        rows=[{
            "id": 50, "vehicle_id": 1, "filename": "obj1_a.jpg", "original_name": "a.jpg",
            "file_path": "vehicles/1/images/obj1_a.jpg", "file_size": 3, "mime_type": "image/jpeg",
            "is_primary": True, "display_order": 3,
        }],
    )

    result = await service.upload_images(
        1,
        [
            IncomingFile("a.jpg", "image/jpeg", b"abc"),
            IncomingFile("b.jpg", "image/jpeg", b"def"),
            IncomingFile("c.txt", "text/plain", b"ghi"),
        ],
    )

    assert result.total_uploaded == 1
    assert result.total_files == 3
    assert result.partial_success is True
    assert len(result.errors) == 2
    (_, args), = db.statements("INSERT INTO cars.vehicle_images")
    assert args[6] is True  # first stored image is primary
    assert args[7] == 3
    assert db.statements("SET is_primary = true")


async def test_upload_without_files_is_rejected(service):
    with pytest.raises(BadRequestError):
        await service.upload_images(1, [])


async def test_documents_pair_type_and_name_by_position(service, db):
    db.on(VEHICLE_BY_ID, rows=[vehicle_row(1)])
    db.on(
        "INSERT INTO cars.vehicle_documents",
        rows=[{"id": 1, "vehicle_id": 1, "document_type": "INVOICE", "document_name": "Invoice",
               "file_path": "vehicles/1/documents/x.pdf"}],
    )

    stored, errors = await service.upload_documents(
        1,
        [IncomingFile("inv.pdf", "application/pdf", b"%PDF"), IncomingFile("other.pdf", "application/pdf", b"%PDF")],
        ["INVOICE"],
        ["Invoice"],
    )

    assert errors == []
    assert len(stored) == 2
    first, second = [args for _, args in db.statements("INSERT INTO cars.vehicle_documents")]
    assert first[1:3] == ("INVOICE", "Invoice")
    assert second[1:3] == ("OTHER", "other.pdf")


async def test_document_url_requires_stored_object(service, db):
    db.on(
        "FROM cars.vehicle_documents WHERE id",
        rows=[{"id": 9, "vehicle_id": 1, "document_type": "OTHER", "document_name": "x",
               "file_path": "vehicles/1/documents/missing.pdf"}],
    )
    with pytest.raises(NotFoundError):
        await service.document_url(9)


# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------

def test_visible_siblings_follow_permissions():
    assert visible_siblings(None) == ("vs", "vf", "vsl", "vp")
    limited = Principal(user_id="u", permissions=frozenset({"vehicle.access", "shipping.access"}))
    assert visible_siblings(limited) == ("vs",)


async def test_featured_limit_is_clamped(service, db):
    await service.get_featured(500)
    await service.get_featured(0)
    limits = [args[0] for _, args in db.statements("WHERE v.is_featured = true")]
    assert limits == [50, 10]
