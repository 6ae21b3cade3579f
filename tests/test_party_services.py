import pytest

from app.core.exceptions import BadRequestError, ConflictError, NotFoundError
from app.core.pagination import PaginationParams
from app.db.executor import DuplicateKeyError
from app.schemas.party import CustomerCreate, SupplierCreate
from app.services.party import CustomerService, SupplierService

from conftest import customer_row


@pytest.fixture
def customers(db, actor, notifier):
    return CustomerService(db, actor, notifier=notifier)


@pytest.fixture
def suppliers(db, actor, notifier):
    return SupplierService(db, actor, notifier=notifier)


async def test_create_customer_publishes_notification(customers, db, notifier):
    db.on("INSERT INTO cars.customers", rows=[customer_row(7)])

    customer = await customers.create_customer(
        CustomerCreate(customer_name="  Nimal Perera ", customer_type="INDIVIDUAL")
    )

    assert customer.id == 7
    (_, args), = db.statements("INSERT INTO cars.customers")
    assert "Nimal Perera" in args
    request, = notifier.published
    assert request.notification_type == "customer_created"
    assert request.reference_id == "CUST-7"
    assert request.payload["message"] == (
        "New customer 'Nimal Perera' (INDIVIDUAL) has been created in the system"
    )


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"customer_name": "", "customer_type": "INDIVIDUAL"}, "Customer name is required"),
        ({"customer_name": "A"}, "Customer type is required"),
        ({"customer_name": "A", "customer_type": "GOVERNMENT"},
         "Invalid customer type. Must be INDIVIDUAL or BUSINESS"),
    ],
)
async def test_create_customer_validation(customers, db, payload, message):
    with pytest.raises(BadRequestError) as exc:
        await customers.create_customer(CustomerCreate(**payload))
    assert exc.value.message == message
    assert db.calls == []


async def test_duplicate_customer_is_a_conflict(customers, db, notifier):
    db.fail_on = "INSERT INTO cars.customers"
    db.fail_with = DuplicateKeyError("duplicate key value violates unique constraint")

    with pytest.raises(ConflictError) as exc:
        await customers.create_customer(CustomerCreate(customer_name="A", customer_type="BUSINESS"))

    assert exc.value.status_code == 409
    assert notifier.published == []


async def test_delete_customer_is_soft(customers, db, notifier):
    db.on("FROM cars.customers WHERE id", rows=[customer_row(7)])

    await customers.delete_customer(7)

    (sql, args), = db.statements("UPDATE cars.customers")
    assert "is_active = false" in sql
    assert args == (7,)
    assert db.statements("DELETE") == []
    assert notifier.published[0].notification_type == "customer_deleted"
    assert notifier.published[0].priority == "high"


async def test_list_customers_filters_and_counts(customers, db):
    db.on("SELECT COUNT(*) AS total FROM cars.customers", rows=[{"total": 1}])
    db.on("FROM cars.customers", rows=[customer_row(7)])

    items, total = await customers.list_customers(
        PaginationParams(page=2, limit=5), customer_type="INDIVIDUAL", active_only=True
    )

    assert total == 1
    assert [c.id for c in items] == [7]
    list_sql, list_args = db.calls[0]
    assert "customer_type = $1 AND is_active = $2" in list_sql
    assert list_args == ("INDIVIDUAL", True, 5, 5)


async def test_search_requires_term(customers):
    with pytest.raises(BadRequestError):
        await customers.search_customers("   ")


async def test_missing_customer(customers):
    with pytest.raises(NotFoundError):
        await customers.get_customer(1)


async def test_supplier_country_defaults_to_japan(suppliers, db, notifier):
    db.on(
        "INSERT INTO cars.suppliers",
        rows=[{"id": 4, "supplier_name": "USS Tokyo", "supplier_type": "AUCTION", "country": "Japan"}],
    )

    supplier = await suppliers.create_supplier(SupplierCreate(supplier_name="USS Tokyo", supplier_type="AUCTION"))

    assert supplier.country == "Japan"
    (_, args), = db.statements("INSERT INTO cars.suppliers")
    assert "Japan" in args
    assert notifier.published[0].reference_id == "SUP-4"


async def test_supplier_type_is_validated(suppliers):
    with pytest.raises(BadRequestError) as exc:
        await suppliers.create_supplier(SupplierCreate(supplier_name="X", supplier_type="BROKER"))
    assert exc.value.message == "Invalid supplier type. Must be AUCTION, DEALER, or INDIVIDUAL"
