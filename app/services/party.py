"""Customer and supplier services.

Both follow the same flow: validate required fields and the type enum, insert,
then publish a notification after the row exists. Deletes are soft.
"""


import logging

from app.core.exceptions import BadRequestError, ConflictError, NotFoundError
from app.core.log import with_fields
from app.core.pagination import PaginationParams
from app.core.security import Principal
from app.db.executor import DuplicateKeyError, Executor
from app.domain.enums import CUSTOMER_TYPES, DEFAULT_SUPPLIER_COUNTRY, SUPPLIER_TYPES
from app.domain.party import Customer, Supplier
from app.repositories.party import CustomerRepository, SupplierRepository
from app.schemas.party import CustomerCreate, CustomerUpdate, SupplierCreate, SupplierUpdate
from app.services import notifications
from app.services.notifications import NotificationService, notification_service

logger = logging.getLogger(__name__)


class CustomerService:
    def __init__(self, db: Executor, actor: Principal | None = None, notifier: NotificationService | None = None):
        self._db = db
        self._actor = actor
        self._notifier = notifier or notification_service
        self._repo = CustomerRepository()

    async def create_customer(self, data: CustomerCreate) -> Customer:
        if not data.customer_name.strip():
            raise BadRequestError("Customer name is required")
        if not data.customer_type:
            raise BadRequestError("Customer type is required")
        if data.customer_type not in CUSTOMER_TYPES:
            raise BadRequestError("Invalid customer type. Must be INDIVIDUAL or BUSINESS")

        try:
            customer = await self._repo.insert(self._db, data, customer_name=data.customer_name.strip())
        except DuplicateKeyError as exc:
            raise ConflictError("Customer with this information already exists") from exc

        user_id = self._actor.user_id if self._actor else ""
        with_fields(logger, customer_id=customer.id, user_id=user_id).info("Customer created")
        self._notifier.publish(
            notifications.customer_created(customer, user_id),
            self._actor.authorization if self._actor else "",
        )
        return customer

    async def list_customers(
        self,
        pagination: PaginationParams,
        customer_type: str | None = None,
        active_only: bool = False,
        search: str | None = None,
    ) -> tuple[list[Customer], int]:
        if customer_type and customer_type not in CUSTOMER_TYPES:
            raise BadRequestError("Invalid customer type. Must be INDIVIDUAL or BUSINESS")
        items = await self._repo.get_all(
            self._db, customer_type, active_only, search,
            limit=pagination.limit, offset=pagination.offset,
        )
        total = await self._repo.count(self._db, customer_type, active_only, search)
        return items, total

    async def get_customer(self, customer_id: int) -> Customer:
        customer = await self._repo.get_by_id(self._db, customer_id)
        if not customer:
            raise NotFoundError("Customer", customer_id)
        return customer

    async def update_customer(self, customer_id: int, data: CustomerUpdate) -> None:
        if data.customer_type is not None and data.customer_type not in CUSTOMER_TYPES:
            raise BadRequestError("Invalid customer type. Must be INDIVIDUAL or BUSINESS")
        await self.get_customer(customer_id)
        try:
            await self._repo.update(self._db, customer_id, data)
        except DuplicateKeyError as exc:
            raise ConflictError("Customer with this information already exists") from exc

    async def delete_customer(self, customer_id: int) -> None:
        customer = await self.get_customer(customer_id)
        await self._repo.soft_delete(self._db, customer_id)

        user_id = self._actor.user_id if self._actor else ""
        with_fields(logger, customer_id=customer_id, user_id=user_id).info("Customer deleted")
        self._notifier.publish(
            notifications.customer_deleted(customer, user_id),
            self._actor.authorization if self._actor else "",
        )

    async def search_customers(self, term: str) -> list[Customer]:
        if not term.strip():
            raise BadRequestError("Search term is required")
        return await self._repo.search(self._db, term.strip())


class SupplierService:
    def __init__(self, db: Executor, actor: Principal | None = None, notifier: NotificationService | None = None):
        self._db = db
        self._actor = actor
        self._notifier = notifier or notification_service
        self._repo = SupplierRepository()

    async def create_supplier(self, data: SupplierCreate) -> Supplier:
        if not data.supplier_name.strip():
            raise BadRequestError("Supplier name is required")
        if not data.supplier_type:
            raise BadRequestError("Supplier type is required")
        if data.supplier_type not in SUPPLIER_TYPES:
            raise BadRequestError("Invalid supplier type. Must be AUCTION, DEALER, or INDIVIDUAL")

        try:
            supplier = await self._repo.insert(
                self._db,
                data,
                supplier_name=data.supplier_name.strip(),
                country=data.country or DEFAULT_SUPPLIER_COUNTRY,
            )
        except DuplicateKeyError as exc:
            raise ConflictError("Supplier with this information already exists") from exc

        user_id = self._actor.user_id if self._actor else ""
        with_fields(logger, supplier_id=supplier.id, user_id=user_id).info("Supplier created")
        self._notifier.publish(
            notifications.supplier_created(supplier, user_id),
            self._actor.authorization if self._actor else "",
        )
        return supplier

    async def list_suppliers(
        self,
        pagination: PaginationParams,
        supplier_type: str | None = None,
        active_only: bool = False,
        search: str | None = None,
    ) -> tuple[list[Supplier], int]:
        if supplier_type and supplier_type not in SUPPLIER_TYPES:
            raise BadRequestError("Invalid supplier type. Must be AUCTION, DEALER, or INDIVIDUAL")
        items = await self._repo.get_all(
            self._db, supplier_type, active_only, search,
            limit=pagination.limit, offset=pagination.offset,
        )
        total = await self._repo.count(self._db, supplier_type, active_only, search)
        return items, total

    async def get_supplier(self, supplier_id: int) -> Supplier:
        supplier = await self._repo.get_by_id(self._db, supplier_id)
        if not supplier:
            raise NotFoundError("Supplier", supplier_id)
        return supplier

    async def update_supplier(self, supplier_id: int, data: SupplierUpdate) -> None:
        if data.supplier_type is not None and data.supplier_type not in SUPPLIER_TYPES:
            raise BadRequestError("Invalid supplier type. Must be AUCTION, DEALER, or INDIVIDUAL")
        await self.get_supplier(supplier_id)
        try:
            await self._repo.update(self._db, supplier_id, data)
        except DuplicateKeyError as exc:
            raise ConflictError("Supplier with this information already exists") from exc

    async def delete_supplier(self, supplier_id: int) -> None:
        await self.get_supplier(supplier_id)
        await self._repo.soft_delete(self._db, supplier_id)
        with_fields(logger, supplier_id=supplier_id).info("Supplier deleted")

    async def search_suppliers(self, term: str) -> list[Supplier]:
        if not term.strip():
            raise BadRequestError("Search term is required")
        return await self._repo.search(self._db, term.strip())
