"""Vehicle lifecycle service.

Owns the multi-row writes (creation with sibling rows, status transitions with
history rows, deletion) and the enum/precondition checks for every vehicle
mutation. Notifications and emails are published only after the transaction
has committed.

Rule: No SQLAlchemy / no FastAPI here. Pure Python business logic.
"""


import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from app.core import security
from app.core.exceptions import AppException, BadRequestError, NotFoundError
from app.core.log import with_fields
from app.core.pagination import PaginationParams
from app.core.security import Principal
from app.db.executor import TransactionalExecutor
from app.domain.enums import (
    CONDITION_STATUSES,
    CURRENCIES,
    DOCUMENT_TYPES,
    PURCHASE_STATUSES,
    SALE_STATUS_SOLD,
    SALE_STATUSES,
    SHIPPING_STATUSES,
)
from app.domain.history import StatusHistory
from app.domain.party import Customer
from app.domain.vehicle import Vehicle, VehicleComplete, VehicleDocument, VehicleImage
from app.filters.vehicle import VehicleFilter
from app.repositories.document import VehicleDocumentRepository
from app.repositories.financials import VehicleFinancialsRepository
from app.repositories.history import (
    RECENT_DEFAULT_LIMIT,
    PurchaseHistoryRepository,
    ShippingHistoryRepository,
)
from app.repositories.image import VehicleImageRepository
from app.repositories.party import CustomerRepository, SupplierRepository
from app.repositories.purchase import VehiclePurchaseRepository
from app.repositories.sales import VehicleSalesRepository
from app.repositories.share_token import VehicleShareTokenRepository
from app.repositories.shipping import VehicleShippingRepository
from app.repositories.vehicle import VehicleRepository
from app.schemas.vehicle import (
    DropdownOptions,
    FinancialsUpdate,
    ImageUploadResult,
    PresignedFile,
    PurchaseUpdate,
    SalesUpdate,
    ShippingUpdate,
    UploadedImage,
    VehicleCreate,
    VehicleUpdate,
)
from app.services import notifications
from app.services.email import (
    EmailService,
    PurchaseStatusEmail,
    ShippingStatusEmail,
    email_service,
)
from app.services.notifications import NotificationService, notification_service
from app.services.storage import ObjectStorage, storage

logger = logging.getLogger(__name__)

IMAGE_MIME_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
DOCUMENT_MIME_TYPES = (
    "application/pdf",
    "image/jpeg",
    "image/png",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
)

FEATURED_DEFAULT_LIMIT = 10
FEATURED_MAX_LIMIT = 50

# sibling alias → permission that makes it visible
_SIBLING_PERMISSIONS = (
    ("vs", security.SHIPPING_ACCESS),
    ("vf", security.FINANCIAL_ACCESS),
    ("vsl", security.SALES_ACCESS),
    ("vp", security.PURCHASE_ACCESS),
)


@dataclass
class IncomingFile:
    """An uploaded file already read into memory by the HTTP layer."""

    filename: str
    content_type: str
    data: bytes


def visible_siblings(actor: Principal | None) -> tuple[str, ...]:
    """Sibling aliases the caller may see; internal callers (no actor) see all."""
    if actor is None:
        return tuple(alias for alias, _ in _SIBLING_PERMISSIONS)
    return tuple(alias for alias, perm in _SIBLING_PERMISSIONS if actor.has(perm))


def _check_choice(value: str | None, allowed: tuple[str, ...], message: str) -> None:
    if value is not None and value not in allowed:
        raise BadRequestError(message)


class VehicleService:
    def __init__(
        self,
        db: TransactionalExecutor,
        actor: Principal | None = None,
        notifier: NotificationService | None = None,
        mailer: EmailService | None = None,
        store: ObjectStorage | None = None,
    ):
        self._db = db
        self._actor = actor
        self._notifier = notifier or notification_service
        self._mailer = mailer or email_service
        self._storage = store or storage

        self._vehicles = VehicleRepository()
        self._shipping = VehicleShippingRepository()
        self._financials = VehicleFinancialsRepository()
        self._sales = VehicleSalesRepository()
        self._purchases = VehiclePurchaseRepository()
        self._images = VehicleImageRepository()
        self._documents = VehicleDocumentRepository()
        self._share_tokens = VehicleShareTokenRepository()
        self._shipping_history = ShippingHistoryRepository()
        self._purchase_history = PurchaseHistoryRepository()
        self._customers = CustomerRepository()
        self._suppliers = SupplierRepository()

    @property
    def _user_id(self) -> str:
        return self._actor.user_id if self._actor else ""

    @property
    def _authorization(self) -> str:
        return self._actor.authorization if self._actor else ""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_vehicles(
        self, filter: VehicleFilter, pagination: PaginationParams
    ) -> tuple[list[VehicleComplete], int]:
        visible = visible_siblings(self._actor)
        items = await self._vehicles.get_all(
            self._db, pagination.limit, pagination.offset, filter, visible
        )
        total = await self._vehicles.count(self._db, filter)
        return items, total

    async def get_vehicle(self, vehicle_id: int) -> Vehicle:
        vehicle = await self._vehicles.get_by_id(self._db, vehicle_id)
        if not vehicle:
            raise NotFoundError("Vehicle", vehicle_id)
        return vehicle

    async def get_vehicle_complete(self, vehicle_id: int) -> VehicleComplete:
        vehicle = await self.get_vehicle(vehicle_id)
        visible = visible_siblings(self._actor)
        complete = VehicleComplete(vehicle=vehicle)
        if "vs" in visible:
            complete.shipping = await self._shipping.get_by_vehicle_id(self._db, vehicle_id)
        if "vf" in visible:
            complete.financials = await self._financials.get_by_vehicle_id(self._db, vehicle_id)
        if "vsl" in visible:
            complete.sales = await self._sales.get_by_vehicle_id(self._db, vehicle_id)
        if "vp" in visible:
            complete.purchase = await self._purchases.get_by_vehicle_id(self._db, vehicle_id)
        complete.images = await self._images.get_by_vehicle_id(self._db, vehicle_id)
        return complete

    async def get_dropdown_options(self) -> DropdownOptions:
        values = await self._vehicles.get_dropdown_values(self._db)
        return DropdownOptions(
            makes_models=values["makes_models"],
            colors=values["colors"],
            years=values["years"],
            shipping_statuses=list(SHIPPING_STATUSES),
            sale_statuses=list(SALE_STATUSES),
            condition_statuses=list(CONDITION_STATUSES),
            currencies=list(CURRENCIES),
            purchase_statuses=list(PURCHASE_STATUSES),
            document_types=list(DOCUMENT_TYPES),
        )

    async def get_featured(self, limit: int = FEATURED_DEFAULT_LIMIT) -> list[Vehicle]:
        if limit <= 0:
            limit = FEATURED_DEFAULT_LIMIT
        return await self._vehicles.get_featured(self._db, min(limit, FEATURED_MAX_LIMIT))

    # ------------------------------------------------------------------
    # Create / update / delete
    # ------------------------------------------------------------------

    async def create_vehicle(self, data: VehicleCreate) -> Vehicle:
        if not data.make.strip() or not data.model.strip() or not data.chassis_id.strip():
            raise BadRequestError("Missing required fields")
        _check_choice(data.condition_status, CONDITION_STATUSES, "Invalid condition status")
        _check_choice(data.currency, CURRENCIES, "Invalid currency")

        async with self._db.transaction() as tx:
            vehicle = await self._vehicles.insert(tx, data)
            await self._shipping.insert_default(tx, vehicle.id)
            await self._financials.insert_default(tx, vehicle.id)
            await self._sales.insert_default(tx, vehicle.id)
            await self._purchases.insert_default(tx, vehicle.id)

        with_fields(logger, vehicle_id=vehicle.id, user_id=self._user_id).info("Vehicle created")
        self._notifier.publish(
            notifications.vehicle_created(vehicle, self._user_id), self._authorization
        )
        return vehicle

    async def update_vehicle(self, vehicle_id: int, data: VehicleUpdate) -> None:
        _check_choice(data.condition_status, CONDITION_STATUSES, "Invalid condition status")
        _check_choice(data.currency, CURRENCIES, "Invalid currency")
        await self.get_vehicle(vehicle_id)
        await self._vehicles.update(self._db, vehicle_id, data)

    async def delete_vehicle(self, vehicle_id: int) -> None:
        vehicle = await self.get_vehicle(vehicle_id)
        stored_keys = [i.file_path for i in await self._images.get_by_vehicle_id(self._db, vehicle_id)]
        stored_keys += [d.file_path for d in await self._documents.get_by_vehicle_id(self._db, vehicle_id)]

        async with self._db.transaction() as tx:
            await self._images.delete_by_vehicle_id(tx, vehicle_id)
            await self._documents.delete_by_vehicle_id(tx, vehicle_id)
            await self._share_tokens.delete_by_vehicle_id(tx, vehicle_id)
            await self._shipping.delete_by_vehicle_id(tx, vehicle_id)
            await self._financials.delete_by_vehicle_id(tx, vehicle_id)
            await self._sales.delete_by_vehicle_id(tx, vehicle_id)
            await self._purchases.delete_by_vehicle_id(tx, vehicle_id)
            deleted = await self._vehicles.delete(tx, vehicle_id)
            if not deleted:
                raise NotFoundError("Vehicle", vehicle_id)

        with_fields(logger, vehicle_id=vehicle_id, user_id=self._user_id).info("Vehicle deleted")
        self._notifier.publish(
            notifications.vehicle_deleted(vehicle, self._user_id), self._authorization
        )

        # rows are gone; orphaned objects are only logged
        for key in stored_keys:
            try:
                await self._storage.delete(key)
            except AppException as exc:
                with_fields(logger, vehicle_id=vehicle_id, key=key).warning(
                    "Stored object not removed: %s", exc.message
                )

    async def set_featured(self, vehicle_id: int, is_featured: bool) -> None:
        vehicle = await self.get_vehicle(vehicle_id)
        await self._vehicles.set_featured(self._db, vehicle_id, is_featured)
        self._notifier.publish(
            notifications.featured_status_changed(vehicle, is_featured, self._user_id),
            self._authorization,
        )

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    async def update_shipping(self, vehicle_id: int, data: ShippingUpdate) -> None:
        if not data.shipping_status:
            raise BadRequestError("Shipping status is required")
        _check_choice(data.shipping_status, SHIPPING_STATUSES, "Invalid shipping status")

        vehicle = await self.get_vehicle(vehicle_id)

        async with self._db.transaction() as tx:
            # the locked row is the status this history entry replaces
            current = await self._shipping.get_by_vehicle_id(tx, vehicle_id, for_update=True)
            if not current:
                raise NotFoundError("Shipping details for vehicle", vehicle_id)
            old_status = current.shipping_status
            await self._shipping.update_shipping_status(tx, vehicle_id, data)
            await self._shipping_history.insert_entry(
                tx,
                vehicle_id,
                old_status,
                data.shipping_status,
                self._user_id or None,
                data.change_remarks,
                snapshot=data.model_dump(),
            )

        with_fields(
            logger, vehicle_id=vehicle_id, old_status=old_status, new_status=data.shipping_status
        ).info("Shipping status updated")

        customer = await self._assigned_customer(vehicle_id)
        self._notifier.publish(
            notifications.shipping_status_changed(
                vehicle, old_status, data.shipping_status, self._user_id, customer
            ),
            self._authorization,
        )
        if customer is not None and customer.email:
            self._mailer.publish_shipping_status(
                ShippingStatusEmail(
                    to_email=customer.email,
                    customer_name=customer.customer_name,
                    car_make=vehicle.make,
                    car_model=vehicle.model,
                    car_year=str(vehicle.year_of_manufacture or ""),
                    chassis_number=vehicle.chassis_id,
                    old_status=old_status,
                    new_status=data.shipping_status,
                    shipping_order_id=f"VEH-{vehicle.id}",
                    vessel_name=data.vessel_name,
                    departure_harbour=data.departure_harbour,
                    shipment_date=_date_text(data.shipment_date),
                    arrival_date=_date_text(data.arrival_date),
                ),
                self._authorization,
            )

    async def update_purchase(self, vehicle_id: int, data: PurchaseUpdate) -> None:
        _check_choice(data.purchase_status, PURCHASE_STATUSES, "Invalid purchase status")

        vehicle = await self.get_vehicle(vehicle_id)
        supplier = None
        if data.supplier_id is not None:
            supplier = await self._suppliers.get_by_id(self._db, data.supplier_id)
            if not supplier:
                raise BadRequestError("Invalid supplier ID")

        new_status = data.purchase_status

        async with self._db.transaction() as tx:
            current = await self._purchases.get_by_vehicle_id(tx, vehicle_id, for_update=True)
            if not current:
                raise NotFoundError("Purchase details for vehicle", vehicle_id)
            old_status = current.purchase_status or ""
            await self._purchases.update(tx, vehicle_id, data)
            if new_status:
                # snapshot of the row after COALESCE
                merged = {**current.model_dump(), **data.model_dump(exclude_none=True)}
                await self._purchase_history.insert_entry(
                    tx,
                    vehicle_id,
                    old_status or None,
                    new_status,
                    self._user_id or None,
                    data.change_remarks,
                    snapshot=merged,
                )

        if not new_status:
            return

        with_fields(
            logger, vehicle_id=vehicle_id, old_status=old_status, new_status=new_status
        ).info("Purchase status updated")

        if supplier is None and current.supplier_id is not None:
            supplier = await self._suppliers.get_by_id(self._db, current.supplier_id)
        customer = await self._assigned_customer(vehicle_id)
        self._notifier.publish(
            notifications.purchase_status_changed(
                vehicle, old_status, new_status, self._user_id, customer, supplier
            ),
            self._authorization,
        )
        if customer is not None and customer.email:
            self._mailer.publish_purchase_status(
                PurchaseStatusEmail(
                    to_email=customer.email,
                    customer_name=customer.customer_name,
                    car_make=vehicle.make,
                    car_model=vehicle.model,
                    car_year=str(vehicle.year_of_manufacture or ""),
                    chassis_number=vehicle.chassis_id,
                    old_status=old_status,
                    new_status=new_status,
                    purchase_order_id=f"VEH-{vehicle.id}",
                    supplier_name=supplier.supplier_name if supplier else None,
                    lc_number=data.lc_number or current.lc_number,
                    lc_bank=data.lc_bank or current.lc_bank,
                    purchase_date=_date_text(data.purchase_date or current.purchase_date),
                ),
                self._authorization,
            )

    async def update_financials(self, vehicle_id: int, data: FinancialsUpdate) -> None:
        amounts = [data.charges_lkr, data.tt_lkr, data.duty_lkr, data.clearing_lkr]
        amounts.extend(data.other_expenses_lkr.values())
        if any(a < 0 for a in amounts) or data.total_cost_lkr < 0:
            raise BadRequestError("Financial amounts cannot be negative")
        if data.total_cost_lkr <= 0:
            data = data.model_copy(update={"total_cost_lkr": sum(amounts)})

        await self.get_vehicle(vehicle_id)
        await self._financials.update(self._db, vehicle_id, data)

    async def update_sales(self, vehicle_id: int, data: SalesUpdate) -> None:
        if not data.sale_status:
            raise BadRequestError("Sale status is required")
        _check_choice(data.sale_status, SALE_STATUSES, "Invalid sale status")

        if data.sale_status == SALE_STATUS_SOLD:
            if not (data.sold_to_name or "").strip():
                raise BadRequestError("Customer name is required when status is SOLD")
            if data.revenue is None or data.revenue <= 0:
                raise BadRequestError("Revenue is required when status is SOLD")
            if data.sold_date is None:
                data = data.model_copy(update={"sold_date": datetime.now(timezone.utc)})

        if data.customer_id is not None:
            if not await self._customers.get_by_id(self._db, data.customer_id):
                raise BadRequestError("Invalid customer ID")

        await self.get_vehicle(vehicle_id)
        await self._sales.update(self._db, vehicle_id, data)

    # ------------------------------------------------------------------
    # Customer assignment
    # ------------------------------------------------------------------

    async def assign_customer(self, vehicle_id: int, customer_id: int) -> None:
        if customer_id <= 0:
            raise BadRequestError("Valid customer ID is required")
        await self.get_vehicle(vehicle_id)
        if not await self._customers.get_by_id(self._db, customer_id):
            raise NotFoundError("Customer", customer_id)
        await self._sales.assign_customer(self._db, vehicle_id, customer_id)

    async def remove_customer(self, vehicle_id: int) -> None:
        await self.get_vehicle(vehicle_id)
        await self._sales.remove_customer(self._db, vehicle_id)

    async def vehicles_by_customer(self, customer_id: int) -> list[VehicleComplete]:
        if not await self._customers.get_by_id(self._db, customer_id):
            raise NotFoundError("Customer", customer_id)
        filter = VehicleFilter()
        filter.builder.add_equal("vsl.customer_id", customer_id)
        return await self._vehicles.get_all(
            self._db, 0, 0, filter, visible_siblings(self._actor)
        )

    async def _assigned_customer(self, vehicle_id: int) -> Customer | None:
        sales = await self._sales.get_by_vehicle_id(self._db, vehicle_id)
        if not sales or sales.customer_id is None:
            return None
        return await self._customers.get_by_id(self._db, sales.customer_id)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def shipping_history(self, vehicle_id: int) -> list[StatusHistory]:
        await self.get_vehicle(vehicle_id)
        return await self._shipping_history.get_by_vehicle_id(self._db, vehicle_id)

    async def recent_shipping_history(self, limit: int = RECENT_DEFAULT_LIMIT) -> list[StatusHistory]:
        return await self._shipping_history.get_recent(self._db, limit)

    async def purchase_history(self, vehicle_id: int) -> list[StatusHistory]:
        await self.get_vehicle(vehicle_id)
        return await self._purchase_history.get_by_vehicle_id(self._db, vehicle_id)

    async def recent_purchase_history(self, limit: int = RECENT_DEFAULT_LIMIT) -> list[StatusHistory]:
        return await self._purchase_history.get_recent(self._db, limit)

    async def purchase_history_by_status(self, status: str) -> list[StatusHistory]:
        _check_choice(status, PURCHASE_STATUSES, "Invalid purchase status")
        return await self._purchase_history.get_by_status(self._db, status)

    async def purchase_history_by_supplier(self, supplier_id: int) -> list[StatusHistory]:
        return await self._purchase_history.get_by_supplier(self._db, supplier_id)

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    async def upload_images(self, vehicle_id: int, files: list[IncomingFile]) -> ImageUploadResult:
        """Upload a batch; each file succeeds or fails on its own.

        The first stored image of the batch becomes the vehicle's primary image.
        """
        if not files:
            raise BadRequestError("No images provided")
        await self.get_vehicle(vehicle_id)

        log = with_fields(logger, vehicle_id=vehicle_id)
        errors: list[str] = []
        uploaded: list[VehicleImage] = []
        next_order = await self._images.max_display_order(self._db, vehicle_id) + 1

        for incoming in files:
            if incoming.content_type not in IMAGE_MIME_TYPES:
                errors.append(
                    f"Invalid file type for {incoming.filename}. Only JPEG, PNG, GIF, WEBP allowed"
                )
                continue
            try:
                stored = await self._storage.upload(
                    f"vehicles/{vehicle_id}/images",
                    incoming.filename,
                    incoming.data,
                    incoming.content_type,
                )
            except AppException as exc:
                log.with_fields(file=incoming.filename).error("Image upload failed: %s", exc)
                errors.append(f"Failed to upload {incoming.filename}: {exc}")
                continue

            image = await self._images.insert(
                self._db,
                VehicleImage(
                    vehicle_id=vehicle_id,
                    filename=stored.key.rsplit("/", 1)[-1],
                    original_name=incoming.filename,
                    file_path=stored.key,
                    file_size=stored.size,
                    mime_type=incoming.content_type,
                    is_primary=not uploaded,
                    display_order=next_order,
                ),
            )
            if not uploaded:
                await self._images.set_primary(self._db, vehicle_id, image.id)
            uploaded.append(image)
            next_order += 1

        log.with_fields(uploaded=len(uploaded), failed=len(errors)).info("Image batch processed")
        return ImageUploadResult(
            uploaded_images=[UploadedImage.model_validate(i) for i in uploaded],
            total_uploaded=len(uploaded),
            total_files=len(files),
            errors=errors or None,
            partial_success=True if errors else None,
        )

    async def image_url(self, filename: str, vehicle_id: int | None = None) -> PresignedFile:
        image = await self._images.get_by_filename(self._db, filename)
        if not image or (vehicle_id is not None and image.vehicle_id != vehicle_id):
            raise NotFoundError("Image")
        signed = await self._storage.presign(image.file_path)
        return PresignedFile(
            key=signed.key,
            url=signed.url,
            expires_at=signed.expires_at,
            metadata={
                "vehicle_id": image.vehicle_id,
                "original_name": image.original_name,
                "mime_type": image.mime_type,
            },
        )

    async def set_primary_image(self, vehicle_id: int, image_id: int) -> None:
        await self.get_vehicle(vehicle_id)
        async with self._db.transaction() as tx:
            updated = await self._images.set_primary(tx, vehicle_id, image_id)
            if not updated:
                raise NotFoundError("Image", image_id)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def upload_documents(
        self,
        vehicle_id: int,
        files: list[IncomingFile],
        document_types: list[str],
        document_names: list[str],
    ) -> tuple[list[VehicleDocument], list[str]]:
        """Store each file with the type/name given at the same position (default OTHER / filename)."""
        if not files:
            raise BadRequestError("No documents provided")
        await self.get_vehicle(vehicle_id)

        stored_docs: list[VehicleDocument] = []
        errors: list[str] = []
        for i, incoming in enumerate(files):
            document_type = (document_types[i] if i < len(document_types) else "") or "OTHER"
            if document_type not in DOCUMENT_TYPES:
                errors.append(f"Invalid document type for {incoming.filename}: {document_type}")
                continue
            if incoming.content_type not in DOCUMENT_MIME_TYPES:
                errors.append(f"Invalid file type for {incoming.filename}")
                continue
            try:
                stored = await self._storage.upload(
                    f"vehicles/{vehicle_id}/documents",
                    incoming.filename,
                    incoming.data,
                    incoming.content_type,
                )
            except AppException as exc:
                with_fields(logger, vehicle_id=vehicle_id, file=incoming.filename).error(
                    "Document upload failed: %s", exc
                )
                errors.append(f"Failed to upload {incoming.filename}: {exc}")
                continue

            name = (document_names[i] if i < len(document_names) else "") or incoming.filename
            stored_docs.append(
                await self._documents.insert(
                    self._db,
                    VehicleDocument(
                        vehicle_id=vehicle_id,
                        document_type=document_type,
                        document_name=name,
                        file_path=stored.key,
                        file_size_bytes=stored.size,
                        mime_type=incoming.content_type,
                    ),
                )
            )
        return stored_docs, errors

    async def list_documents(self, vehicle_id: int) -> list[VehicleDocument]:
        await self.get_vehicle(vehicle_id)
        return await self._documents.get_by_vehicle_id(self._db, vehicle_id)

    async def document_url(self, document_id: int) -> PresignedFile:
        document = await self._documents.get_by_id(self._db, document_id)
        if not document:
            raise NotFoundError("Document", document_id)
        if not await self._storage.exists(document.file_path):
            raise NotFoundError("Document in storage")
        signed = await self._storage.presign(document.file_path)
        return PresignedFile(
            key=signed.key,
            url=signed.url,
            expires_at=signed.expires_at,
            metadata={
                "document_id": document.id,
                "vehicle_id": document.vehicle_id,
                "document_type": document.document_type,
                "document_name": document.document_name,
                "mime_type": document.mime_type,
            },
        )


def _date_text(value: datetime | None) -> str | None:
    return value.strftime("%Y-%m-%d") if value else None
