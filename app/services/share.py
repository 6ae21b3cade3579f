"""Share tokens: time-limited public links to a single vehicle.

The public projection is built field by field from the vehicle and only the
sibling aggregates named in ``include_details``; sales rows, supplier and
customer identity are never read on the public path.
"""


import logging
import secrets
from datetime import datetime, timedelta, timezone

from app.core.config import settings
from app.core.exceptions import AppException, BadRequestError, NotFoundError
from app.core.log import with_fields
from app.core.security import Principal
from app.db.executor import Executor
from app.domain.enums import SHARE_DETAIL_TYPES
from app.domain.share import VehicleShareToken
from app.repositories.financials import VehicleFinancialsRepository
from app.repositories.image import VehicleImageRepository
from app.repositories.purchase import VehiclePurchaseRepository
from app.repositories.share_token import VehicleShareTokenRepository
from app.repositories.shipping import VehicleShippingRepository
from app.repositories.vehicle import VehicleRepository
from app.schemas.share import PublicImage, PublicVehicle, ShareCreate, ShareOut
from app.services.storage import ObjectStorage, storage

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_DAYS = 7
MAX_EXPIRY_DAYS = 365
TOKEN_BYTES = 32


class ShareService:
    def __init__(self, db: Executor, actor: Principal | None = None, store: ObjectStorage | None = None):
        self._db = db
        self._actor = actor
        self._storage = store or storage
        self._tokens = VehicleShareTokenRepository()
        self._vehicles = VehicleRepository()
        self._shipping = VehicleShippingRepository()
        self._financials = VehicleFinancialsRepository()
        self._purchases = VehiclePurchaseRepository()
        self._images = VehicleImageRepository()

    async def create_share(self, vehicle_id: int, data: ShareCreate) -> ShareOut:
        days = data.expire_in_days if data.expire_in_days > 0 else DEFAULT_EXPIRY_DAYS
        if days > MAX_EXPIRY_DAYS:
            raise BadRequestError(f"expire_in_days cannot exceed {MAX_EXPIRY_DAYS}")
        for detail in data.include_details:
            if detail not in SHARE_DETAIL_TYPES:
                raise BadRequestError(f"Invalid include_details value: {detail}")

        if not await self._vehicles.exists(self._db, vehicle_id):
            raise NotFoundError("Vehicle", vehicle_id)

        include = list(dict.fromkeys(data.include_details))
        token = VehicleShareToken(
            id=0,
            vehicle_id=vehicle_id,
            token=secrets.token_urlsafe(TOKEN_BYTES),
            expires_at=datetime.now(timezone.utc) + timedelta(days=days),
            include_details=include,
            created_by=self._actor.user_id if self._actor else None,
        )
        token.id = await self._tokens.insert(self._db, token)
        with_fields(logger, vehicle_id=vehicle_id, expires_in_days=days).info("Share token created")

        return ShareOut(
            token=token.token,
            vehicle_id=vehicle_id,
            expires_at=token.expires_at,
            include_details=include,
            share_url=f"{settings.api_prefix}/share/vehicle/public/{token.token}",
        )

    async def get_public_vehicle(self, token_value: str) -> PublicVehicle:
        token = await self._tokens.get_by_token(self._db, token_value)
        if not token:
            raise NotFoundError("Share token", message="Invalid or expired share token")
        vehicle = await self._vehicles.get_by_id(self._db, token.vehicle_id)
        if not vehicle:
            raise NotFoundError("Share token", message="Invalid or expired share token")

        public = PublicVehicle(
            code=vehicle.code,
            make=vehicle.make,
            model=vehicle.model,
            trim_level=vehicle.trim_level,
            year_of_manufacture=vehicle.year_of_manufacture,
            year_of_registration=vehicle.year_of_registration,
            color=vehicle.color,
            mileage_km=vehicle.mileage_km,
            chassis_id=vehicle.chassis_id,
            condition_status=vehicle.condition_status,
            auction_grade=vehicle.auction_grade,
            auction_price=vehicle.auction_price,
            currency=vehicle.currency,
            share_token_expires_at=token.expires_at,
        )
        details = set(token.include_details)

        if "shipping" in details:
            shipping = await self._shipping.get_by_vehicle_id(self._db, vehicle.id)
            if shipping:
                public.shipping_status = shipping.shipping_status
                public.vessel_name = shipping.vessel_name
                public.departure_harbour = shipping.departure_harbour
                public.shipment_date = shipping.shipment_date
                public.arrival_date = shipping.arrival_date
                public.clearing_date = shipping.clearing_date

        if "financial" in details:
            financials = await self._financials.get_by_vehicle_id(self._db, vehicle.id)
            if financials:
                public.total_cost_lkr = financials.total_cost_lkr

        if "purchase" in details:
            purchase = await self._purchases.get_by_vehicle_id(self._db, vehicle.id)
            if purchase:
                public.purchase_status = purchase.purchase_status
                public.purchase_date = purchase.purchase_date

        if "images" in details:
            public.images = await self._public_images(vehicle.id)

        return public

    async def _public_images(self, vehicle_id: int) -> list[PublicImage]:
        images: list[PublicImage] = []
        for image in await self._images.get_by_vehicle_id(self._db, vehicle_id):
            try:
                signed = await self._storage.presign(image.file_path)
            except AppException as exc:
                with_fields(logger, image_id=image.id).warning("Skipping shared image: %s", exc.message)
                continue
            images.append(PublicImage(id=image.id, image_url=signed.url, is_primary=image.is_primary))
        return images
