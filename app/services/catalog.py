"""Vehicle makes and models (master data)."""


import logging

from app.core.exceptions import BadRequestError, ConflictError, NotFoundError
from app.core.log import with_fields
from app.db.executor import DuplicateKeyError, Executor
from app.domain.catalog import VehicleMake, VehicleModel
from app.repositories.catalog import VehicleMakeRepository, VehicleModelRepository
from app.schemas.catalog import MakeCreate, MakeUpdate, ModelCreate, ModelUpdate
from app.schemas.vehicle import PresignedFile
from app.services.storage import ObjectStorage, storage

logger = logging.getLogger(__name__)

LOGO_MIME_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp", "image/svg+xml")


class CatalogService:
    def __init__(self, db: Executor, store: ObjectStorage | None = None):
        self._db = db
        self._storage = store or storage
        self._makes = VehicleMakeRepository()
        self._models = VehicleModelRepository()

    # ------------------------------------------------------------------
    # Makes
    # ------------------------------------------------------------------

    async def list_makes(self, active_only: bool = False) -> list[VehicleMake]:
        return await self._makes.get_all(self._db, active_only)

    async def get_make(self, make_id: int) -> VehicleMake:
        make = await self._makes.get_by_id(self._db, make_id)
        if not make:
            raise NotFoundError("Vehicle make", make_id)
        return make

    async def create_make(self, data: MakeCreate) -> VehicleMake:
        if not data.make_name.strip():
            raise BadRequestError("Make name is required")
        if await self._makes.get_by_name(self._db, data.make_name):
            raise ConflictError(f"Vehicle make '{data.make_name.strip()}' already exists")
        try:
            return await self._makes.insert(self._db, data)
        except DuplicateKeyError as exc:
            raise ConflictError(f"Vehicle make '{data.make_name.strip()}' already exists") from exc

    async def update_make(self, make_id: int, data: MakeUpdate) -> None:
        if data.make_name is not None and not data.make_name.strip():
            raise BadRequestError("Make name cannot be empty")
        await self.get_make(make_id)
        if data.make_name:
            existing = await self._makes.get_by_name(self._db, data.make_name)
            if existing and existing.id != make_id:
                raise ConflictError(f"Vehicle make '{data.make_name.strip()}' already exists")
        await self._makes.update(self._db, make_id, data)

    async def upload_logo(self, make_id: int, filename: str, content_type: str, data: bytes) -> str:
        if content_type not in LOGO_MIME_TYPES:
            raise BadRequestError("Invalid file type. Only image files are allowed")
        await self.get_make(make_id)
        stored = await self._storage.upload(f"makes/{make_id}/logo", filename, data, content_type)
        await self._makes.update_logo(self._db, make_id, stored.key)
        with_fields(logger, make_id=make_id, key=stored.key).info("Make logo uploaded")
        return stored.key

    async def logo_url(self, make_id: int) -> PresignedFile:
        make = await self.get_make(make_id)
        if not make.logo_url:
            raise NotFoundError("Logo for vehicle make", make_id)
        signed = await self._storage.presign(make.logo_url)
        return PresignedFile(
            key=signed.key,
            url=signed.url,
            expires_at=signed.expires_at,
            metadata={"make_id": make.id, "make_name": make.make_name},
        )

    # ------------------------------------------------------------------
    # Models
    # ------------------------------------------------------------------

    async def list_models(self, make_id: int | None = None, active_only: bool = False) -> list[VehicleModel]:
        return await self._models.get_all(self._db, make_id, active_only)

    async def get_model(self, model_id: int) -> VehicleModel:
        model = await self._models.get_by_id(self._db, model_id)
        if not model:
            raise NotFoundError("Vehicle model", model_id)
        return model

    async def create_model(self, data: ModelCreate) -> VehicleModel:
        if data.make_id <= 0 or not data.model_name.strip():
            raise BadRequestError("Make ID and model name are required")
        await self.get_make(data.make_id)
        if await self._models.get_by_name(self._db, data.make_id, data.model_name):
            raise ConflictError(f"Vehicle model '{data.model_name.strip()}' already exists for this make")
        try:
            model_id = await self._models.insert(self._db, data)
        except DuplicateKeyError as exc:
            raise ConflictError(
                f"Vehicle model '{data.model_name.strip()}' already exists for this make"
            ) from exc
        return await self.get_model(model_id)

    async def update_model(self, model_id: int, data: ModelUpdate) -> None:
        if data.model_name is not None and not data.model_name.strip():
            raise BadRequestError("Model name cannot be empty")
        current = await self.get_model(model_id)
        if data.model_name:
            existing = await self._models.get_by_name(self._db, current.make_id, data.model_name)
            if existing and existing.id != model_id:
                raise ConflictError(
                    f"Vehicle model '{data.model_name.strip()}' already exists for this make"
                )
        await self._models.update(self._db, model_id, data)
