"""Vehicle make routes (master data) including the make logo."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from app.core import security
from app.core.config import settings
from app.core.exceptions import BadRequestError
from app.core.response import DataResponse, MessageResponse, with_meta
from app.core.security import Principal, require_permission
from app.db.executor import SessionExecutor, get_executor
from app.domain.catalog import VehicleMake
from app.schemas.catalog import MakeCreate, MakeUpdate
from app.schemas.vehicle import PresignedFile
from app.services.catalog import CatalogService

router = APIRouter(prefix="/makes", tags=["Makes"])


def _svc(db: SessionExecutor) -> CatalogService:
    return CatalogService(db)


@router.get("")
async def list_makes(
    active_only: bool = Query(default=False),
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    return with_meta(await _svc(db).list_makes(active_only))


@router.post("", response_model=DataResponse[VehicleMake], status_code=status.HTTP_201_CREATED)
async def create_make(
    body: MakeCreate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_CREATE)),
):
    return {"data": await _svc(db).create_make(body)}


@router.put("/{make_id}", response_model=MessageResponse)
async def update_make(
    make_id: int,
    body: MakeUpdate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_EDIT)),
):
    await _svc(db).update_make(make_id, body)
    return {"message": "Vehicle make updated successfully"}


@router.post("/{make_id}/logo", status_code=status.HTTP_201_CREATED)
async def upload_logo(
    make_id: int,
    logo: UploadFile | None = File(default=None),
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_EDIT)),
):
    """Multipart field ``logo``, capped at the configured logo size."""
    if logo is None:
        raise BadRequestError("No logo provided")
    data = await logo.read()
    if len(data) > settings.max_logo_upload_mb * 1024 * 1024:
        raise BadRequestError(f"Logo exceeds the {settings.max_logo_upload_mb} MB limit")
    key = await _svc(db).upload_logo(make_id, logo.filename or "", logo.content_type or "", data)
    return {"message": "Logo uploaded successfully", "data": {"make_id": make_id, "logo_url": key}}


@router.get("/{make_id}/logo", response_model=DataResponse[PresignedFile])
async def logo_url(
    make_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    return {"data": await _svc(db).logo_url(make_id)}
