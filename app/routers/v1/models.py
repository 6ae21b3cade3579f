"""Vehicle model routes (master data)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core import security
from app.core.response import DataResponse, MessageResponse, with_meta
from app.core.security import Principal, require_permission
from app.db.executor import SessionExecutor, get_executor
from app.domain.catalog import VehicleModel
from app.schemas.catalog import ModelCreate, ModelUpdate
from app.services.catalog import CatalogService

router = APIRouter(prefix="/models", tags=["Models"])


def _svc(db: SessionExecutor) -> CatalogService:
    return CatalogService(db)


@router.get("")
async def list_models(
    make_id: Optional[int] = Query(default=None),
    active_only: bool = Query(default=False),
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    return with_meta(await _svc(db).list_models(make_id, active_only))


@router.get("/{model_id}", response_model=DataResponse[VehicleModel])
async def get_model(
    model_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    return {"data": await _svc(db).get_model(model_id)}


@router.post("", response_model=DataResponse[VehicleModel], status_code=status.HTTP_201_CREATED)
async def create_model(
    body: ModelCreate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_CREATE)),
):
    return {"data": await _svc(db).create_model(body)}


@router.put("/{model_id}", response_model=MessageResponse)
async def update_model(
    model_id: int,
    body: ModelUpdate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_EDIT)),
):
    await _svc(db).update_model(model_id, body)
    return {"message": "Vehicle model updated successfully"}
