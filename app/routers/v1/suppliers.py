"""Supplier routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core import security
from app.core.pagination import PaginationParams
from app.core.response import DataResponse, MessageResponse, paginated, with_meta
from app.core.security import Principal, require_permission
from app.db.executor import SessionExecutor, get_executor
from app.domain.party import Supplier
from app.schemas.party import SupplierCreate, SupplierUpdate
from app.services.party import SupplierService

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])


def _svc(db: SessionExecutor, actor: Principal) -> SupplierService:
    return SupplierService(db, actor)


@router.get("")
async def list_suppliers(
    supplier_type: Optional[str] = Query(default=None, alias="type"),
    active_only: bool = Query(default=False),
    search: Optional[str] = Query(default=None),
    pagination: PaginationParams = Depends(),
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    """List suppliers. Filter by ?type=AUCTION|DEALER|INDIVIDUAL, ?active_only, ?search."""
    items, total = await _svc(db, actor).list_suppliers(pagination, supplier_type, active_only, search)
    return paginated(items, total, pagination)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_supplier(
    body: SupplierCreate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_CREATE)),
):
    supplier = await _svc(db, actor).create_supplier(body)
    return {"message": "Supplier created successfully", "data": supplier}


@router.get("/search")
async def search_suppliers(
    q: str = Query(default=""),
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    return with_meta(await _svc(db, actor).search_suppliers(q), query=q)


@router.get("/{supplier_id}", response_model=DataResponse[Supplier])
async def get_supplier(
    supplier_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    return {"data": await _svc(db, actor).get_supplier(supplier_id)}


@router.put("/{supplier_id}", response_model=MessageResponse)
async def update_supplier(
    supplier_id: int,
    body: SupplierUpdate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_EDIT)),
):
    await _svc(db, actor).update_supplier(supplier_id, body)
    return {"message": "Supplier updated successfully"}


@router.delete("/{supplier_id}", response_model=MessageResponse)
async def delete_supplier(
    supplier_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_EDIT)),
):
    await _svc(db, actor).delete_supplier(supplier_id)
    return {"message": "Supplier deleted successfully"}
