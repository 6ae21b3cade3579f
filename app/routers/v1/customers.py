"""Customer routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core import security
from app.core.pagination import PaginationParams
from app.core.response import DataResponse, MessageResponse, paginated, with_meta
from app.core.security import Principal, require_permission
from app.db.executor import SessionExecutor, get_executor
from app.domain.party import Customer
from app.schemas.party import CustomerCreate, CustomerUpdate
from app.services.party import CustomerService

router = APIRouter(prefix="/customers", tags=["Customers"])


def _svc(db: SessionExecutor, actor: Principal) -> CustomerService:
    return CustomerService(db, actor)


@router.get("")
async def list_customers(
    customer_type: Optional[str] = Query(default=None, alias="type"),
    active_only: bool = Query(default=False),
    search: Optional[str] = Query(default=None),
    pagination: PaginationParams = Depends(),
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    """List customers. Filter by ?type=INDIVIDUAL|BUSINESS, ?active_only, ?search."""
    items, total = await _svc(db, actor).list_customers(pagination, customer_type, active_only, search)
    return paginated(items, total, pagination)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_customer(
    body: CustomerCreate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_CREATE)),
):
    customer = await _svc(db, actor).create_customer(body)
    return {"message": "Customer created successfully", "data": customer}


@router.get("/search")
async def search_customers(
    q: str = Query(default=""),
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    return with_meta(await _svc(db, actor).search_customers(q), query=q)


@router.get("/{customer_id}", response_model=DataResponse[Customer])
async def get_customer(
    customer_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    return {"data": await _svc(db, actor).get_customer(customer_id)}


@router.put("/{customer_id}", response_model=MessageResponse)
async def update_customer(
    customer_id: int,
    body: CustomerUpdate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_EDIT)),
):
    await _svc(db, actor).update_customer(customer_id, body)
    return {"message": "Customer updated successfully"}


@router.delete("/{customer_id}", response_model=MessageResponse)
async def delete_customer(
    customer_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_EDIT)),
):
    await _svc(db, actor).delete_customer(customer_id)
    return {"message": "Customer deleted successfully"}
