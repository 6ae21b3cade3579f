"""Customer order routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.core import security
from app.core.pagination import PaginationParams
from app.core.response import DataResponse, MessageResponse, paginated
from app.core.security import Principal, require_permission
from app.db.executor import SessionExecutor, get_executor
from app.domain.order import CustomerOrder
from app.schemas.order import OrderCreate, OrderStatusUpdate
from app.services.order import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


def _svc(db: SessionExecutor) -> OrderService:
    return OrderService(db)


@router.post("", response_model=DataResponse[CustomerOrder], status_code=status.HTTP_201_CREATED)
async def create_order(
    body: OrderCreate,
    db: SessionExecutor = Depends(get_executor),
):
    """Submit an order; the customer is matched (or created) by contact number."""
    return {"data": await _svc(db).create_order(body)}


@router.get("")
async def list_orders(
    pagination: PaginationParams = Depends(),
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    items, total = await _svc(db).list_orders(pagination)
    return paginated(items, total, pagination)


@router.get("/{order_id}", response_model=DataResponse[CustomerOrder])
async def get_order(
    order_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    return {"data": await _svc(db).get_order(order_id)}


@router.put("/{order_id}/status", response_model=MessageResponse)
async def update_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_EDIT)),
):
    await _svc(db).update_status(order_id, body.order_status)
    return {"message": "Order status updated successfully"}
