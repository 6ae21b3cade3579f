"""Dashboard analytics routes. Each accepts ``dateRangeStart`` / ``dateRangeEnd``."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from app.core import security
from app.core.response import DataResponse
from app.core.security import Principal, require_permission
from app.db.executor import SessionExecutor, get_executor
from app.filters import VehicleFilter, VehicleFinancialFilter, VehicleSalesFilter, VehicleShippingFilter
from app.schemas.analytics import FinancialSummary
from app.services.analytics import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/shipping-status", response_model=DataResponse[dict[str, int]])
async def shipping_status(
    request: Request,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    filter = VehicleShippingFilter.from_query(request.query_params)
    return {"data": await AnalyticsService(db).shipping_status_counts(filter)}


@router.get("/sales-status", response_model=DataResponse[dict[str, int]])
async def sales_status(
    request: Request,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    filter = VehicleSalesFilter.from_query(request.query_params)
    return {"data": await AnalyticsService(db).sales_status_counts(filter)}


@router.get("/vehicle-brand-status", response_model=DataResponse[dict[str, int]])
async def vehicle_brand_status(
    request: Request,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    filter = VehicleFilter.from_query(request.query_params)
    return {"data": await AnalyticsService(db).brand_counts(filter)}


@router.get("/financial-summary", response_model=DataResponse[FinancialSummary])
async def financial_summary(
    request: Request,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    filter = VehicleFinancialFilter.from_query(request.query_params)
    return {"data": await AnalyticsService(db).financial_summary(filter)}
