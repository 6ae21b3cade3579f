"""Append-only status history rows."""

from __future__ import annotations

from datetime import datetime

from app.domain.base import Entity


class StatusHistory(Entity):
    id: int
    vehicle_id: int
    old_status: str | None = None
    new_status: str
    changed_by: str | None = None
    change_remarks: str | None = None
    changed_at: datetime
    # joined from cars.vehicles
    vehicle_code: int | None = None
    make: str | None = None
    model: str | None = None
    chassis_id: str | None = None
    # only on per-vehicle reads
    hours_in_previous_status: float | None = None


class ShippingHistory(StatusHistory):
    vessel_name: str | None = None
    departure_harbour: str | None = None
    shipment_date: datetime | None = None
    arrival_date: datetime | None = None
    clearing_date: datetime | None = None


class PurchaseHistory(StatusHistory):
    supplier_id: int | None = None
    lc_bank: str | None = None
    lc_number: str | None = None
    lc_cost_jpy: float | None = None
    purchase_date: datetime | None = None
    purchase_remarks: str | None = None


class CurrentStatus(Entity):
    vehicle_id: int
    new_status: str
