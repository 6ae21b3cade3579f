"""Vehicle aggregate: the vehicle row, its four 1:1 sibling rows, images and documents."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from app.domain.base import Entity


class Vehicle(Entity):
    id: int
    code: int | None = None
    make: str
    make_id: int | None = None
    model: str
    trim_level: str | None = None
    year_of_manufacture: int | None = None
    color: str | None = None
    mileage_km: int | None = None
    chassis_id: str
    condition_status: str | None = None
    year_of_registration: int | None = None
    license_plate: str | None = None
    auction_grade: str | None = None
    auction_price: float | None = None
    cif_value: float | None = None
    currency: str | None = None
    hs_code: str | None = None
    invoice_fob_jpy: float | None = None
    registration_number: str | None = None
    record_date: datetime | None = None
    is_featured: bool = False
    featured_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class VehicleShipping(Entity):
    id: int | None = None
    vehicle_id: int
    vessel_name: str | None = None
    departure_harbour: str | None = None
    shipment_date: datetime | None = None
    arrival_date: datetime | None = None
    clearing_date: datetime | None = None
    shipping_status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class VehicleFinancials(Entity):
    id: int | None = None
    vehicle_id: int
    charges_lkr: float = 0
    tt_lkr: float = 0
    duty_lkr: float = 0
    clearing_lkr: float = 0
    # free-form expense name → amount
    other_expenses_lkr: dict[str, Any] = Field(default_factory=dict)
    total_cost_lkr: float = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("other_expenses_lkr", mode="before")
    @classmethod
    def _decode_expenses(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, (str, bytes)):
            return json.loads(value or "{}")
        return value


class VehicleSales(Entity):
    id: int | None = None
    vehicle_id: int
    customer_id: int | None = None
    sold_date: datetime | None = None
    revenue: float | None = None
    profit: float | None = None
    sold_to_name: str | None = None
    sold_to_title: str | None = None
    contact_number: str | None = None
    customer_address: str | None = None
    other_contacts: str | None = None
    sale_remarks: str | None = None
    sale_status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class VehiclePurchase(Entity):
    id: int | None = None
    vehicle_id: int
    supplier_id: int | None = None
    bought_from_name: str | None = None
    bought_from_title: str | None = None
    bought_from_contact: str | None = None
    bought_from_address: str | None = None
    bought_from_other_contacts: str | None = None
    purchase_remarks: str | None = None
    lc_bank: str | None = None
    lc_number: str | None = None
    lc_cost_jpy: float | None = None
    exchange_rate: float | None = None
    purchase_date: datetime | None = None
    purchase_status: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class VehicleImage(Entity):
    id: int | None = None
    vehicle_id: int
    filename: str
    original_name: str | None = None
    file_path: str
    file_size: int | None = None
    mime_type: str | None = None
    is_primary: bool = False
    upload_date: datetime | None = None
    display_order: int = 0


class VehicleDocument(Entity):
    id: int | None = None
    vehicle_id: int
    document_type: str
    document_name: str
    file_path: str
    file_size_bytes: int | None = None
    mime_type: str | None = None
    upload_date: datetime | None = None


class VehicleComplete(Entity):
    """A vehicle with whichever sibling rows the caller may see."""

    vehicle: Vehicle
    shipping: VehicleShipping | None = None
    financials: VehicleFinancials | None = None
    sales: VehicleSales | None = None
    purchase: VehiclePurchase | None = None
    images: list[VehicleImage] = Field(default_factory=list)
