"""Vehicle request DTOs and vehicle-specific response models."""


from datetime import datetime
from typing import Any

from pydantic import Field

from app.schemas.common import ApiModel

class VehicleCreate(ApiModel):
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

class VehicleUpdate(ApiModel):
    code: int | None = None
    make: str | None = None
    make_id: int | None = None
    model: str | None = None
    trim_level: str | None = None
    year_of_manufacture: int | None = None
    color: str | None = None
    mileage_km: int | None = None
    chassis_id: str | None = None
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

class ShippingUpdate(ApiModel):
    shipping_status: str = ""
    vessel_name: str | None = None
    departure_harbour: str | None = None
    shipment_date: datetime | None = None
    arrival_date: datetime | None = None
    clearing_date: datetime | None = None
    change_remarks: str | None = None

class PurchaseUpdate(ApiModel):
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
    change_remarks: str | None = None

class FinancialsUpdate(ApiModel):
    charges_lkr: float = 0
    tt_lkr: float = 0
    duty_lkr: float = 0
    clearing_lkr: float = 0
    other_expenses_lkr: dict[str, float] = Field(default_factory=dict)
    total_cost_lkr: float = 0

class SalesUpdate(ApiModel):
    sale_status: str = ""
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

class FeaturedUpdate(ApiModel):
    is_featured: bool

class AssignCustomer(ApiModel):
    customer_id: int = 0

class MakeModelPair(ApiModel):
    make: str
    model: str

class DropdownOptions(ApiModel):
    makes_models: list[MakeModelPair]
    colors: list[str]
    years: list[int]
    shipping_statuses: list[str]
    sale_statuses: list[str]
    condition_statuses: list[str]
    currencies: list[str]
    purchase_statuses: list[str]
    document_types: list[str]

class UploadedImage(ApiModel):
    id: int
    filename: str
    original_name: str
    file_path: str
    file_size: int
    mime_type: str
    is_primary: bool
    display_order: int

class ImageUploadResult(ApiModel):
    uploaded_images: list[UploadedImage]
    total_uploaded: int
    total_files: int
    storage_type: str = "s3"
    errors: list[str] | None = None
    partial_success: bool | None = None

class PresignedFile(ApiModel):
    key: str
    url: str
    expires_at: datetime
    metadata: dict[str, Any] | None = None
