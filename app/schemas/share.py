"""Share-token request and public projection schemas.

The public view deliberately has no revenue, profit, remarks, supplier or
customer fields.
"""


from datetime import datetime

from pydantic import Field

from app.schemas.common import ApiModel

class ShareCreate(ApiModel):
    expire_in_days: int = 0
    include_details: list[str] = Field(default_factory=list)

class ShareOut(ApiModel):
    token: str
    vehicle_id: int
    expires_at: datetime
    include_details: list[str]
    share_url: str

class PublicImage(ApiModel):
    id: int
    image_url: str
    is_primary: bool

class PublicVehicle(ApiModel):
    code: int | None = None
    make: str
    model: str
    trim_level: str | None = None
    year_of_manufacture: int | None = None
    year_of_registration: int | None = None
    color: str | None = None
    mileage_km: int | None = None
    chassis_id: str
    condition_status: str | None = None
    auction_grade: str | None = None
    auction_price: float | None = None
    currency: str | None = None

    shipping_status: str | None = None
    vessel_name: str | None = None
    departure_harbour: str | None = None
    shipment_date: datetime | None = None
    arrival_date: datetime | None = None
    clearing_date: datetime | None = None

    total_cost_lkr: float | None = None

    purchase_status: str | None = None
    purchase_date: datetime | None = None

    images: list[PublicImage] | None = None
    share_token_expires_at: datetime
