from pydantic import Field

from app.schemas.common import ApiModel

class OrderCreate(ApiModel):
    customer_name: str
    customer_title: str | None = None
    contact_number: str
    email: str | None = None
    address: str | None = None
    preferred_make: str
    preferred_model: str
    preferred_color: str | None = None
    preferred_year: int | None = None
    trim_level: str | None = None
    max_mileage: int | None = None
    min_auction_grade: str | None = None
    required_features: list[str] = Field(default_factory=list)
    order_type: str | None = None
    expected_delivery: str | None = None  # YYYY-MM-DD
    priority: str | None = None
    preferred_port: str | None = None
    shipping_method: str | None = None
    include_insurance: bool = False
    budget_min: float | None = None
    budget_max: float | None = None
    payment_method: str | None = None
    down_payment: float | None = None
    special_requests: str | None = None
    internal_notes: str | None = None
    is_draft: bool = False

class OrderStatusUpdate(ApiModel):
    order_status: str = ""
