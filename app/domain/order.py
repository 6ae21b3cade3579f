from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from app.domain.base import Entity


class CustomerOrder(Entity):
    id: int
    order_number: str
    customer_id: int
    preferred_make: str | None = None
    preferred_model: str | None = None
    preferred_year_min: int | None = None
    preferred_year_max: int | None = None
    preferred_color: str | None = None
    preferred_trim_level: str | None = None
    max_mileage_km: int | None = None
    min_auction_grade: str | None = None
    required_features: list[str] = Field(default_factory=list)  # stored as JSON array text
    order_type: str | None = None
    expected_delivery_date: datetime | None = None
    priority_level: str | None = None
    preferred_port: str | None = None
    shipping_method: str | None = None
    include_insurance: bool = False
    budget_min: float | None = None
    budget_max: float | None = None
    payment_method: str | None = None
    down_payment: float | None = None
    special_requests: str | None = None
    internal_notes: str | None = None
    order_status: str
    is_draft: bool = False
    order_date: datetime | None = None
    completed_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    # joined from cars.customers on list reads
    customer_name: str | None = None
    contact_number: str | None = None

    @field_validator("required_features", mode="before")
    @classmethod
    def _decode_features(cls, value: Any) -> Any:
        if value is None or value == "":
            return []
        if isinstance(value, (str, bytes)):
            return json.loads(value)
        return value
