from __future__ import annotations

from datetime import datetime

from app.domain.base import Entity


class VehicleMake(Entity):
    id: int
    make_name: str
    country_origin: str | None = None
    logo_url: str | None = None
    is_active: bool = True
    created_at: datetime | None = None


class VehicleModel(Entity):
    id: int
    make_id: int
    model_name: str
    body_type: str | None = None
    fuel_type: str | None = None
    transmission_type: str | None = None
    engine_size_cc: int | None = None
    is_active: bool = True
    created_at: datetime | None = None
    # joined from cars.vehicle_makes
    make_name: str | None = None
