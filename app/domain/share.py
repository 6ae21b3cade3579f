from __future__ import annotations

from datetime import datetime

from pydantic import Field

from app.domain.base import Entity


class VehicleShareToken(Entity):
    id: int
    vehicle_id: int
    token: str
    expires_at: datetime
    include_details: list[str] = Field(default_factory=list)
    created_by: str | None = None
    created_at: datetime | None = None
    is_active: bool = True
