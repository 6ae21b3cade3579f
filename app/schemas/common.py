"""Shared Pydantic schema base and small response models."""

from __future__ import annotations

from pydantic import BaseModel


class ApiModel(BaseModel):
    """All request/response schemas inherit from this. Field names are snake_case on the wire."""

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
        "protected_namespaces": (),
    }


class HealthResponse(BaseModel):
    """Health-check response returned by /health."""
    status: str = "ok"
    app: str
    env: str
    database: str | None = None
    schema_name: str | None = None
