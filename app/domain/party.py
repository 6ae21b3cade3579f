"""Customers and suppliers (soft-deleted via ``is_active``)."""

from __future__ import annotations

from datetime import datetime

from app.domain.base import Entity


class Customer(Entity):
    id: int
    customer_title: str | None = None
    customer_name: str
    contact_number: str | None = None
    email: str | None = None
    address: str | None = None
    other_contacts: str | None = None
    customer_type: str
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Supplier(Entity):
    id: int
    supplier_name: str
    supplier_title: str | None = None
    contact_number: str | None = None
    email: str | None = None
    address: str | None = None
    other_contacts: str | None = None
    supplier_type: str
    country: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
