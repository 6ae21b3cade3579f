"""Outbound notifications to the notification service.

Each event has a builder function returning a ``NotificationRequest``
envelope. ``NotificationService.publish`` sends it from a detached task;
delivery failures are logged and never reach the caller.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field

from app.core.config import settings
from app.core.log import with_fields
from app.domain.party import Customer, Supplier
from app.domain.vehicle import Vehicle
from app.services.background import spawn

logger = logging.getLogger(__name__)

SOURCE = "car-service"
_ACCEPTED = {200, 201, 202}


class NotificationRequest(BaseModel):
    notification_type: str
    source: str = SOURCE
    payload: dict[str, Any] = Field(default_factory=dict)
    priority: str = "normal"  # normal | high | urgent
    reference_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Priorities
# ---------------------------------------------------------------------------

def shipping_priority(status: str) -> str:
    if status == "DELIVERED":
        return "urgent"
    if status in ("SHIPPED", "ARRIVED", "CLEARED"):
        return "high"
    return "normal"


def purchase_priority(status: str) -> str:
    if status in ("PAYMENT_COMPLETED", "CANCELLED", "REJECTED"):
        return "urgent"
    if status in ("CONFIRMED", "LC_ISSUED"):
        return "high"
    return "normal"


# ---------------------------------------------------------------------------
# Envelope builders
# ---------------------------------------------------------------------------

def _metadata(user_id: str, event: str, **extra: Any) -> dict[str, Any]:
    return {"user_id": user_id, "service": SOURCE, "event": event, **extra}


def _vehicle_details(vehicle: Vehicle) -> dict[str, Any]:
    return {
        "make": vehicle.make,
        "model": vehicle.model,
        "year": vehicle.year_of_manufacture,
        "chassis_id": vehicle.chassis_id,
        "color": vehicle.color,
        "mileage": vehicle.mileage_km,
    }


def _describe(vehicle: Vehicle) -> str:
    return f"{vehicle.code} ({vehicle.make} {vehicle.model} {vehicle.year_of_manufacture})"


def vehicle_created(vehicle: Vehicle, user_id: str) -> NotificationRequest:
    return NotificationRequest(
        notification_type="vehicle_created",
        payload={
            "vehicle_id": vehicle.id,
            "vehicle_code": vehicle.code,
            "message": f"New vehicle {_describe(vehicle)} has been created in the system",
            "vehicle_details": _vehicle_details(vehicle),
        },
        reference_id=f"VEH-{vehicle.id}",
        metadata=_metadata(user_id, "vehicle_created"),
    )


def vehicle_deleted(vehicle: Vehicle, user_id: str) -> NotificationRequest:
    return NotificationRequest(
        notification_type="vehicle_deleted",
        payload={
            "vehicle_id": vehicle.id,
            "vehicle_code": vehicle.code,
            "message": f"Vehicle {_describe(vehicle)} has been deleted from the system",
            "vehicle_details": _vehicle_details(vehicle),
        },
        priority="high",
        reference_id=f"VEH-{vehicle.id}",
        metadata=_metadata(user_id, "vehicle_deleted"),
    )


def shipping_status_changed(
    vehicle: Vehicle,
    old_status: str,
    new_status: str,
    user_id: str,
    customer: Customer | None = None,
) -> NotificationRequest:
    payload: dict[str, Any] = {
        "vehicle_code": vehicle.code,
        "old_status": old_status,
        "new_status": new_status,
        "message": f"Shipping status for vehicle {vehicle.code} changed from {old_status} to {new_status}",
        "vehicle_details": _vehicle_details(vehicle),
    }
    if customer is not None and customer.email:
        payload["email"] = customer.email
        payload["customer_name"] = customer.customer_name
    return NotificationRequest(
        notification_type="shipping_status",
        payload=payload,
        priority=shipping_priority(new_status),
        reference_id=f"VEH-{vehicle.id}",
        metadata=_metadata(
            user_id,
            "shipping_status_update",
            customer_id=customer.id if customer else None,
        ),
    )


def purchase_status_changed(
    vehicle: Vehicle,
    old_status: str,
    new_status: str,
    user_id: str,
    customer: Customer | None = None,
    supplier: Supplier | None = None,
) -> NotificationRequest:
    payload: dict[str, Any] = {
        "vehicle_code": vehicle.code,
        "old_status": old_status,
        "new_status": new_status,
        "message": f"Purchase status for vehicle {vehicle.code} changed from {old_status} to {new_status}",
        "vehicle_details": _vehicle_details(vehicle),
    }
    if customer is not None and customer.email:
        payload["email"] = customer.email
        payload["customer_name"] = customer.customer_name
    if supplier is not None:
        payload["supplier_name"] = supplier.supplier_name
    return NotificationRequest(
        notification_type="purchase_status",
        payload=payload,
        priority=purchase_priority(new_status),
        reference_id=f"VEH-{vehicle.id}",
        metadata=_metadata(user_id, "purchase_status_update"),
    )


def featured_status_changed(vehicle: Vehicle, is_featured: bool, user_id: str) -> NotificationRequest:
    action = "featured" if is_featured else "unfeatured"
    return NotificationRequest(
        notification_type="vehicle_featured_status_changed",
        payload={
            "vehicle_id": vehicle.id,
            "vehicle_code": vehicle.code,
            "is_featured": is_featured,
            "message": f"Vehicle {_describe(vehicle)} has been {action}",
            "vehicle_details": _vehicle_details(vehicle),
        },
        priority="high" if is_featured else "normal",
        reference_id=f"VEH-{vehicle.id}",
        metadata=_metadata(user_id, "vehicle_featured_status_changed"),
    )


def customer_created(customer: Customer, user_id: str) -> NotificationRequest:
    return NotificationRequest(
        notification_type="customer_created",
        payload={
            "customer_id": customer.id,
            "customer_name": customer.customer_name,
            "customer_type": customer.customer_type,
            "email": customer.email,
            "contact_number": customer.contact_number,
            "message": (
                f"New customer '{customer.customer_name}' ({customer.customer_type}) "
                "has been created in the system"
            ),
        },
        reference_id=f"CUST-{customer.id}",
        metadata=_metadata(user_id, "customer_created"),
    )


def customer_deleted(customer: Customer, user_id: str) -> NotificationRequest:
    return NotificationRequest(
        notification_type="customer_deleted",
        payload={
            "customer_id": customer.id,
            "customer_name": customer.customer_name,
            "message": f"Customer '{customer.customer_name}' has been deleted from the system",
        },
        priority="high",
        reference_id=f"CUST-{customer.id}",
        metadata=_metadata(user_id, "customer_deleted"),
    )


def supplier_created(supplier: Supplier, user_id: str) -> NotificationRequest:
    return NotificationRequest(
        notification_type="supplier_created",
        payload={
            "supplier_id": supplier.id,
            "supplier_name": supplier.supplier_name,
            "supplier_type": supplier.supplier_type,
            "country": supplier.country,
            "message": (
                f"New supplier '{supplier.supplier_name}' ({supplier.supplier_type}) "
                "has been created in the system"
            ),
        },
        reference_id=f"SUP-{supplier.id}",
        metadata=_metadata(user_id, "supplier_created"),
    )


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class NotificationService:
    def __init__(self, base_url: str, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def send(self, request: NotificationRequest, authorization: str = "") -> bool:
        """POST one envelope. Returns False on any failure; never raises."""
        log = with_fields(
            logger,
            notification_type=request.notification_type,
            reference_id=request.reference_id,
        )
        if not self._base_url:
            log.warning("Notification service URL not configured, skipping notification")
            return False

        headers = {"Content-Type": "application/json"}
        if authorization:
            headers["Authorization"] = authorization

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(
                    f"{self._base_url}/notifications",
                    json=request.model_dump(mode="json"),
                    headers=headers,
                )
        except httpx.HTTPError as exc:
            log.error("Failed to send notification request: %s", exc)
            return False

        if resp.status_code not in _ACCEPTED:
            log.with_fields(status_code=resp.status_code).error(
                "Notification service returned non-success status code"
            )
            return False

        log.info("Notification sent successfully")
        return True

    def publish(self, request: NotificationRequest, authorization: str = "") -> None:
        """Fire-and-forget ``send`` on a detached task."""
        spawn(self.send(request, authorization), name=f"notify:{request.notification_type}")


notification_service = NotificationService(
    settings.notification_service_url,
    timeout=settings.outbound_timeout_seconds,
)
