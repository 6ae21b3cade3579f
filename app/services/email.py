"""Status-change emails through the email service.

Callers decide whether a customer email is known; an empty ``to_email`` is
skipped here as well. Like notifications, failures are logged and swallowed.
"""


import logging

import httpx
from pydantic import BaseModel

from app.core.config import settings
from app.core.log import with_fields
from app.services.background import spawn

logger = logging.getLogger(__name__)

_ACCEPTED = {200, 201}


class ShippingStatusEmail(BaseModel):
    to_email: str
    customer_name: str
    car_make: str
    car_model: str
    car_year: str
    chassis_number: str
    old_status: str
    new_status: str
    shipping_order_id: str
    vessel_name: str | None = None
    departure_harbour: str | None = None
    shipment_date: str | None = None
    arrival_date: str | None = None
    tracking_url: str | None = None


class PurchaseStatusEmail(BaseModel):
    to_email: str
    customer_name: str
    car_make: str
    car_model: str
    car_year: str
    chassis_number: str
    old_status: str
    new_status: str
    purchase_order_id: str
    supplier_name: str | None = None
    lc_number: str | None = None
    lc_bank: str | None = None
    purchase_date: str | None = None


class EmailService:
    def __init__(self, base_url: str, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def send_shipping_status(self, email: ShippingStatusEmail, authorization: str = "") -> bool:
        return await self._post("/email-service/send-shipping-status", email, authorization)

    async def send_purchase_status(self, email: PurchaseStatusEmail, authorization: str = "") -> bool:
        return await self._post("/email-service/send-purchasing-status", email, authorization)

    def publish_shipping_status(self, email: ShippingStatusEmail, authorization: str = "") -> None:
        spawn(self.send_shipping_status(email, authorization), name="email:shipping-status")

    def publish_purchase_status(self, email: PurchaseStatusEmail, authorization: str = "") -> None:
        spawn(self.send_purchase_status(email, authorization), name="email:purchase-status")

    async def _post(self, path: str, email: BaseModel, authorization: str) -> bool:
        log = with_fields(logger, endpoint=path)
        if not self._base_url:
            log.warning("Email service URL not configured, skipping email")
            return False
        if not getattr(email, "to_email", ""):
            log.info("No recipient email, skipping email")
            return False

        headers = {"Content-Type": "application/json"}
        if authorization:
            headers["Authorization"] = authorization

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(
                    f"{self._base_url}{path}",
                    json=email.model_dump(mode="json", exclude_none=True),
                    headers=headers,
                )
        except httpx.HTTPError as exc:
            log.error("Failed to send email request: %s", exc)
            return False

        if resp.status_code not in _ACCEPTED:
            log.with_fields(status_code=resp.status_code).error(
                "Email service returned non-success status code"
            )
            return False

        log.info("Status email sent")
        return True


email_service = EmailService(settings.email_service_url, timeout=settings.outbound_timeout_seconds)
