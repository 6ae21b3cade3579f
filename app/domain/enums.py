"""Allowed values for status and type columns."""

CONDITION_STATUSES = ("REGISTERED", "UNREGISTERED")
CURRENCIES = ("JPY", "USD", "LKR", "EUR", "GBP")

SHIPPING_STATUSES = (
    "PROCESSING",
    "SHIPPED",
    "IN_TRANSIT",
    "ARRIVED",
    "CLEARED",
    "DELIVERED",
    "DELAYED",
)
DEFAULT_SHIPPING_STATUS = "PROCESSING"

SALE_STATUSES = ("AVAILABLE", "RESERVED", "SOLD", "CANCELLED")
DEFAULT_SALE_STATUS = "AVAILABLE"
SALE_STATUS_SOLD = "SOLD"

PURCHASE_STATUSES = (
    "LC_PENDING",
    "LC_OPENED",
    "LC_ISSUED",
    "LC_RECEIVED",
    "CONFIRMED",
    "PAYMENT_COMPLETED",
    "CANCELLED",
    "REJECTED",
)
DEFAULT_PURCHASE_STATUS = "LC_PENDING"

DOCUMENT_TYPES = ("INVOICE", "SHIPPING", "CUSTOMS", "INSPECTION", "REGISTRATION", "OTHER")

CUSTOMER_TYPES = ("INDIVIDUAL", "BUSINESS")
SUPPLIER_TYPES = ("AUCTION", "DEALER", "INDIVIDUAL")
DEFAULT_SUPPLIER_COUNTRY = "Japan"

ORDER_STATUSES = ("DRAFT", "SUBMITTED", "PROCESSING", "COMPLETED", "CANCELLED")

SHARE_DETAIL_TYPES = ("shipping", "financial", "purchase", "images")
