"""Domain package — entity models materialised from repository rows.

Folder intent:
  base.py     — Entity base (row → model)
  enums.py    — allowed status / type values
  vehicle.py  — Vehicle and its sibling rows, images, documents
  history.py  — shipping / purchase status history
  share.py    — public share tokens
  party.py    — customers and suppliers
  catalog.py  — makes and models
  order.py    — customer orders
"""

from app.domain.catalog import VehicleMake, VehicleModel
from app.domain.history import CurrentStatus, PurchaseHistory, ShippingHistory
from app.domain.order import CustomerOrder
from app.domain.party import Customer, Supplier
from app.domain.share import VehicleShareToken
from app.domain.vehicle import (
    Vehicle,
    VehicleComplete,
    VehicleDocument,
    VehicleFinancials,
    VehicleImage,
    VehiclePurchase,
    VehicleSales,
    VehicleShipping,
)

__all__ = [
    "CurrentStatus",
    "Customer",
    "CustomerOrder",
    "PurchaseHistory",
    "ShippingHistory",
    "Supplier",
    "Vehicle",
    "VehicleComplete",
    "VehicleDocument",
    "VehicleFinancials",
    "VehicleImage",
    "VehicleMake",
    "VehicleModel",
    "VehiclePurchase",
    "VehicleSales",
    "VehicleShareToken",
    "VehicleShipping",
]
