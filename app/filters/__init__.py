"""Filter adapters — translate request query parameters into QueryBuilder calls.

Files:
  fields.py     — allow-list of user-visible field names → qualified columns
  base.py       — Filter base class and shared parameter parsing
  vehicle.py    — VehicleFilter (vehicle list, brand analytics)
  shipping.py   — VehicleShippingFilter (shipping status analytics)
  sales.py      — VehicleSalesFilter (sales status analytics)
  financial.py  — VehicleFinancialFilter (financial summary)

Rule: caller input reaches SQL text only through fields.resolve_field().
"""
from app.filters.base import Filter
from app.filters.financial import VehicleFinancialFilter
from app.filters.sales import VehicleSalesFilter
from app.filters.shipping import VehicleShippingFilter
from app.filters.vehicle import VehicleFilter

__all__ = [
    "Filter",
    "VehicleFilter",
    "VehicleFinancialFilter",
    "VehicleSalesFilter",
    "VehicleShippingFilter",
]
