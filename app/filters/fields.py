"""User-visible field names and the table-qualified columns they map to.

Table aliases used by the vehicle queries:
  v   cars.vehicles
  vs  cars.vehicle_shipping
  vsl cars.vehicle_sales
  vp  cars.vehicle_purchases
  vf  cars.vehicle_financials
"""

VEHICLE_FIELD_MAPPING: dict[str, str] = {
    # vehicles
    "id": "v.id",
    "code": "v.code",
    "make": "v.make",
    "model": "v.model",
    "trim_level": "v.trim_level",
    "year": "v.year_of_manufacture",
    "year_of_manufacture": "v.year_of_manufacture",
    "color": "v.color",
    "mileage": "v.mileage_km",
    "mileage_km": "v.mileage_km",
    "chassis_id": "v.chassis_id",
    "condition_status": "v.condition_status",
    "auction_grade": "v.auction_grade",
    "auction_price": "v.auction_price",
    "cif_value": "v.cif_value",
    "currency": "v.currency",
    "is_featured": "v.is_featured",
    "featured_at": "v.featured_at",
    "created_at": "v.created_at",
    "updated_at": "v.updated_at",
    # shipping
    "shipping_status": "vs.shipping_status",
    "vessel_name": "vs.vessel_name",
    "departure_harbour": "vs.departure_harbour",
    "shipment_date": "vs.shipment_date",
    "arrival_date": "vs.arrival_date",
    "clearing_date": "vs.clearing_date",
    # sales
    "sale_status": "vsl.sale_status",
    "sold_date": "vsl.sold_date",
    "revenue": "vsl.revenue",
    "profit": "vsl.profit",
    "sold_to_name": "vsl.sold_to_name",
    "customer_address": "vsl.customer_address",
    # purchase
    "bought_from_name": "vp.bought_from_name",
    "purchase_date": "vp.purchase_date",
    "lc_bank": "vp.lc_bank",
    "lc_number": "vp.lc_number",
    "lc_cost": "vp.lc_cost_jpy",
    "purchase_status": "vp.purchase_status",
    "supplier_id": "vp.supplier_id",
    # financials
    "total_cost": "vf.total_cost_lkr",
    "charges": "vf.charges_lkr",
    "duty": "vf.duty_lkr",
    "clearing": "vf.clearing_lkr",
    "other_expenses": "vf.other_expenses_lkr",
}


def resolve_field(name: str) -> str | None:
    """Return the qualified column for *name*, or None when it is not allow-listed."""
    return VEHICLE_FIELD_MAPPING.get(name.strip().lower()) if name else None


def is_valid_order_field(name: str) -> bool:
    return resolve_field(name) is not None
