"""Vehicle list filter."""

from __future__ import annotations

from collections.abc import Mapping

from app.core.exceptions import BadRequestError
from app.filters.base import Filter, parse_int
from app.filters.fields import resolve_field

SEARCH_EXPRESSION = "(v.make || ' ' || v.model || ' ' || v.chassis_id)"
DEFAULT_ORDER = "v.created_at DESC, v.id DESC"

# exact-match parameters; each name is also an allow-listed field
_EQUALITY_PARAMS = ("make", "model", "condition_status", "shipping_status", "sale_status", "color")


class VehicleFilter(Filter):
    """Recognised parameters:

    make, model, color, condition_status, shipping_status, sale_status  exact match
    year                     exact year of manufacture
    year_min, year_max       year bounds (ignored when ``year`` is given)
    mileage_min, mileage_max mileage bounds
    search                   substring over make, model and chassis id
    dateRangeStart/End       ``YYYY-MM-DD`` bounds on creation date
    order_by, sort           allow-listed field and ASC/DESC (default ASC)
    """

    def apply(self, params: Mapping[str, str]) -> None:
        for name in _EQUALITY_PARAMS:
            value = (params.get(name) or "").strip()
            if value:
                self.builder.add_equal(resolve_field(name), value)

        year = parse_int(params, "year")
        if year is not None:
            self.builder.add_equal(resolve_field("year"), year)
        else:
            self.add_bounds(
                resolve_field("year"),
                parse_int(params, "year_min"),
                parse_int(params, "year_max"),
            )

        search = (params.get("search") or "").strip()
        if search:
            self.builder.add_like(SEARCH_EXPRESSION, search)

        mileage_min = parse_int(params, "mileage_min")
        mileage_max = parse_int(params, "mileage_max")
        if mileage_min is not None and mileage_max is not None and mileage_min > mileage_max:
            raise BadRequestError("mileage_min must not exceed mileage_max")
        self.add_bounds(resolve_field("mileage"), mileage_min, mileage_max)

        self.add_date_range(resolve_field("created_at"), params)

        order_by = (params.get("order_by") or "").strip()
        if order_by:
            column = resolve_field(order_by)
            if column is None:
                raise BadRequestError(f"Invalid order_by field: {order_by}")
            self.builder.set_order_by(column, params.get("sort") or "ASC", tiebreaker="v.id")
