from app.filters.base import DateRangeFilter


class VehicleShippingFilter(DateRangeFilter):
    column = "vs.created_at"
