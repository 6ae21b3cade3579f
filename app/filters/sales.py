from app.filters.base import DateRangeFilter


class VehicleSalesFilter(DateRangeFilter):
    column = "vsl.created_at"
