from app.filters.base import DateRangeFilter


class VehicleFinancialFilter(DateRangeFilter):
    column = "vf.created_at"
