"""Dashboard aggregates, each driven by its own date-range or vehicle filter."""


from app.db.executor import Executor
from app.filters import VehicleFilter, VehicleFinancialFilter, VehicleSalesFilter, VehicleShippingFilter
from app.repositories.financials import VehicleFinancialsRepository
from app.repositories.sales import VehicleSalesRepository
from app.repositories.shipping import VehicleShippingRepository
from app.repositories.vehicle import VehicleRepository
from app.schemas.analytics import FinancialSummary


class AnalyticsService:
    def __init__(self, db: Executor):
        self._db = db
        self._vehicles = VehicleRepository()
        self._shipping = VehicleShippingRepository()
        self._sales = VehicleSalesRepository()
        self._financials = VehicleFinancialsRepository()

    async def shipping_status_counts(self, filter: VehicleShippingFilter) -> dict[str, int]:
        return await self._shipping.get_status_count(self._db, filter)

    async def sales_status_counts(self, filter: VehicleSalesFilter) -> dict[str, int]:
        return await self._sales.get_status_count(self._db, filter)

    async def brand_counts(self, filter: VehicleFilter) -> dict[str, int]:
        return await self._vehicles.get_brand_count(self._db, filter)

    async def financial_summary(self, filter: VehicleFinancialFilter) -> FinancialSummary:
        return await self._financials.get_summary(self._db, filter)
