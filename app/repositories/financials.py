from __future__ import annotations

import json

from app.db.executor import Executor
from app.domain.vehicle import VehicleFinancials
from app.filters.base import Filter
from app.repositories.vehicle import FINANCIAL_COLUMNS
from app.schemas.analytics import FinancialSummary
from app.schemas.vehicle import FinancialsUpdate

_SELECT = ", ".join(FINANCIAL_COLUMNS)


class VehicleFinancialsRepository:

    async def insert_default(self, db: Executor, vehicle_id: int) -> int:
        return await db.exec(
            """INSERT INTO cars.vehicle_financials
                   (vehicle_id, charges_lkr, tt_lkr, duty_lkr, clearing_lkr,
                    other_expenses_lkr, total_cost_lkr)
               VALUES ($1, 0, 0, 0, 0, '{}'::jsonb, 0)""",
            vehicle_id,
        )

    async def get_by_vehicle_id(self, db: Executor, vehicle_id: int) -> VehicleFinancials | None:
        row = await db.query_row(
            f"SELECT {_SELECT} FROM cars.vehicle_financials WHERE vehicle_id = $1",
            vehicle_id,
        )
        return VehicleFinancials.from_row(row)

    async def update(self, db: Executor, vehicle_id: int, data: FinancialsUpdate) -> int:
        return await db.exec(
            """UPDATE cars.vehicle_financials
               SET charges_lkr = $2,
                   tt_lkr = $3,
                   duty_lkr = $4,
                   clearing_lkr = $5,
                   other_expenses_lkr = CAST($6 AS jsonb),
                   total_cost_lkr = $7,
                   updated_at = CURRENT_TIMESTAMP
               WHERE vehicle_id = $1""",
            vehicle_id,
            data.charges_lkr,
            data.tt_lkr,
            data.duty_lkr,
            data.clearing_lkr,
            json.dumps(data.other_expenses_lkr),
            data.total_cost_lkr,
        )

    async def get_summary(self, db: Executor, filter: Filter) -> FinancialSummary:
        # other_expenses_lkr is a jsonb map of expense name → amount
        sql, args = filter.get_query_for_count(
            """SELECT
                   COALESCE(SUM(vf.charges_lkr), 0) AS total_charges,
                   COALESCE(SUM(vf.tt_lkr), 0) AS total_tt,
                   COALESCE(SUM(vf.duty_lkr), 0) AS total_duty,
                   COALESCE(SUM(vf.clearing_lkr), 0) AS total_clearing,
                   COALESCE(SUM((
                       SELECT SUM((value #>> '{}')::numeric)
                       FROM jsonb_each(COALESCE(vf.other_expenses_lkr, '{}'::jsonb))
                   )), 0) AS total_other_expenses,
                   COALESCE(SUM(vf.total_cost_lkr), 0) AS total_investment
               FROM cars.vehicle_financials vf"""
        )
        row = await db.query_row(sql, *args)
        return FinancialSummary.model_validate(row or {})

    async def delete_by_vehicle_id(self, db: Executor, vehicle_id: int) -> int:
        return await db.exec("DELETE FROM cars.vehicle_financials WHERE vehicle_id = $1", vehicle_id)
