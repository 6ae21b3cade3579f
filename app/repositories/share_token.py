from __future__ import annotations

from app.db.executor import Executor
from app.domain.share import VehicleShareToken

_COLUMNS = "id, vehicle_id, token, expires_at, include_details, created_by, created_at, is_active"


class VehicleShareTokenRepository:

    async def insert(self, db: Executor, token: VehicleShareToken) -> int:
        row = await db.query_row(
            """INSERT INTO cars.vehicle_share_tokens
                   (vehicle_id, token, expires_at, include_details, created_by, is_active)
               VALUES ($1, $2, $3, $4, $5, true)
               RETURNING id""",
            token.vehicle_id,
            token.token,
            token.expires_at,
            list(token.include_details),
            token.created_by,
        )
        return int(row["id"])

    async def get_by_token(self, db: Executor, token: str) -> VehicleShareToken | None:
        """Return the token only while it is active and unexpired."""
        row = await db.query_row(
            f"""SELECT {_COLUMNS} FROM cars.vehicle_share_tokens
                WHERE token = $1 AND is_active = true AND expires_at > NOW()""",
            token,
        )
        return VehicleShareToken.from_row(row)

    async def deactivate(self, db: Executor, token_id: int) -> int:
        return await db.exec(
            "UPDATE cars.vehicle_share_tokens SET is_active = false WHERE id = $1",
            token_id,
        )

    async def delete_by_vehicle_id(self, db: Executor, vehicle_id: int) -> int:
        return await db.exec("DELETE FROM cars.vehicle_share_tokens WHERE vehicle_id = $1", vehicle_id)
