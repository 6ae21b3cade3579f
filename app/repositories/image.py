from __future__ import annotations

from app.db.executor import Executor
from app.domain.vehicle import VehicleImage

IMAGE_COLUMNS = (
    "id", "vehicle_id", "filename", "original_name", "file_path",
    "file_size", "mime_type", "is_primary", "upload_date", "display_order",
)
_SELECT = ", ".join(IMAGE_COLUMNS)


class VehicleImageRepository:

    async def insert(self, db: Executor, image: VehicleImage) -> VehicleImage:
        row = await db.query_row(
            f"""INSERT INTO cars.vehicle_images
                    (vehicle_id, filename, original_name, file_path, file_size,
                     mime_type, is_primary, display_order)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                RETURNING {_SELECT}""",
            image.vehicle_id,
            image.filename,
            image.original_name,
            image.file_path,
            image.file_size,
            image.mime_type,
            image.is_primary,
            image.display_order,
        )
        return VehicleImage.model_validate(row)

    async def get_by_vehicle_id(self, db: Executor, vehicle_id: int) -> list[VehicleImage]:
        rows = await db.query(
            f"""SELECT {_SELECT} FROM cars.vehicle_images
                WHERE vehicle_id = $1
                ORDER BY display_order ASC, id ASC""",
            vehicle_id,
        )
        return VehicleImage.from_rows(rows)

    async def get_by_filename(self, db: Executor, filename: str) -> VehicleImage | None:
        row = await db.query_row(
            f"SELECT {_SELECT} FROM cars.vehicle_images WHERE filename = $1",
            filename,
        )
        return VehicleImage.from_row(row)

    async def max_display_order(self, db: Executor, vehicle_id: int) -> int:
        row = await db.query_row(
            """SELECT COALESCE(MAX(display_order), 0) AS max_order
               FROM cars.vehicle_images WHERE vehicle_id = $1""",
            vehicle_id,
        )
        return int(row["max_order"]) if row else 0

    async def set_primary(self, db: Executor, vehicle_id: int, image_id: int) -> int:
        """Make *image_id* the only primary image; returns 0 when it does not belong to the vehicle."""
        await db.exec(
            "UPDATE cars.vehicle_images SET is_primary = false WHERE vehicle_id = $1",
            vehicle_id,
        )
        return await db.exec(
            "UPDATE cars.vehicle_images SET is_primary = true WHERE id = $1 AND vehicle_id = $2",
            image_id,
            vehicle_id,
        )

    async def delete_by_vehicle_id(self, db: Executor, vehicle_id: int) -> int:
        return await db.exec("DELETE FROM cars.vehicle_images WHERE vehicle_id = $1", vehicle_id)
