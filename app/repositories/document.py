from __future__ import annotations

from app.db.executor import Executor
from app.domain.vehicle import VehicleDocument

_COLUMNS = (
    "id, vehicle_id, document_type, document_name, file_path, "
    "file_size_bytes, mime_type, upload_date"
)


class VehicleDocumentRepository:
    """Documents are immutable once uploaded: insert and read only."""

    async def insert(self, db: Executor, document: VehicleDocument) -> VehicleDocument:
        row = await db.query_row(
            f"""INSERT INTO cars.vehicle_documents
                    (vehicle_id, document_type, document_name, file_path, file_size_bytes, mime_type)
                VALUES ($1, $2, $3, $4, $5, $6)
                RETURNING {_COLUMNS}""",
            document.vehicle_id,
            document.document_type,
            document.document_name,
            document.file_path,
            document.file_size_bytes,
            document.mime_type,
        )
        return VehicleDocument.model_validate(row)

    async def get_by_vehicle_id(self, db: Executor, vehicle_id: int) -> list[VehicleDocument]:
        rows = await db.query(
            f"""SELECT {_COLUMNS} FROM cars.vehicle_documents
                WHERE vehicle_id = $1
                ORDER BY upload_date DESC, id DESC""",
            vehicle_id,
        )
        return VehicleDocument.from_rows(rows)

    async def get_by_id(self, db: Executor, document_id: int) -> VehicleDocument | None:
        row = await db.query_row(
            f"SELECT {_COLUMNS} FROM cars.vehicle_documents WHERE id = $1",
            document_id,
        )
        return VehicleDocument.from_row(row)

    async def delete_by_vehicle_id(self, db: Executor, vehicle_id: int) -> int:
        return await db.exec("DELETE FROM cars.vehicle_documents WHERE vehicle_id = $1", vehicle_id)
