from __future__ import annotations

from app.db.executor import Executor
from app.domain.catalog import VehicleMake, VehicleModel
from app.query.builder import QueryBuilder
from app.schemas.catalog import MakeCreate, MakeUpdate, ModelCreate, ModelUpdate

_MAKE_COLUMNS = "id, make_name, country_origin, logo_url, is_active, created_at"
_MODEL_COLUMNS = (
    "vm.id, vm.make_id, vm.model_name, vm.body_type, vm.fuel_type, "
    "vm.transmission_type, vm.engine_size_cc, vm.is_active, vm.created_at, vma.make_name"
)
_MODEL_FROM = "FROM cars.vehicle_models vm JOIN cars.vehicle_makes vma ON vma.id = vm.make_id"


class VehicleMakeRepository:

    async def insert(self, db: Executor, data: MakeCreate) -> VehicleMake:
        row = await db.query_row(
            f"""INSERT INTO cars.vehicle_makes (make_name, country_origin, is_active)
                VALUES ($1, $2, $3)
                RETURNING {_MAKE_COLUMNS}""",
            data.make_name.strip(),
            data.country_origin,
            data.is_active,
        )
        return VehicleMake.model_validate(row)

    async def get_all(self, db: Executor, active_only: bool = False) -> list[VehicleMake]:
        sql = f"SELECT {_MAKE_COLUMNS} FROM cars.vehicle_makes"
        if active_only:
            sql += " WHERE is_active = true"
        rows = await db.query(sql + " ORDER BY make_name, id")
        return VehicleMake.from_rows(rows)

    async def get_by_id(self, db: Executor, make_id: int) -> VehicleMake | None:
        row = await db.query_row(f"SELECT {_MAKE_COLUMNS} FROM cars.vehicle_makes WHERE id = $1", make_id)
        return VehicleMake.from_row(row)

    async def get_by_name(self, db: Executor, make_name: str) -> VehicleMake | None:
        row = await db.query_row(
            f"SELECT {_MAKE_COLUMNS} FROM cars.vehicle_makes WHERE LOWER(make_name) = LOWER($1)",
            make_name.strip(),
        )
        return VehicleMake.from_row(row)

    async def update(self, db: Executor, make_id: int, data: MakeUpdate) -> int:
        return await db.exec(
            """UPDATE cars.vehicle_makes
               SET make_name = COALESCE($2, make_name),
                   country_origin = COALESCE($3, country_origin),
                   is_active = COALESCE($4, is_active)
               WHERE id = $1""",
            make_id,
            data.make_name.strip() if data.make_name else None,
            data.country_origin,
            data.is_active,
        )

    async def update_logo(self, db: Executor, make_id: int, logo_key: str) -> int:
        return await db.exec(
            "UPDATE cars.vehicle_makes SET logo_url = $2 WHERE id = $1",
            make_id,
            logo_key,
        )


class VehicleModelRepository:

    async def insert(self, db: Executor, data: ModelCreate) -> int:
        row = await db.query_row(
            """INSERT INTO cars.vehicle_models
                   (make_id, model_name, body_type, fuel_type, transmission_type,
                    engine_size_cc, is_active)
               VALUES ($1, $2, $3, $4, $5, $6, $7)
               RETURNING id""",
            data.make_id,
            data.model_name.strip(),
            data.body_type,
            data.fuel_type,
            data.transmission_type,
            data.engine_size_cc,
            data.is_active,
        )
        return int(row["id"])

    async def get_all(
        self, db: Executor, make_id: int | None = None, active_only: bool = False
    ) -> list[VehicleModel]:
        qb = QueryBuilder()
        if make_id is not None:
            qb.add_equal("vm.make_id", make_id)
        if active_only:
            qb.add_equal("vm.is_active", True)
        sql, args = qb.build(
            f"SELECT {_MODEL_COLUMNS} {_MODEL_FROM}",
            order_by="vma.make_name, vm.model_name, vm.id",
        )
        return VehicleModel.from_rows(await db.query(sql, *args))

    async def get_by_id(self, db: Executor, model_id: int) -> VehicleModel | None:
        row = await db.query_row(f"SELECT {_MODEL_COLUMNS} {_MODEL_FROM} WHERE vm.id = $1", model_id)
        return VehicleModel.from_row(row)

    async def get_by_name(self, db: Executor, make_id: int, model_name: str) -> VehicleModel | None:
        row = await db.query_row(
            f"""SELECT {_MODEL_COLUMNS} {_MODEL_FROM}
                WHERE vm.make_id = $1 AND LOWER(vm.model_name) = LOWER($2)""",
            make_id,
            model_name.strip(),
        )
        return VehicleModel.from_row(row)

    async def update(self, db: Executor, model_id: int, data: ModelUpdate) -> int:
        return await db.exec(
            """UPDATE cars.vehicle_models
               SET model_name = COALESCE($2, model_name),
                   body_type = COALESCE($3, body_type),
                   fuel_type = COALESCE($4, fuel_type),
                   transmission_type = COALESCE($5, transmission_type),
                   engine_size_cc = COALESCE($6, engine_size_cc),
                   is_active = COALESCE($7, is_active)
               WHERE id = $1""",
            model_id,
            data.model_name.strip() if data.model_name else None,
            data.body_type,
            data.fuel_type,
            data.transmission_type,
            data.engine_size_cc,
            data.is_active,
        )
