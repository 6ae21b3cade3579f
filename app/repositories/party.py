"""Customers and suppliers.

The two tables are symmetric (name, title, contact details, type, is_active),
so one repository class is parameterised by table and column names. Deletes
are soft: ``is_active`` is set to false.
"""

from __future__ import annotations

from typing import Any

from app.db.executor import Executor
from app.domain.party import Customer, Supplier
from app.query.builder import QueryBuilder
from app.schemas.common import ApiModel

SEARCH_RESULT_LIMIT = 50


class PartyRepository:
    table: str = ""
    name_column: str = ""
    type_column: str = ""
    columns: tuple[str, ...] = ()
    writable: tuple[str, ...] = ()
    entity: type = Customer

    @property
    def _select(self) -> str:
        return ", ".join(self.columns)

    def _search_expression(self) -> str:
        return (
            f"({self.name_column} || ' ' || COALESCE(contact_number, '') "
            "|| ' ' || COALESCE(email, ''))"
        )

    def _builder(self, party_type: str | None, active_only: bool, search: str | None) -> QueryBuilder:
        qb = QueryBuilder()
        if party_type:
            qb.add_equal(self.type_column, party_type)
        if active_only:
            qb.add_equal("is_active", True)
        if search:
            qb.add_like(self._search_expression(), search)
        return qb

    async def insert(self, db: Executor, data: ApiModel, **overrides: Any) -> Any:
        values = {c: getattr(data, c, None) for c in self.writable}
        values.update(overrides)
        placeholders = ", ".join(f"${i}" for i in range(1, len(values) + 1))
        row = await db.query_row(
            f"""INSERT INTO {self.table} ({", ".join(values)}, is_active)
                VALUES ({placeholders}, true)
                RETURNING {self._select}""",
            *values.values(),
        )
        return self.entity.model_validate(row)

    async def get_all(
        self,
        db: Executor,
        party_type: str | None = None,
        active_only: bool = False,
        search: str | None = None,
        limit: int = 0,
        offset: int = 0,
    ) -> list[Any]:
        qb = self._builder(party_type, active_only, search)
        sql, args = qb.build(
            f"SELECT {self._select} FROM {self.table}",
            order_by=f"{self.name_column} ASC, id ASC",
            limit=limit,
            offset=offset,
        )
        return self.entity.from_rows(await db.query(sql, *args))

    async def count(
        self,
        db: Executor,
        party_type: str | None = None,
        active_only: bool = False,
        search: str | None = None,
    ) -> int:
        qb = self._builder(party_type, active_only, search)
        sql, args = qb.build(f"SELECT COUNT(*) AS total FROM {self.table}", count_only=True)
        row = await db.query_row(sql, *args)
        return int(row["total"]) if row else 0

    async def get_by_id(self, db: Executor, party_id: int) -> Any | None:
        row = await db.query_row(f"SELECT {self._select} FROM {self.table} WHERE id = $1", party_id)
        return self.entity.from_row(row)

    async def update(self, db: Executor, party_id: int, data: ApiModel) -> int:
        fields = (*self.writable, "is_active")
        assignments = ",\n                ".join(
            f"{c} = COALESCE(${i}, {c})" for i, c in enumerate(fields, start=2)
        )
        return await db.exec(
            f"""UPDATE {self.table}
            SET {assignments},
                updated_at = CURRENT_TIMESTAMP
            WHERE id = $1""",
            party_id,
            *[getattr(data, c, None) for c in fields],
        )

    async def soft_delete(self, db: Executor, party_id: int) -> int:
        return await db.exec(
            f"""UPDATE {self.table}
                SET is_active = false, updated_at = CURRENT_TIMESTAMP
                WHERE id = $1""",
            party_id,
        )

    async def search(self, db: Executor, term: str) -> list[Any]:
        rows = await db.query(
            f"""SELECT {self._select} FROM {self.table}
                WHERE (
                    LOWER({self.name_column}) LIKE LOWER($1) OR
                    LOWER(contact_number) LIKE LOWER($1) OR
                    LOWER(email) LIKE LOWER($1)
                )
                AND is_active = true
                ORDER BY {self.name_column}, id
                LIMIT {SEARCH_RESULT_LIMIT}""",
            f"%{term}%",
        )
        return self.entity.from_rows(rows)


class CustomerRepository(PartyRepository):
    table = "cars.customers"
    name_column = "customer_name"
    type_column = "customer_type"
    columns = (
        "id", "customer_title", "customer_name", "contact_number", "email", "address",
        "other_contacts", "customer_type", "is_active", "created_at", "updated_at",
    )
    writable = (
        "customer_title", "customer_name", "contact_number", "email", "address",
        "other_contacts", "customer_type",
    )
    entity = Customer

    async def get_by_contact_number(self, db: Executor, contact_number: str) -> Customer | None:
        row = await db.query_row(
            f"""SELECT {self._select} FROM {self.table}
                WHERE contact_number = $1
                ORDER BY id LIMIT 1""",
            contact_number,
        )
        return Customer.from_row(row)


class SupplierRepository(PartyRepository):
    table = "cars.suppliers"
    name_column = "supplier_name"
    type_column = "supplier_type"
    columns = (
        "id", "supplier_name", "supplier_title", "contact_number", "email", "address",
        "other_contacts", "supplier_type", "country", "is_active", "created_at", "updated_at",
    )
    writable = (
        "supplier_name", "supplier_title", "contact_number", "email", "address",
        "other_contacts", "supplier_type", "country",
    )
    entity = Supplier
