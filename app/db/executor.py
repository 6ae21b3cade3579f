"""Executor: the capability repositories use to run parameterised SQL.

Repositories receive an Executor and never open transactions themselves. The
same ``SessionExecutor`` serves plain reads and, inside ``transaction()``,
multi-statement writes, so repository code is identical in both cases.

SQL is written with PostgreSQL positional placeholders (``$1``, ``$2`` ...).
``SessionExecutor`` rewrites them into named binds for ``sqlalchemy.text``.
Casts on placeholders must use ``CAST($N AS type)``; ``$N::type`` does not
survive the rewrite.
"""


import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Protocol

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import get_db

Row = dict[str, Any]

_PLACEHOLDER = re.compile(r"\$(\d+)")
_UNIQUE_VIOLATION = "23505"


class DuplicateKeyError(Exception):
    """A unique constraint rejected the statement."""


class Executor(Protocol):
    async def exec(self, sql: str, *args: Any) -> int: ...

    async def query_row(self, sql: str, *args: Any) -> Row | None: ...

    async def query(self, sql: str, *args: Any) -> list[Row]: ...


class TransactionalExecutor(Executor, Protocol):
    def transaction(self) -> Any: ...


def bind_positional(sql: str, args: tuple | list) -> tuple[str, dict[str, Any]]:
    """Rewrite ``$N`` placeholders to ``:pN`` and build the matching bind dict."""
    params = {f"p{i}": value for i, value in enumerate(args, start=1)}
    return _PLACEHOLDER.sub(lambda m: f":p{m.group(1)}", sql), params


class SessionExecutor:
    """Executor backed by an ``AsyncSession``."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _execute(self, sql: str, args: tuple):
        stmt, params = bind_positional(sql, args)
        try:
            return await self._session.execute(text(stmt), params)
        except IntegrityError as exc:
            code = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
            if code == _UNIQUE_VIOLATION:
                raise DuplicateKeyError(str(exc.orig)) from exc
            raise

    async def exec(self, sql: str, *args: Any) -> int:
        result = await self._execute(sql, args)
        return result.rowcount or 0

    async def query_row(self, sql: str, *args: Any) -> Row | None:
        result = await self._execute(sql, args)
        row = result.mappings().first()
        return dict(row) if row is not None else None

    async def query(self, sql: str, *args: Any) -> list[Row]:
        result = await self._execute(sql, args)
        return [dict(r) for r in result.mappings().all()]

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SessionExecutor"]:
        """Run the enclosed statements atomically; rollback on any exception."""
        if self._session.in_transaction():
            # close the implicit read transaction so begin() starts clean
            await self._session.commit()
        async with self._session.begin():
            yield self


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------
async def get_executor(session: AsyncSession = Depends(get_db)) -> SessionExecutor:
    return SessionExecutor(session)
