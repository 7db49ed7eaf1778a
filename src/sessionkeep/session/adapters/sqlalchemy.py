# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""SQLAlchemy-backed session backend (async engine, Core statements)."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import (
    BigInteger,
    Column,
    Index,
    LargeBinary,
    MetaData,
    String,
    Table,
    delete,
    insert,
    select,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from sessionkeep.kernel.exceptions import BackendError
from sessionkeep.session.record import StoredEntry

_logger = logging.getLogger(__name__)


@contextmanager
def _translate_errors(operation: str, table: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise BackendError(
            str(exc),
            context={"operation": operation, "table": table, "backend": "sqlalchemy"},
        ) from exc


class SqlAlchemySessionBackend:
    """Session backend storing one row per session in a relational table.

    Each logical table maps to ``(id TEXT PRIMARY KEY, data BLOB, expiry_date
    BIGINT)`` with an index on ``expiry_date``. Every call runs in its own
    transaction. Upserts use the dialect's native conflict clause on
    PostgreSQL, SQLite and MySQL/MariaDB.

    Usage::

        engine = create_async_engine("sqlite+aiosqlite:///sessions.db")
        backend = SqlAlchemySessionBackend(engine)
        await backend.ensure_table("sessions")
    """

    def __init__(self, engine: AsyncEngine, schema: str | None = None) -> None:
        self._engine = engine
        self._metadata = MetaData(schema=schema)
        self._tables: dict[str, Table] = {}

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    def _table(self, name: str) -> Table:
        table = self._tables.get(name)
        if table is None:
            table = Table(
                name,
                self._metadata,
                Column("id", String(64), primary_key=True),
                Column("data", LargeBinary, nullable=False),
                Column("expiry_date", BigInteger, nullable=False),
                Index(f"ix_{name}_expiry_date", "expiry_date"),
            )
            self._tables[name] = table
        return table

    async def ensure_table(self, name: str) -> None:
        """Create the table and its expiry index if they do not exist."""
        table = self._table(name)
        with _translate_errors("ensure_table", name):
            async with self._engine.begin() as conn:
                await conn.run_sync(table.create, checkfirst=True)
        _logger.debug("Ensured session table '%s'", name)

    async def fetch(self, table: str, key: str) -> StoredEntry | None:
        t = self._table(table)
        with _translate_errors("fetch", table):
            async with self._engine.connect() as conn:
                result = await conn.execute(
                    select(t.c.data, t.c.expiry_date).where(t.c.id == key)
                )
                row = result.first()
        if row is None:
            return None
        return StoredEntry(data=bytes(row.data), expiry_date=int(row.expiry_date))

    def _upsert_statement(self, t: Table, values: dict[str, Any]) -> Any | None:
        dialect = self._engine.dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert as pg_insert

            stmt = pg_insert(t).values(**values)
            return stmt.on_conflict_do_update(
                index_elements=[t.c.id],
                set_={"data": stmt.excluded.data, "expiry_date": stmt.excluded.expiry_date},
            )
        if dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert as sqlite_insert

            stmt = sqlite_insert(t).values(**values)
            return stmt.on_conflict_do_update(
                index_elements=[t.c.id],
                set_={"data": stmt.excluded.data, "expiry_date": stmt.excluded.expiry_date},
            )
        if dialect in ("mysql", "mariadb"):
            from sqlalchemy.dialects.mysql import insert as mysql_insert

            stmt = mysql_insert(t).values(**values)
            return stmt.on_duplicate_key_update(
                data=stmt.inserted.data, expiry_date=stmt.inserted.expiry_date
            )
        return None

    async def upsert(self, table: str, key: str, entry: StoredEntry) -> None:
        t = self._table(table)
        values = {"id": key, "data": entry.data, "expiry_date": entry.expiry_date}
        stmt = self._upsert_statement(t, values)
        with _translate_errors("upsert", table):
            async with self._engine.begin() as conn:
                if stmt is not None:
                    await conn.execute(stmt)
                else:
                    # no native upsert: replace inside one transaction
                    await conn.execute(delete(t).where(t.c.id == key))
                    await conn.execute(insert(t).values(**values))

    async def insert_if_absent(self, table: str, key: str, entry: StoredEntry) -> bool:
        t = self._table(table)
        with _translate_errors("insert_if_absent", table):
            try:
                async with self._engine.begin() as conn:
                    await conn.execute(
                        insert(t).values(id=key, data=entry.data, expiry_date=entry.expiry_date)
                    )
            except IntegrityError:
                return False
        return True

    async def delete(self, table: str, key: str) -> None:
        t = self._table(table)
        with _translate_errors("delete", table):
            async with self._engine.begin() as conn:
                await conn.execute(delete(t).where(t.c.id == key))

    async def delete_expired(self, table: str, now: int) -> int:
        t = self._table(table)
        with _translate_errors("delete_expired", table):
            async with self._engine.begin() as conn:
                result = await conn.execute(delete(t).where(t.c.expiry_date <= now))
        return int(result.rowcount or 0)

    async def close(self) -> None:
        """Dispose of the engine's connection pool."""
        await self._engine.dispose()
