"""
Record store -- the engine's only door to persistent storage.

Responsibility:
    Defines the ``RecordStore`` protocol (find / upsert-by-key / insert /
    delete-by-key over plain dict records) and two implementations:

    * ``InMemoryRecordStore`` -- process-local tables, for embedding the
      engine and for tests.
    * ``SqlRecordStore`` -- SQLAlchemy Core over the tables declared in
      ``claims_kernel.models``.  Each call runs in its own transaction on a
      worker thread so the event loop is never blocked.

Architecture position:
    Kernel > Services.  Everything above this module (context resolver,
    persistence adapter, review service) speaks only the protocol.

Invariants enforced:
    - Records cross the boundary as plain dicts keyed by column name; the
      SQL surrogate key never leaks out.
    - ``upsert_by_key`` updates every row matching the key, or inserts one
      row made of key + fields when none matches.
    - ``delete_by_key`` removes every row matching the key (used for the
      per-claim delete-then-insert of checklist and person rows).

Failure modes:
    - SqlRecordStore wraps any SQLAlchemy error, and unknown tables or
      columns, in ``PersistenceError`` carrying the store's message.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import Table, and_, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from claims_kernel.db.base import SURROGATE_KEY, Base
from claims_kernel.db.engine import get_session_factory, session_scope
from claims_kernel.exceptions import PersistenceError
from claims_kernel.logging_config import get_logger

logger = get_logger("services.record_store")

Record = dict[str, Any]


def _table_name(table: Any) -> str:
    return getattr(table, "value", table)


@runtime_checkable
class RecordStore(Protocol):
    """Async record-store contract consumed by the engine."""

    async def find(self, table: str, filter: Mapping[str, Any]) -> list[Record]:
        ...

    async def upsert_by_key(
        self, table: str, key: Mapping[str, Any], fields: Mapping[str, Any]
    ) -> None:
        ...

    async def insert(self, table: str, fields: Mapping[str, Any]) -> None:
        ...

    async def delete_by_key(self, table: str, key: Mapping[str, Any]) -> int:
        ...


def _matches(row: Mapping[str, Any], criteria: Mapping[str, Any]) -> bool:
    return all(row.get(k) == v for k, v in criteria.items())


class InMemoryRecordStore:
    """
    Process-local record store.

    Contract:
        Implements ``RecordStore``.  Rows are deep-copied on the way in and
        on the way out, so callers can never mutate stored state in place.
    """

    def __init__(self, tables: Mapping[str, list[Record]] | None = None):
        self._tables: dict[str, list[Record]] = {}
        for name, rows in (tables or {}).items():
            self.seed(name, rows)

    def seed(self, table: str, rows: list[Record]) -> None:
        """Append rows synchronously (fixtures and embedding)."""
        self._tables.setdefault(_table_name(table), []).extend(
            copy.deepcopy(r) for r in rows
        )

    def rows(self, table: str) -> list[Record]:
        """Synchronous snapshot of a table."""
        return copy.deepcopy(self._tables.get(_table_name(table), []))

    async def find(self, table: str, filter: Mapping[str, Any]) -> list[Record]:
        rows = self._tables.get(_table_name(table), [])
        return [copy.deepcopy(r) for r in rows if _matches(r, filter)]

    async def upsert_by_key(
        self, table: str, key: Mapping[str, Any], fields: Mapping[str, Any]
    ) -> None:
        rows = self._tables.setdefault(_table_name(table), [])
        matched = [r for r in rows if _matches(r, key)]
        if matched:
            for r in matched:
                r.update(copy.deepcopy(dict(fields)))
        else:
            rows.append({**copy.deepcopy(dict(key)), **copy.deepcopy(dict(fields))})

    async def insert(self, table: str, fields: Mapping[str, Any]) -> None:
        self._tables.setdefault(_table_name(table), []).append(
            copy.deepcopy(dict(fields))
        )

    async def delete_by_key(self, table: str, key: Mapping[str, Any]) -> int:
        rows = self._tables.get(_table_name(table), [])
        kept = [r for r in rows if not _matches(r, key)]
        removed = len(rows) - len(kept)
        self._tables[_table_name(table)] = kept
        return removed


class SqlRecordStore:
    """
    Record store backed by the SQLAlchemy tables in ``claims_kernel.models``.

    Contract:
        Implements ``RecordStore``.  Every call is one transaction: committed
        on success, rolled back on failure.

    Non-goals:
        No query language beyond equality filters; no cross-call transactions.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        import claims_kernel.models  # noqa: F401  (registers tables)

        self._session_factory = session_factory or get_session_factory()

    def _table(self, name: str) -> Table:
        try:
            return Base.metadata.tables[name]
        except KeyError:
            raise PersistenceError("resolve", name, f"Unknown table: {name}") from None

    @staticmethod
    def _where(table: Table, criteria: Mapping[str, Any]):
        try:
            return and_(True, *[table.c[k] == v for k, v in criteria.items()])
        except KeyError as exc:
            raise PersistenceError(
                "resolve", table.name, f"Unknown column {exc.args[0]!r} on {table.name}"
            ) from None

    @staticmethod
    def _to_record(row: Any) -> Record:
        return {k: v for k, v in row._mapping.items() if k != SURROGATE_KEY}

    async def _run(self, operation: str, table: str, fn, *args) -> Any:
        try:
            return await asyncio.to_thread(fn, *args)
        except PersistenceError:
            raise
        except SQLAlchemyError as exc:
            logger.error(
                "record_store_failed",
                extra={"operation": operation, "table": table},
                exc_info=True,
            )
            raise PersistenceError(operation, table, str(exc)) from exc

    # -- sync bodies (worker thread) ------------------------------------

    def _find_sync(self, name: str, criteria: Mapping[str, Any]) -> list[Record]:
        table = self._table(name)
        with session_scope(self._session_factory) as session:
            result = session.execute(select(table).where(self._where(table, criteria)))
            return [self._to_record(r) for r in result]

    def _upsert_sync(
        self, name: str, key: Mapping[str, Any], fields: Mapping[str, Any]
    ) -> None:
        table = self._table(name)
        where = self._where(table, key)
        with session_scope(self._session_factory) as session:
            existing = session.execute(
                select(table.c[SURROGATE_KEY]).where(where)
            ).first()
            if existing is not None:
                session.execute(update(table).where(where).values(**dict(fields)))
            else:
                session.execute(insert(table).values(**{**dict(key), **dict(fields)}))

    def _insert_sync(self, name: str, fields: Mapping[str, Any]) -> None:
        table = self._table(name)
        with session_scope(self._session_factory) as session:
            session.execute(insert(table).values(**dict(fields)))

    def _delete_sync(self, name: str, key: Mapping[str, Any]) -> int:
        table = self._table(name)
        with session_scope(self._session_factory) as session:
            result = session.execute(delete(table).where(self._where(table, key)))
            return result.rowcount or 0

    # -- protocol ----------------------------------------------------------

    async def find(self, table: str, filter: Mapping[str, Any]) -> list[Record]:
        name = _table_name(table)
        return await self._run("find", name, self._find_sync, name, filter)

    async def upsert_by_key(
        self, table: str, key: Mapping[str, Any], fields: Mapping[str, Any]
    ) -> None:
        name = _table_name(table)
        await self._run("upsert", name, self._upsert_sync, name, key, fields)

    async def insert(self, table: str, fields: Mapping[str, Any]) -> None:
        name = _table_name(table)
        await self._run("insert", name, self._insert_sync, name, fields)

    async def delete_by_key(self, table: str, key: Mapping[str, Any]) -> int:
        name = _table_name(table)
        return await self._run("delete", name, self._delete_sync, name, key)
