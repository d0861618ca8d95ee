"""SQL-backed storage over the backend's database.

Uses SQLAlchemy Core against the tables in ``retail_audit.db.tables``.
Driver errors are logged with traceback and re-raised as StorageError so the
HTTP layer can report the backend as unavailable. Change events are
published in-process after each committed write.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import Table, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from retail_audit.db.base import get_engine
from retail_audit.db.tables import TABLES, metadata
from retail_audit.logic.errors import StorageError
from retail_audit.logic.events import INSERT, UPDATE, ChangeEvent
from retail_audit.storage.base import Storage, utc_now

logger = logging.getLogger(__name__)


class SqlStorage(Storage):
    def __init__(self, dsn: str, create_schema: bool = False, engine: Optional[Engine] = None) -> None:
        super().__init__()
        self.engine = engine or get_engine(dsn)
        if create_schema:
            self.create_schema()

    def create_schema(self) -> None:
        try:
            metadata.create_all(self.engine)
        except SQLAlchemyError:
            logger.error("storage_create_schema_failed", exc_info=True)
            raise StorageError("failed to create backend schema")
        logger.info("storage_schema_ready tables=%s", sorted(TABLES))

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning("storage_ping_failed error=%s", e)
            return False
        return True

    def _table(self, name: str) -> Table:
        try:
            return TABLES[name]
        except KeyError:
            raise StorageError(f"unknown table {name}", table=name)

    def _where(self, table: Table, stmt, filters: Optional[Mapping[str, Any]]):  # type: ignore[no-untyped-def]
        for column, value in (filters or {}).items():
            if column not in table.c:
                raise StorageError(f"unknown column {column}", table=table.name)
            stmt = stmt.where(table.c[column] == value)
        return stmt

    def _columns_only(self, table: Table, record: Mapping[str, Any]) -> Dict[str, Any]:
        unknown = sorted(k for k in record if k not in table.c)
        if unknown:
            raise StorageError(f"unknown columns {unknown}", table=table.name)
        return dict(record)

    def fetch(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        t = self._table(table)
        stmt = self._where(t, select(t), filters)
        if order_by:
            if order_by not in t.c:
                raise StorageError(f"unknown column {order_by}", table=table)
            column = t.c[order_by]
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError:
            logger.error("storage_fetch_failed table=%s filters=%s", table, dict(filters or {}), exc_info=True)
            raise StorageError("backend fetch failed", table=table)
        return [dict(r) for r in rows]

    def insert(self, table: str, record: Mapping[str, Any]) -> Dict[str, Any]:
        t = self._table(table)
        row = self._columns_only(t, self.prepare_insert(table, record))
        key = self.primary_key(table)
        try:
            with self.engine.begin() as conn:
                conn.execute(t.insert().values(**row))
        except SQLAlchemyError:
            logger.error("storage_insert_failed table=%s", table, exc_info=True)
            raise StorageError("backend insert failed", table=table)
        stored = self.fetch_one(table, key, row[key]) or row
        logger.info("storage_insert table=%s key=%s", table, row[key])
        self.feed.publish(ChangeEvent(INSERT, table, stored))
        return stored

    def update(self, table: str, filters: Mapping[str, Any], changes: Mapping[str, Any]) -> List[Dict[str, Any]]:
        t = self._table(table)
        key = self.primary_key(table)
        values = self._columns_only(t, changes)
        if "updated_at" in t.c and "updated_at" not in values:
            values["updated_at"] = utc_now()

        before = {row[key]: row for row in self.fetch(table, filters=filters)}
        if not before:
            return []
        try:
            with self.engine.begin() as conn:
                conn.execute(t.update().where(t.c[key].in_(list(before))).values(**values))
                rows = conn.execute(select(t).where(t.c[key].in_(list(before)))).mappings().all()
        except SQLAlchemyError:
            logger.error("storage_update_failed table=%s filters=%s", table, dict(filters), exc_info=True)
            raise StorageError("backend update failed", table=table)

        updated = [dict(r) for r in rows]
        logger.info("storage_update table=%s filters=%s rows=%s", table, dict(filters), len(updated))
        for row in updated:
            self.feed.publish(ChangeEvent(UPDATE, table, row, before[row[key]]))
        return updated


__all__ = ["SqlStorage"]
