"""In-memory storage used in demo mode and tests.

Holds one ordered dict of rows per table. Rows are deep-copied in and out so
callers never share state with the store.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Dict, List, Mapping, Optional

from retail_audit.logic.errors import StorageError
from retail_audit.logic.events import INSERT, UPDATE, ChangeEvent
from retail_audit.storage.base import TABLE_KEYS, Storage, utc_now

logger = logging.getLogger(__name__)


class InMemoryStorage(Storage):
    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.Lock()
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {name: {} for name in TABLE_KEYS}
        # Insertion sequence per row; breaks created_at ties when ordering
        self._seq: Dict[str, int] = {}
        self._counter = 0

    def _rows(self, table: str) -> Dict[str, Dict[str, Any]]:
        try:
            return self._tables[table]
        except KeyError:
            raise StorageError(f"unknown table {table}", table=table)

    def fetch(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [
                row
                for row in self._rows(table).values()
                if all(row.get(k) == v for k, v in (filters or {}).items())
            ]
            if order_by:
                key = self.primary_key(table)

                def _sort_key(row: Dict[str, Any]) -> tuple:
                    value = row.get(order_by)
                    # None sorts first ascending
                    return (value is not None, value if value is not None else 0, self._seq.get(f"{table}:{row[key]}", 0))

                rows = sorted(rows, key=_sort_key, reverse=descending)
            return copy.deepcopy(rows)

    def insert(self, table: str, record: Mapping[str, Any]) -> Dict[str, Any]:
        row = self.prepare_insert(table, copy.deepcopy(dict(record)))
        key = self.primary_key(table)
        with self._lock:
            rows = self._rows(table)
            if row[key] in rows:
                raise StorageError(f"duplicate key {row[key]}", table=table)
            rows[row[key]] = row
            self._counter += 1
            self._seq[f"{table}:{row[key]}"] = self._counter
            stored = copy.deepcopy(row)
        logger.info("storage_insert table=%s key=%s", table, row[key])
        self.feed.publish(ChangeEvent(INSERT, table, copy.deepcopy(stored)))
        return stored

    def update(self, table: str, filters: Mapping[str, Any], changes: Mapping[str, Any]) -> List[Dict[str, Any]]:
        events: List[ChangeEvent] = []
        updated: List[Dict[str, Any]] = []
        with self._lock:
            for row in self._rows(table).values():
                if not all(row.get(k) == v for k, v in filters.items()):
                    continue
                old = copy.deepcopy(row)
                row.update(copy.deepcopy(dict(changes)))
                if "updated_at" in old and "updated_at" not in changes:
                    row["updated_at"] = utc_now()
                updated.append(copy.deepcopy(row))
                events.append(ChangeEvent(UPDATE, table, copy.deepcopy(row), old))
        logger.info("storage_update table=%s filters=%s rows=%s", table, dict(filters), len(updated))
        for event in events:
            self.feed.publish(event)
        return updated


__all__ = ["InMemoryStorage"]
