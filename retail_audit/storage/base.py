"""Storage interface to the backend row store.

The engine and routes depend only on this capability set: filtered/ordered
fetch, insert, update and a per-table change subscription. There is no hard
delete; rows are retired through their ``is_active`` flag.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from retail_audit.logic.errors import StorageError
from retail_audit.logic.events import ChangeCallback, ChangeFeed, Subscription

# Table name -> primary key field
TABLE_KEYS: Dict[str, str] = {
    "template_categories": "category_id",
    "templates": "template_id",
    "audits": "audit_id",
}


def utc_now() -> str:
    """RFC3339 UTC timestamp with trailing 'Z'."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


class Storage(ABC):
    def __init__(self) -> None:
        self.feed = ChangeFeed()

    @abstractmethod
    def fetch(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        """Return rows matching all equality ``filters``."""

    @abstractmethod
    def insert(self, table: str, record: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored."""

    @abstractmethod
    def update(self, table: str, filters: Mapping[str, Any], changes: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """Apply ``changes`` to rows matching ``filters``; return the updated rows."""

    def fetch_one(self, table: str, key_field: str, key: Any) -> Optional[Dict[str, Any]]:
        rows = self.fetch(table, filters={key_field: key})
        return rows[0] if rows else None

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        return self.feed.subscribe(table, callback)

    def ping(self) -> bool:
        """Report whether the backend answers; always true for local stores."""
        return True

    def close(self) -> None:
        """Release backend resources; no-op by default."""

    @staticmethod
    def primary_key(table: str) -> str:
        try:
            return TABLE_KEYS[table]
        except KeyError:
            raise StorageError(f"unknown table {table}", table=table)

    def prepare_insert(self, table: str, record: Mapping[str, Any]) -> Dict[str, Any]:
        """Fill the generated fields a backend would default on insert."""
        row = dict(record)
        key = self.primary_key(table)
        if not row.get(key):
            row[key] = str(uuid.uuid4())
        now = utc_now()
        if not row.get("created_at"):
            row["created_at"] = now
        if table != "template_categories" and not row.get("updated_at"):
            row["updated_at"] = now
        return row


__all__ = ["TABLE_KEYS", "Storage", "utc_now"]
