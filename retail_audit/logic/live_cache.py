"""Locally cached table rows kept current by the change feed.

``apply_change`` is the pure delta rule (insert prepends, update replaces in
place, delete removes); ``LiveList`` seeds itself from storage and applies
every subsequent event it receives.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Dict, List, Optional

from retail_audit.logic.events import DELETE, INSERT, UPDATE, ChangeEvent, Subscription

logger = logging.getLogger(__name__)


def apply_change(records: List[Dict[str, Any]], event: ChangeEvent, key: str) -> List[Dict[str, Any]]:
    """Return a new list with ``event`` applied to ``records``."""
    record_key = (event.record or {}).get(key)
    if record_key is None and event.old_record:
        record_key = event.old_record.get(key)
    rest = [r for r in records if r.get(key) != record_key]

    if event.event_type == INSERT:
        return [dict(event.record)] + rest
    if event.event_type == UPDATE:
        updated = []
        replaced = False
        for r in records:
            if r.get(key) == record_key:
                updated.append(dict(event.record))
                replaced = True
            else:
                updated.append(r)
        return updated if replaced else [dict(event.record)] + updated
    if event.event_type == DELETE:
        return rest
    logger.warning("live_cache_unknown_event type=%s table=%s", event.event_type, event.table)
    return list(records)


class LiveList:
    def __init__(
        self,
        storage: Any,
        table: str,
        key: str,
        order_by: Optional[str] = "created_at",
        descending: bool = True,
    ) -> None:
        self._storage = storage
        self.table = table
        self.key = key
        self._order_by = order_by
        self._descending = descending
        self._lock = threading.Lock()
        self._records: List[Dict[str, Any]] = []
        self._subscription: Optional[Subscription] = None

    def start(self) -> "LiveList":
        self._subscription = self._storage.subscribe(self.table, self._on_change)
        self.refresh()
        return self

    def refresh(self) -> None:
        rows = self._storage.fetch(self.table, order_by=self._order_by, descending=self._descending)
        with self._lock:
            self._records = rows
        logger.info("live_cache_refreshed table=%s rows=%s", self.table, len(rows))

    def _on_change(self, event: ChangeEvent) -> None:
        with self._lock:
            self._records = apply_change(self._records, event, self.key)

    def snapshot(self) -> List[Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._records)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None


__all__ = ["apply_change", "LiveList"]
