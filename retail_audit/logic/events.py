"""Row change events and an in-process change feed.

Storage implementations publish one event per written row after the write
succeeds; subscribers receive ``ChangeEvent`` objects for the tables they
subscribed to. A failing subscriber is logged and does not affect the write
or the other subscribers.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    event_type: str
    table: str
    record: Dict[str, Any]
    old_record: Optional[Dict[str, Any]] = None


ChangeCallback = Callable[[ChangeEvent], None]


class Subscription:
    def __init__(self, feed: "ChangeFeed", table: str, token: int) -> None:
        self._feed = feed
        self.table = table
        self._token = token

    def unsubscribe(self) -> None:
        self._feed._remove(self.table, self._token)


class ChangeFeed:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._callbacks: Dict[str, Dict[int, ChangeCallback]] = {}
        self._tokens = itertools.count(1)

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        with self._lock:
            token = next(self._tokens)
            self._callbacks.setdefault(table, {})[token] = callback
        logger.info("change_feed_subscribe table=%s token=%s", table, token)
        return Subscription(self, table, token)

    def _remove(self, table: str, token: int) -> None:
        with self._lock:
            self._callbacks.get(table, {}).pop(token, None)
        logger.info("change_feed_unsubscribe table=%s token=%s", table, token)

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            callbacks: List[ChangeCallback] = list(self._callbacks.get(event.table, {}).values())
        for callback in callbacks:
            try:
                callback(event)
            except Exception:
                logger.error(
                    "change_feed_callback_failed table=%s event_type=%s",
                    event.table,
                    event.event_type,
                    exc_info=True,
                )


__all__ = [
    "INSERT",
    "UPDATE",
    "DELETE",
    "ChangeEvent",
    "ChangeCallback",
    "Subscription",
    "ChangeFeed",
]
