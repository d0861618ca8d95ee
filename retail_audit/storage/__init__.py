"""Storage implementations and startup selection.

`build_storage` picks the implementation from configuration: the SQL
backend when a DSN is configured, the seeded in-memory store in demo mode,
and a ConfigurationError when neither is allowed.
"""

from __future__ import annotations

import logging

from retail_audit.config import AppConfig
from retail_audit.logic.errors import ConfigurationError
from retail_audit.logic.presets import seed_demo_data
from retail_audit.storage.base import TABLE_KEYS, Storage, utc_now
from retail_audit.storage.memory import InMemoryStorage
from retail_audit.storage.sql import SqlStorage

logger = logging.getLogger(__name__)


def build_storage(config: AppConfig) -> Storage:
    dsn = config.backend.dsn
    if dsn:
        logger.info("storage_selected kind=sql")
        return SqlStorage(dsn, create_schema=config.backend.auto_create_schema)
    if config.demo_mode:
        logger.warning("storage_selected kind=memory reason=backend_dsn_missing demo_mode=true")
        storage = InMemoryStorage()
        seed_demo_data(storage)
        return storage
    raise ConfigurationError("backend DSN is not configured and demo-mode fallback is disabled")


__all__ = [
    "TABLE_KEYS",
    "Storage",
    "InMemoryStorage",
    "SqlStorage",
    "build_storage",
    "utc_now",
]
