"""SQLAlchemy engine construction.

The backend database is PostgreSQL in production; SQLite is supported for
local development and CI. This module only manages engine lifecycle.
"""

from __future__ import annotations

import logging
from typing import Dict

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# One engine per URL so storage instances built for the same backend share a pool
_ENGINES: Dict[str, Engine] = {}


def get_engine(url: str) -> Engine:
    """Return a cached SQLAlchemy Engine for the given URL.

    For SQLite in-memory URLs, use a StaticPool to keep a single connection
    alive across sessions and threads.
    """
    engine = _ENGINES.get(url)
    if engine is None:
        kwargs: dict = {"future": True, "pool_pre_ping": True}
        if url.startswith("sqlite") and ":memory:" in url:
            kwargs.update({
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            })
        engine = create_engine(url, **kwargs)
        _ENGINES[url] = engine
        logger.info("db_engine_created dialect=%s", engine.dialect.name)
    return engine


__all__ = ["get_engine"]
