"""Database bootstrap utilities for the SQL storage backend.

Exposes engine construction and the Core table definitions. No ORM models
leak into route handlers.
"""

from retail_audit.db.base import get_engine
from retail_audit.db.tables import TABLES, metadata

__all__ = ["get_engine", "TABLES", "metadata"]
