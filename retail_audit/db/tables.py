"""Table definitions for the backend row store.

Nested structures (sections, scoring rules, responses, location) are kept in
JSON columns the way the hosted backend stores them. Timestamps are RFC3339
strings so rows round-trip identically through every storage implementation.
"""

from __future__ import annotations

from sqlalchemy import JSON, Boolean, Column, Float, Integer, MetaData, String, Table, Text

metadata = MetaData()

template_categories = Table(
    "template_categories",
    metadata,
    Column("category_id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("description", Text, nullable=True),
    Column("icon", String, nullable=True),
    Column("color", String, nullable=True),
    Column("sort_order", Integer, nullable=False, default=0),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", String, nullable=True),
)

templates = Table(
    "templates",
    metadata,
    Column("template_id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("description", Text, nullable=True),
    Column("category_id", String, nullable=True),
    Column("version", Integer, nullable=False, default=1),
    Column("sections", JSON, nullable=False),
    Column("scoring_rules", JSON, nullable=False),
    Column("is_published", Boolean, nullable=False, default=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_by", String, nullable=True),
    Column("created_at", String, nullable=True),
    Column("updated_at", String, nullable=True),
    Column("published_at", String, nullable=True),
)

audits = Table(
    "audits",
    metadata,
    Column("audit_id", String, primary_key=True),
    Column("template_id", String, nullable=False),
    Column("status", String, nullable=False, default="pending"),
    Column("assigned_to", String, nullable=False),
    Column("location", JSON, nullable=True),
    Column("responses", JSON, nullable=False),
    Column("score", Float, nullable=True),
    Column("passed", Boolean, nullable=True),
    Column("submitted_at", String, nullable=True),
    Column("created_at", String, nullable=True),
    Column("updated_at", String, nullable=True),
)

TABLES = {t.name: t for t in (template_categories, templates, audits)}

__all__ = ["metadata", "template_categories", "templates", "audits", "TABLES"]
