"""Configuration utilities for the audit service.

This module loads application configuration with the following rules:
- Primary source: `audit_config.json` at the project root.
- Overrides: optional text files under `config/`, then environment variables.
- Validation: Pydantic models enforce required fields and value constraints.

A missing backend DSN is not an error by itself: when the demo-mode fallback
is enabled the service runs on in-memory storage instead.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("audit_config.json")
logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class BackendConfig(BaseModel):
    dsn: Optional[str] = None
    demo_mode_fallback: bool = Field(default=True)
    auto_create_schema: bool = Field(default=True)

    @field_validator("dsn")
    @classmethod
    def dsn_blank_is_missing(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()


class CorsConfig(BaseModel):
    origins: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("origins")
    @classmethod
    def origins_non_empty(cls, v: List[str]) -> List[str]:
        cleaned = [o.strip() for o in v if o and o.strip()]
        if not cleaned:
            raise ValueError("cors.origins must list at least one origin")
        return cleaned


class AppConfig(BaseModel):
    backend: BackendConfig = Field(default_factory=BackendConfig)
    cors: CorsConfig = Field(default_factory=CorsConfig)

    @property
    def demo_mode(self) -> bool:
        return self.backend.dsn is None and self.backend.demo_mode_fallback


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) audit_config.json at project root
    4) Defaults (no DSN, demo fallback on)
    """

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        if isinstance(cur, list):
            return ",".join(str(x) for x in cur)
        if isinstance(cur, bool):
            return "true" if cur else "false"
        return str(cur) if cur is not None else default

    dsn = _env("AUDIT_BACKEND_DSN") or _read_config_file("backend.dsn") or _base("backend.dsn")
    fallback_text = (
        _env("AUDIT_DEMO_MODE_FALLBACK")
        or _read_config_file("backend.demo_mode_fallback")
        or _base("backend.demo_mode_fallback", "true")
    )
    schema_text = (
        _env("AUDIT_AUTO_CREATE_SCHEMA")
        or _read_config_file("backend.auto_create_schema")
        or _base("backend.auto_create_schema", "true")
    )
    origins_text = _env("AUDIT_CORS_ORIGINS") or _read_config_file("cors.origins") or _base("cors.origins", "*")

    try:
        cfg = AppConfig(
            backend=BackendConfig(
                dsn=dsn,
                demo_mode_fallback=str(fallback_text).strip().lower() in _TRUE,
                auto_create_schema=str(schema_text).strip().lower() in _TRUE,
            ),
            cors=CorsConfig(origins=str(origins_text).split(",")),
        )
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise
    logger.info(
        "config_loaded backend=%s demo_mode=%s",
        "dsn" if cfg.backend.dsn else "none",
        cfg.demo_mode,
    )
    return cfg


__all__ = [
    "AppConfig",
    "BackendConfig",
    "CorsConfig",
    "load_config",
]
