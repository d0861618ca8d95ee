"""Configuration loading precedence and validation."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from retail_audit import config as config_module
from retail_audit.config import load_config

_ENV_KEYS = ("AUDIT_BACKEND_DSN", "AUDIT_DEMO_MODE_FALLBACK", "AUDIT_AUTO_CREATE_SCHEMA", "AUDIT_CORS_ORIGINS")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config_module, "CONFIG_DIR", tmp_path / "config")
    monkeypatch.setattr(config_module, "ROOT_CONFIG", tmp_path / "audit_config.json")
    return tmp_path


def test_defaults_select_demo_mode():
    cfg = load_config()
    assert cfg.backend.dsn is None
    assert cfg.demo_mode is True
    assert cfg.cors.origins == ["*"]


def test_root_json_is_read(isolated_config):
    (isolated_config / "audit_config.json").write_text(
        json.dumps({"backend": {"dsn": "sqlite:///json.db"}, "cors": {"origins": ["https://a.example", "https://b.example"]}}),
        encoding="utf-8",
    )
    cfg = load_config()
    assert cfg.backend.dsn == "sqlite:///json.db"
    assert cfg.demo_mode is False
    assert cfg.cors.origins == ["https://a.example", "https://b.example"]


def test_config_files_override_json_and_env_overrides_files(isolated_config, monkeypatch):
    (isolated_config / "audit_config.json").write_text(json.dumps({"backend": {"dsn": "sqlite:///json.db"}}), encoding="utf-8")
    (isolated_config / "config").mkdir()
    (isolated_config / "config" / "backend.dsn").write_text("sqlite:///file.db\n", encoding="utf-8")
    assert load_config().backend.dsn == "sqlite:///file.db"

    monkeypatch.setenv("AUDIT_BACKEND_DSN", "sqlite:///env.db")
    assert load_config().backend.dsn == "sqlite:///env.db"


def test_demo_fallback_can_be_disabled(monkeypatch):
    monkeypatch.setenv("AUDIT_DEMO_MODE_FALLBACK", "false")
    cfg = load_config()
    assert cfg.backend.demo_mode_fallback is False
    assert cfg.demo_mode is False


def test_blank_dsn_counts_as_missing(monkeypatch):
    monkeypatch.setenv("AUDIT_BACKEND_DSN", "   ")
    assert load_config().backend.dsn is None


def test_empty_cors_origins_are_rejected(monkeypatch):
    monkeypatch.setenv("AUDIT_CORS_ORIGINS", " , ")
    with pytest.raises(ValidationError):
        load_config()


def test_log_level_comes_from_environment(monkeypatch):
    from retail_audit.logging_setup import build_logging_config, resolve_level

    monkeypatch.setenv("AUDIT_LOG_LEVEL", "debug")
    assert resolve_level() == "DEBUG"
    monkeypatch.setenv("AUDIT_LOG_LEVEL", "chatty")
    assert resolve_level() == "INFO"
    assert resolve_level("warning") == "WARNING"

    config = build_logging_config("ERROR")
    assert config["root"]["level"] == "ERROR"
    assert config["loggers"]["sqlalchemy.engine"]["level"] == "WARNING"
