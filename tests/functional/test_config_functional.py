"""Functional tests for layered configuration loading."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from formbuilder.config import DEFAULT_SECRET_KEY, load_config

_ENV_KEYS = (
    "TEST_DATABASE_URL",
    "DATABASE_URL",
    "AUTO_APPLY_MIGRATIONS",
    "AUTH_SECRET_KEY",
    "AUTH_TOKEN_TTL_SECONDS",
    "CORS_ORIGINS",
    "EXPORT_INCLUDE_HEADER",
    "LOG_LEVEL",
    "CATALOG_BACKEND",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_defaults(clean_env):
    cfg = load_config()
    assert cfg.database.dsn == "sqlite+pysqlite:///:memory:"
    assert cfg.database.auto_apply_migrations is True
    assert cfg.auth.secret_key == DEFAULT_SECRET_KEY
    assert cfg.auth.token_ttl_seconds == 7 * 24 * 3600
    assert cfg.cors.origins == ["*"]
    assert cfg.export.include_header is True
    assert cfg.logging.level == "INFO"
    assert cfg.catalog_backend == "sql"


def test_precedence_env_over_files_over_json(clean_env, monkeypatch):
    (clean_env / "formbuilder_config.json").write_text(
        json.dumps({
            "database": {"dsn": "sqlite:///from-json.db"},
            "auth": {"secret_key": "json-secret-key", "token_ttl_seconds": 120},
            "cors": {"origins": ["https://a.example", "https://b.example"]},
            "catalog_backend": "memory",
        }),
        encoding="utf-8",
    )
    (clean_env / "config").mkdir()
    (clean_env / "config" / "auth.secret_key").write_text("file-secret-key\n", encoding="utf-8")
    monkeypatch.setenv("AUTH_TOKEN_TTL_SECONDS", "90")
    monkeypatch.setenv("EXPORT_INCLUDE_HEADER", "no")

    cfg = load_config()
    assert cfg.database.dsn == "sqlite:///from-json.db"
    assert cfg.auth.secret_key == "file-secret-key"
    assert cfg.auth.token_ttl_seconds == 90
    assert cfg.cors.origins == ["https://a.example", "https://b.example"]
    assert cfg.export.include_header is False
    assert cfg.catalog_backend == "memory"


@pytest.mark.parametrize(
    "key, value",
    [
        ("CATALOG_BACKEND", "redis"),
        ("LOG_LEVEL", "chatty"),
        ("AUTH_SECRET_KEY", "short"),
        ("AUTH_TOKEN_TTL_SECONDS", "0"),
    ],
)
def test_invalid_values_raise(clean_env, monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(PydanticValidationError):
        load_config()
