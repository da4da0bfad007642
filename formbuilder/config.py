"""Configuration utilities for the form builder service.

This module loads application configuration with the following rules:
- Primary source: `formbuilder_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG_FILE = Path("formbuilder_config.json")
DEFAULT_SECRET_KEY = "formbuilder-dev-secret"
logger = logging.getLogger(__name__)


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


def _truthy(value: object) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


class DatabaseConfig(BaseModel):
    dsn: str
    auto_apply_migrations: bool = Field(default=False)

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v.strip()


class AuthConfig(BaseModel):
    secret_key: str
    token_ttl_seconds: int = Field(default=7 * 24 * 3600, gt=0)

    @field_validator("secret_key")
    @classmethod
    def secret_must_be_long_enough(cls, v: str) -> str:
        if len(v or "") < 8:
            raise ValueError("auth.secret_key must be at least 8 characters")
        return v


class CorsConfig(BaseModel):
    origins: List[str] = Field(default_factory=lambda: ["*"])


class ExportConfig(BaseModel):
    include_header: bool = Field(default=True)


class LoggingConfig(BaseModel):
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        level = (v or "").strip().upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(f"logging.level must be one of {sorted(allowed)}")
        return level


class AppConfig(BaseModel):
    database: DatabaseConfig
    auth: AuthConfig
    cors: CorsConfig = Field(default_factory=CorsConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    catalog_backend: str = "sql"

    @field_validator("catalog_backend")
    @classmethod
    def backend_must_be_known(cls, v: str) -> str:
        backend = (v or "").strip().lower()
        if backend not in {"sql", "memory"}:
            raise ValueError("catalog_backend must be 'sql' or 'memory'")
        return backend


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            return data if isinstance(data, dict) else {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) formbuilder_config.json at project root
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_CONFIG_FILE)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        if isinstance(cur, list):
            return ",".join(str(item) for item in cur)
        return str(cur) if cur is not None else default

    # Database
    dsn = (
        _env("TEST_DATABASE_URL")
        or _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or "sqlite+pysqlite:///:memory:"
    )
    auto_migrate_text = (
        _env("AUTO_APPLY_MIGRATIONS")
        or _read_config_file("database.auto_apply_migrations")
        or _base("database.auto_apply_migrations", "true")
    )

    # Auth
    secret_key = _env("AUTH_SECRET_KEY") or _read_config_file("auth.secret_key") or _base("auth.secret_key")
    if not secret_key:
        logger.warning("auth_secret_key_default_in_use")
        secret_key = DEFAULT_SECRET_KEY
    ttl_text = _env("AUTH_TOKEN_TTL_SECONDS") or _read_config_file("auth.token_ttl_seconds") or _base("auth.token_ttl_seconds", "604800")

    # CORS, export, logging, backend
    origins_text = _env("CORS_ORIGINS") or _read_config_file("cors.origins") or _base("cors.origins", "*")
    include_header_text = _env("EXPORT_INCLUDE_HEADER") or _read_config_file("export.include_header") or _base("export.include_header", "true")
    log_level = _env("LOG_LEVEL") or _read_config_file("logging.level") or _base("logging.level", "INFO")
    backend = _env("CATALOG_BACKEND") or _read_config_file("catalog.backend") or _base("catalog_backend", "sql")

    try:
        cfg = AppConfig(
            database=DatabaseConfig(dsn=dsn, auto_apply_migrations=_truthy(auto_migrate_text)),
            auth=AuthConfig(secret_key=secret_key, token_ttl_seconds=str(ttl_text).strip()),  # type: ignore[arg-type]
            cors=CorsConfig(origins=[o.strip() for o in str(origins_text).split(",") if o.strip()]),
            export=ExportConfig(include_header=_truthy(include_header_text)),
            logging=LoggingConfig(level=str(log_level)),
            catalog_backend=str(backend),
        )
        return cfg
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "AuthConfig",
    "CorsConfig",
    "DatabaseConfig",
    "ExportConfig",
    "LoggingConfig",
    "load_config",
]
