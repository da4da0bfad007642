"""Behave environment hooks for form builder integration tests.

When `TEST_BASE_URL` is set, scenarios drive a live API over HTTP with httpx.
Otherwise they run in-process: the FastAPI app is built with an in-memory
catalog and exercised through Starlette's TestClient (an httpx client), so
the same steps work in both modes.
"""

from __future__ import annotations

import os
from typing import Any

import httpx


def _in_process_client() -> httpx.Client:
    from fastapi.testclient import TestClient

    from formbuilder.config import AppConfig, AuthConfig, DatabaseConfig
    from formbuilder.logic.inmemory_catalog import InMemoryFormCatalog
    from formbuilder.main import create_app

    config = AppConfig(
        database=DatabaseConfig(dsn="sqlite+pysqlite:///:memory:", auto_apply_migrations=False),
        auth=AuthConfig(secret_key=os.getenv("AUTH_SECRET_KEY", "integration-secret")),
        catalog_backend="memory",
    )
    return TestClient(create_app(config=config, catalog=InMemoryFormCatalog()))


def before_all(context: Any) -> None:
    base = os.getenv("TEST_BASE_URL", "").strip().rstrip("/")
    context.api_prefix = os.getenv("TEST_API_PREFIX", "/api/v1")
    if base:
        context.client = httpx.Client(base_url=base, timeout=10.0)
        context.mode = "live"
    else:
        context.client = _in_process_client()
        context.mode = "in-process"


def before_scenario(context: Any, scenario: Any) -> None:
    context.users = {}
    context.forms = {}
    context.questions = {}
    context.last_response = None
    context.run_tag = os.urandom(4).hex()


def after_all(context: Any) -> None:
    client = getattr(context, "client", None)
    if client is not None:
        client.close()
