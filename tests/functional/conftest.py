"""Functional test bootstrap.

The SQL catalog runs against a file-backed SQLite database created fresh for
the session; migrations are applied once at session start and every table is
emptied after each test. Most API tests run twice, once per catalog
implementation, through the parametrized `catalog` fixture.
"""

from __future__ import annotations

import os
import pathlib
from typing import Any, Dict, Iterable, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text as sql_text

_ROOT = pathlib.Path(__file__).resolve().parents[2]
_DB_FILE = _ROOT / "tmp" / "functional_tests.db"
_DB_FILE.parent.mkdir(parents=True, exist_ok=True)
if _DB_FILE.exists():
    _DB_FILE.unlink()

# Point the service at the shared file DB before anything builds an engine
os.environ["TEST_DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
os.environ["DATABASE_URL"] = os.environ["TEST_DATABASE_URL"]
# Migrations are applied explicitly below
os.environ["AUTO_APPLY_MIGRATIONS"] = "0"

TEST_SECRET = "functional-test-secret"
_TABLES_CHILD_FIRST = ("answer", "response", "question", "form", "app_user")


@pytest.fixture(scope="session", autouse=True)
def functional_sqlite_bootstrap() -> None:
    """Session-level bootstrap: apply migrations once for the shared DB."""
    from formbuilder.db.base import get_engine
    from formbuilder.db.migrations_runner import apply_migrations

    apply_migrations(get_engine(os.environ["TEST_DATABASE_URL"]))
    yield


@pytest.fixture(autouse=True)
def clear_events():
    from formbuilder.logic.events import get_buffered_events

    get_buffered_events(clear=True)
    yield
    get_buffered_events(clear=True)


@pytest.fixture
def sql_catalog():
    from formbuilder.db.base import get_engine
    from formbuilder.logic.catalog import SqlFormCatalog

    engine = get_engine(os.environ["TEST_DATABASE_URL"])
    yield SqlFormCatalog(engine)
    with engine.begin() as conn:
        for table in _TABLES_CHILD_FIRST:
            conn.execute(sql_text(f"DELETE FROM {table}"))


@pytest.fixture
def memory_catalog():
    from formbuilder.logic.inmemory_catalog import InMemoryFormCatalog

    return InMemoryFormCatalog()


@pytest.fixture(params=["memory", "sql"])
def catalog(request):
    return request.getfixturevalue(f"{request.param}_catalog")


@pytest.fixture
def app_config():
    from formbuilder.config import AppConfig, AuthConfig, DatabaseConfig

    return AppConfig(
        database=DatabaseConfig(dsn=os.environ["TEST_DATABASE_URL"], auto_apply_migrations=False),
        auth=AuthConfig(secret_key=TEST_SECRET, token_ttl_seconds=3600),
    )


@pytest.fixture
def signer(app_config):
    from formbuilder.logic.auth_tokens import TokenSigner

    return TokenSigner(app_config.auth.secret_key, ttl_seconds=app_config.auth.token_ttl_seconds)


@pytest.fixture
def client(app_config, catalog) -> TestClient:
    from formbuilder.main import create_app

    return TestClient(create_app(config=app_config, catalog=catalog))


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class ApiDriver:
    """Small helper around TestClient for the recurring setup calls."""

    def __init__(self, client: TestClient) -> None:
        self.client = client
        self._seq = 0

    @staticmethod
    def auth(token: str) -> Dict[str, str]:
        return bearer(token)

    def register(self, *, role: str = "ADMIN", email: Optional[str] = None, name: str = "Tester") -> Dict[str, Any]:
        self._seq += 1
        email = email or f"user{self._seq}@example.com"
        resp = self.client.post(
            "/api/v1/auth/register",
            json={"email": email, "password": "secret123", "name": name, "role": role},
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    def create_form(self, token: str, *, title: str = "Survey", published: bool = True) -> Dict[str, Any]:
        resp = self.client.post(
            "/api/v1/forms",
            json={"title": title, "description": "About you", "isPublished": published},
            headers=bearer(token),
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    def add_question(
        self,
        token: str,
        form_id: str,
        *,
        title: str,
        type: str = "SHORT_TEXT",
        order: int = 0,
        required: bool = False,
        options: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "formId": form_id,
            "title": title,
            "type": type,
            "order": order,
            "isRequired": required,
        }
        if options is not None:
            body["options"] = list(options)
        resp = self.client.post("/api/v1/questions", json=body, headers=bearer(token))
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    def submit(self, form_id: str, answers: Dict[str, Any], *, token: Optional[str] = None, **extra: Any):
        body: Dict[str, Any] = {
            "formId": form_id,
            "answers": [{"questionId": qid, "value": value} for qid, value in answers.items()],
        }
        body.update(extra)
        headers = bearer(token) if token else {}
        return self.client.post("/api/v1/responses", json=body, headers=headers)


@pytest.fixture
def api(client) -> ApiDriver:
    return ApiDriver(client)


@pytest.fixture
def admin(api) -> Dict[str, Any]:
    """A registered ADMIN user with its token."""
    return api.register(role="ADMIN", name="Owner")
