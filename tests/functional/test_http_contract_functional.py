"""Functional tests for cross-cutting HTTP behaviour.

Covers request-id propagation, problem+json rendering for framework errors,
CORS exposure and the health endpoint.
"""

from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from formbuilder.logging_setup import REQUEST_ID, RequestIdFilter
from formbuilder.logic.inmemory_catalog import InMemoryFormCatalog
from formbuilder.main import create_app


def test_request_id_is_echoed_or_generated(client):
    echoed = client.get("/health", headers={"X-Request-Id": "req-123"})
    assert echoed.headers["x-request-id"] == "req-123"

    generated = client.get("/health")
    uuid.UUID(generated.headers["x-request-id"])


def test_log_records_carry_request_id():
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)
    token = REQUEST_ID.set("req-456")
    try:
        assert RequestIdFilter().filter(record) is True
    finally:
        REQUEST_ID.reset(token)
    assert record.request_id == "req-456"

    outside = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)
    RequestIdFilter().filter(outside)
    assert outside.request_id == "-"


def test_unknown_route_renders_problem_json(client):
    resp = client.get("/api/v1/nowhere")
    assert resp.status_code == 404
    assert resp.headers["content-type"].startswith("application/problem+json")
    assert resp.json()["status"] == 404


def test_malformed_body_is_validation_error(client):
    resp = client.post("/api/v1/responses", json={"answers": "nope"})
    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert {tuple(e["loc"])[-1] for e in body["errors"]} >= {"formId", "answers"}


def test_cors_exposes_request_id(client):
    resp = client.get("/health", headers={"Origin": "https://app.example"})
    exposed = resp.headers.get("access-control-expose-headers", "")
    assert "X-Request-Id" in exposed
    assert "Content-Disposition" in exposed


@pytest.mark.parametrize("path", ["/health", "/api/v1/health"])
def test_health_reports_catalog_state(app_config, path):
    memory_client = TestClient(create_app(config=app_config, catalog=InMemoryFormCatalog()))
    assert memory_client.get(path).json() == {"status": "ok", "db": False}


def test_health_checks_database(app_config, sql_catalog):
    sql_client = TestClient(create_app(config=app_config, catalog=sql_catalog))
    assert sql_client.get("/health").json() == {"status": "ok", "db": True}


def test_memory_backend_selected_by_config(app_config):
    config = app_config.model_copy(update={"catalog_backend": "memory"})
    app = create_app(config=config)
    assert isinstance(app.state.catalog, InMemoryFormCatalog)
