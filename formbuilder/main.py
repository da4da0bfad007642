from __future__ import annotations

import logging
import os
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from formbuilder.config import AppConfig, load_config
from formbuilder.db.base import get_engine
from formbuilder.db.migrations_runner import apply_migrations
from formbuilder.http.problem import (
    handle_domain_error,
    handle_http_exception,
    handle_request_validation_error,
    handle_storage_error,
    handle_unexpected_error,
)
from formbuilder.http.request_id import RequestIdMiddleware
from formbuilder.logging_setup import configure_logging
from formbuilder.logic.auth_tokens import TokenSigner
from formbuilder.logic.catalog import FormCatalog, SqlFormCatalog
from formbuilder.logic.errors import FormBuilderError
from formbuilder.logic.inmemory_catalog import InMemoryFormCatalog
from formbuilder.middleware.cors import apply_cors
from formbuilder.routes import api_router

logger = logging.getLogger(__name__)


def build_catalog(config: AppConfig) -> FormCatalog:
    if config.catalog_backend == "memory":
        logger.info("catalog_backend=memory")
        return InMemoryFormCatalog()
    return SqlFormCatalog(get_engine(config.database.dsn))


def _health_check(catalog: FormCatalog) -> Callable[[], dict]:
    def check() -> dict:
        if not isinstance(catalog, SqlFormCatalog):
            return {"status": "ok", "db": False}
        try:
            with catalog.engine.connect() as conn:
                conn.execute(sql_text("SELECT 1"))
            return {"status": "ok", "db": True}
        except SQLAlchemyError as e:
            logger.error("Health DB check failed", exc_info=True)
            return {"status": "degraded", "db": False, "reason": str(e)}

    return check


def create_app(config: Optional[AppConfig] = None, catalog: Optional[FormCatalog] = None) -> FastAPI:
    """Build the FastAPI application.

    `catalog` is injected as-is when given; otherwise one is built from
    `config.catalog_backend`. Nothing is instantiated at import time.
    """
    config = config or load_config()
    configure_logging(config.logging.level)
    catalog = catalog if catalog is not None else build_catalog(config)

    app = FastAPI(title="Form Builder Service")
    app.state.config = config
    app.state.catalog = catalog
    app.state.token_signer = TokenSigner(
        config.auth.secret_key, ttl_seconds=config.auth.token_ttl_seconds
    )

    app.add_exception_handler(FormBuilderError, handle_domain_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_storage_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.add_middleware(RequestIdMiddleware)
    apply_cors(app, origins=config.cors.origins)

    # Apply migrations on startup (guarded) to avoid import-time side effects
    @app.on_event("startup")
    def _apply_migrations() -> None:
        if not isinstance(catalog, SqlFormCatalog):
            return
        if not config.database.auto_apply_migrations:
            logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")
            return
        try:
            applied = apply_migrations(catalog.engine)
        except SQLAlchemyError:
            logger.error("Failed to apply migrations at startup", exc_info=True)
            raise
        logger.info("startup_migrations_applied count=%d", len(applied))

    app.include_router(api_router, prefix="/api/v1")

    health_check = _health_check(catalog)

    @app.get("/health")
    def health():  # pragma: no cover - trivial
        return health_check()

    app.add_api_route("/api/v1/health", health, methods=["GET"], include_in_schema=False)

    return app


def run() -> None:
    import uvicorn

    uvicorn.run(
        create_app(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_config=None,
    )


# Intentionally do not instantiate the app at import time to prevent side effects.
