"""FastAPI application package for the form builder service.

This package exposes the application factory. It wires cross-cutting
middleware (request-id and CORS), the problem+json error handlers and the
API routers. Business logic lives in `formbuilder/logic/` and route handlers
in `formbuilder/routes/`.
"""

from __future__ import annotations

from formbuilder.main import create_app

__all__ = ["create_app"]
