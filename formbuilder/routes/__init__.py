"""APIRouter registration for the form builder service."""

from __future__ import annotations

from fastapi import APIRouter

from formbuilder.routes.auth import router as auth_router
from formbuilder.routes.export import router as export_router
from formbuilder.routes.forms import router as forms_router
from formbuilder.routes.questions import router as questions_router
from formbuilder.routes.responses import router as responses_router

api_router = APIRouter()
api_router.include_router(auth_router, tags=["Auth"])
api_router.include_router(forms_router, tags=["Forms"])
api_router.include_router(questions_router, tags=["Questions"])
api_router.include_router(responses_router, tags=["Responses", "Statistics"])
api_router.include_router(export_router, tags=["Export"])

__all__ = ["api_router"]
