"""Response export routes.

Each format renders the owner's responses oldest first and is delivered as
an attachment named after the form.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from fastapi import APIRouter
from fastapi.responses import Response

from formbuilder.guards.auth import AdminDep, CatalogDep, ConfigDep
from formbuilder.logic.catalog import FormCatalog
from formbuilder.logic.export_table import (
    PDF_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    build_response_table,
    export_filename,
    render_csv,
    render_pdf,
    render_xlsx,
)
from formbuilder.logic.ownership import require_owned_form
from formbuilder.models.records import FormRecord, ResponseRecord

router = APIRouter()
logger = logging.getLogger(__name__)


def _load_export(catalog: FormCatalog, form_id: str, requester_id: str) -> Tuple[FormRecord, List[ResponseRecord]]:
    form = require_owned_form(catalog, form_id, requester_id, missing_as_not_found=False)
    return form, catalog.list_responses(form_id, newest_first=False)


def _attachment(body: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=body,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/export/excel/{form_id}", summary="Download a form's responses as an Excel workbook")
def export_excel(form_id: str, identity: AdminDep, catalog: CatalogDep):
    form, responses = _load_export(catalog, form_id, identity.user_id)
    header, rows = build_response_table(form, responses)
    body = render_xlsx(form, header, rows)
    logger.info("responses_exported", extra={"form_id": form_id, "format": "xlsx", "row_count": len(rows)})
    return _attachment(body, XLSX_MEDIA_TYPE, export_filename(form, "xlsx"))


@router.get("/export/pdf/{form_id}", summary="Download a form's responses as a PDF report")
def export_pdf(form_id: str, identity: AdminDep, catalog: CatalogDep):
    form, responses = _load_export(catalog, form_id, identity.user_id)
    body = render_pdf(form, responses)
    logger.info("responses_exported", extra={"form_id": form_id, "format": "pdf", "row_count": len(responses)})
    return _attachment(body, PDF_MEDIA_TYPE, export_filename(form, "pdf"))


@router.get("/export/csv/{form_id}", summary="Download a form's responses as CSV")
def export_csv(form_id: str, identity: AdminDep, catalog: CatalogDep, config: ConfigDep):
    form, responses = _load_export(catalog, form_id, identity.user_id)
    header, rows = build_response_table(form, responses)
    body = render_csv(header, rows, include_header=config.export.include_header)
    logger.info("responses_exported", extra={"form_id": form_id, "format": "csv", "row_count": len(rows)})
    return _attachment(body, "text/csv; charset=utf-8", export_filename(form))


__all__ = ["router"]
