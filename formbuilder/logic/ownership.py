"""Ownership checks shared by the admin routes.

Each helper loads a record through the catalog and confirms the requester
created the form it belongs to.
"""

from __future__ import annotations

from formbuilder.logic.catalog import FormCatalog
from formbuilder.logic.errors import AccessDenied, NotFound
from formbuilder.models.records import FormRecord, QuestionRecord, ResponseRecord


def require_owned_form(
    catalog: FormCatalog,
    form_id: str,
    requester_id: str,
    *,
    missing_as_not_found: bool = True,
) -> FormRecord:
    """Return the form when `requester_id` owns it.

    With `missing_as_not_found=False` a missing form is reported as
    AccessDenied, so callers cannot tell which form ids exist.
    """
    form = catalog.get_form(form_id)
    if form is None:
        if missing_as_not_found:
            raise NotFound("Form not found")
        raise AccessDenied("Access denied")
    if form.created_by_id != requester_id:
        raise AccessDenied("Access denied")
    return form


def require_owned_question(catalog: FormCatalog, question_id: str, requester_id: str) -> QuestionRecord:
    question = catalog.get_question(question_id)
    if question is None:
        raise NotFound("Question not found")
    form = catalog.get_form(question.form_id)
    if form is None or form.created_by_id != requester_id:
        raise AccessDenied("Access denied")
    return question


def require_owned_response(catalog: FormCatalog, response_id: str, requester_id: str) -> ResponseRecord:
    response = catalog.get_response(response_id)
    if response is None:
        raise NotFound("Response not found")
    form = catalog.get_form(response.form_id)
    if form is None or form.created_by_id != requester_id:
        raise AccessDenied("Access denied")
    return response


__all__ = ["require_owned_form", "require_owned_question", "require_owned_response"]
