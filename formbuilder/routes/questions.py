"""Question authoring routes.

Questions are created, edited, reordered and deleted by the admin who owns
their form. Listing a form's questions is public.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from formbuilder.guards.auth import AdminDep, CatalogDep
from formbuilder.http.envelope import success
from formbuilder.logic.ownership import require_owned_form, require_owned_question
from formbuilder.logic.question_rules import (
    check_order_available,
    check_question_type,
    check_reorder_unique,
    normalize_options,
)
from formbuilder.models.forms import QuestionCreate, QuestionOut, QuestionUpdate, ReorderRequest

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/questions", status_code=201, summary="Add a question to a form")
def create_question(payload: QuestionCreate, identity: AdminDep, catalog: CatalogDep):
    form = require_owned_form(catalog, payload.form_id, identity.user_id, missing_as_not_found=False)
    question_type = check_question_type(payload.type)
    options = normalize_options(question_type, payload.options)
    check_order_available(form.questions, payload.order)
    question = catalog.create_question(
        form_id=form.id,
        title=payload.title,
        description=payload.description,
        type=question_type,
        is_required=payload.is_required,
        order=payload.order,
        options=options,
    )
    logger.info("question_created", extra={"form_id": form.id, "question_id": question.id})
    return success(QuestionOut.from_record(question).to_wire(), "Question created successfully")


@router.get("/questions/form/{form_id}", summary="List a form's questions in order")
def list_questions(form_id: str, catalog: CatalogDep):
    return success([QuestionOut.from_record(q).to_wire() for q in catalog.list_questions(form_id)])


@router.patch("/questions/reorder", summary="Apply new orders to several questions at once")
def reorder_questions(payload: ReorderRequest, identity: AdminDep, catalog: CatalogDep):
    new_orders = {item.id: item.order for item in payload.questions}
    form_ids = set()
    for question_id in new_orders:
        question = require_owned_question(catalog, question_id, identity.user_id)
        form_ids.add(question.form_id)
    for form_id in form_ids:
        check_reorder_unique(catalog.list_questions(form_id), new_orders)
    catalog.reorder_questions([(item.id, item.order) for item in payload.questions])
    return success(message="Questions reordered successfully")


@router.put("/questions/{question_id}", summary="Update question fields")
def update_question(question_id: str, payload: QuestionUpdate, identity: AdminDep, catalog: CatalogDep):
    current = require_owned_question(catalog, question_id, identity.user_id)
    changes = payload.model_dump(exclude_unset=True)
    for key in ("title", "type", "is_required", "order"):
        if key in changes and changes[key] is None:
            del changes[key]
    question_type = check_question_type(changes.get("type", current.type))
    if "type" in changes or "options" in changes:
        changes["options"] = normalize_options(question_type, changes.get("options", current.options))
    if "order" in changes:
        check_order_available(catalog.list_questions(current.form_id), changes["order"], exclude_id=current.id)
    updated = catalog.update_question(question_id, changes)
    return success(QuestionOut.from_record(updated).to_wire(), "Question updated successfully")


@router.delete("/questions/{question_id}", summary="Delete a question and its answers")
def delete_question(question_id: str, identity: AdminDep, catalog: CatalogDep):
    require_owned_question(catalog, question_id, identity.user_id)
    catalog.delete_question(question_id)
    logger.info("question_deleted", extra={"question_id": question_id})
    return success(message="Question deleted successfully")


__all__ = ["router"]
