"""Response submission, listing and statistics routes.

Submission is public for published forms; a bearer token, when present and
valid, attaches the responder's account. Everything else is restricted to
the admin who owns the form.
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends

from formbuilder.guards.auth import AdminDep, CatalogDep, SignerDep, optional_bearer_token
from formbuilder.http.envelope import success
from formbuilder.logic.errors import ValidationError
from formbuilder.logic.events import RESPONSE_DELETED, publish
from formbuilder.logic.ownership import require_owned_form, require_owned_response
from formbuilder.logic.response_validator import submit_response
from formbuilder.logic.tally import compute_form_statistics
from formbuilder.models.answer_value import answer_value_from_wire
from formbuilder.models.records import SubmittedAnswer
from formbuilder.models.responses import (
    FormStatisticsOut,
    QuestionStatOut,
    ResponseOut,
    SubmitResponseRequest,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _submitted_answers(payload: SubmitResponseRequest) -> list[SubmittedAnswer]:
    answers = []
    for item in payload.answers:
        try:
            value = answer_value_from_wire(item.value)
        except ValueError as exc:
            raise ValidationError(str(exc))
        answers.append(SubmittedAnswer(question_id=item.question_id, value=value))
    return answers


@router.post("/responses", status_code=201, summary="Submit a response to a published form")
def create_response(
    payload: SubmitResponseRequest,
    catalog: CatalogDep,
    signer: SignerDep,
    token: Annotated[Optional[str], Depends(optional_bearer_token)],
):
    response = submit_response(
        catalog,
        signer,
        payload.form_id,
        _submitted_answers(payload),
        responder_token=token,
        responder_name=payload.responder_name,
    )
    return success(ResponseOut.from_record(response).to_wire(), "Response submitted successfully")


@router.get("/responses/form/{form_id}", summary="List a form's responses, newest first")
def list_responses(form_id: str, identity: AdminDep, catalog: CatalogDep):
    require_owned_form(catalog, form_id, identity.user_id, missing_as_not_found=False)
    responses = catalog.list_responses(form_id)
    return success([ResponseOut.from_record(r).to_wire() for r in responses])


@router.get("/responses/form/{form_id}/stats", summary="Per-question answer statistics")
def form_statistics(form_id: str, identity: AdminDep, catalog: CatalogDep):
    stats = compute_form_statistics(catalog, form_id, identity.user_id)
    body = FormStatisticsOut(
        total_responses=stats.total_responses,
        question_stats=[
            QuestionStatOut(
                question_id=t.question_id,
                question_title=t.question_title,
                question_type=t.question_type,
                total_answers=t.total_answers,
                answers=dict(t.answers),
            )
            for t in stats.question_stats
        ],
    )
    return success(body.to_wire())


@router.get("/responses/{response_id}", summary="Get a single response")
def get_response(response_id: str, identity: AdminDep, catalog: CatalogDep):
    response = require_owned_response(catalog, response_id, identity.user_id)
    return success(ResponseOut.from_record(response).to_wire())


@router.delete("/responses/{response_id}", summary="Delete a response")
def delete_response(response_id: str, identity: AdminDep, catalog: CatalogDep):
    response = require_owned_response(catalog, response_id, identity.user_id)
    catalog.delete_response(response_id)
    publish(RESPONSE_DELETED, {"form_id": response.form_id, "response_id": response_id})
    return success(message="Response deleted successfully")


__all__ = ["router"]
