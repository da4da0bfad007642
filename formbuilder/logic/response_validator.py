"""Response validation and submission.

Decides whether a submitted answer set may become a persisted Response:

1. the form must exist (NotFound);
2. the form must be published (FormClosed);
3. every required, answerable question must carry a non-blank answer,
   checked in question order so the lowest-order gap is reported
   (MissingRequiredAnswer).

Answers to unknown or optional questions and value shapes that do not match
the question type are not rejected here. An identity token that fails to
verify yields an anonymous response rather than an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from formbuilder.logic.auth_tokens import InvalidToken, TokenSigner
from formbuilder.logic.catalog import FormCatalog
from formbuilder.logic.errors import FormClosed, MissingRequiredAnswer, NotFound
from formbuilder.logic.events import RESPONSE_SUBMITTED, publish
from formbuilder.models.question_type import is_answerable
from formbuilder.models.records import FormRecord, ResponseRecord, SubmittedAnswer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidatedSubmission:
    form: FormRecord
    answers: Tuple[SubmittedAnswer, ...]
    responder_id: Optional[str] = None


def resolve_responder_id(signer: TokenSigner, token: Optional[str]) -> Optional[str]:
    """Return the user id carried by `token`, or None for a missing/bad token."""
    if not token:
        return None
    try:
        return signer.verify(token).user_id
    except InvalidToken as exc:
        logger.info("responder_token_rejected reason=%s", exc)
        return None


def check_required_answers(form: FormRecord, answers: Sequence[SubmittedAnswer]) -> None:
    answered = {a.question_id for a in answers if not a.value.is_blank()}
    required = sorted(
        (q for q in form.questions if q.is_required and is_answerable(q.type)),
        key=lambda q: (q.order, q.id),
    )
    for question in required:
        if question.id not in answered:
            raise MissingRequiredAnswer(question.id, question.title)


def validate_submission(
    catalog: FormCatalog,
    signer: TokenSigner,
    form_id: str,
    answers: Sequence[SubmittedAnswer],
    responder_token: Optional[str] = None,
) -> ValidatedSubmission:
    form = catalog.get_form(form_id)
    if form is None:
        raise NotFound("Form not found")
    if not form.is_published:
        raise FormClosed("This form is not accepting responses")
    check_required_answers(form, answers)
    return ValidatedSubmission(
        form=form,
        answers=tuple(answers),
        responder_id=resolve_responder_id(signer, responder_token),
    )


def submit_response(
    catalog: FormCatalog,
    signer: TokenSigner,
    form_id: str,
    answers: Sequence[SubmittedAnswer],
    *,
    responder_token: Optional[str] = None,
    responder_name: Optional[str] = None,
) -> ResponseRecord:
    """Validate then persist a response with its answers as one unit."""
    accepted = validate_submission(catalog, signer, form_id, answers, responder_token)
    response = catalog.create_response(
        form_id=form_id,
        answers=accepted.answers,
        responder_id=accepted.responder_id,
        responder_name=responder_name,
    )
    publish(
        RESPONSE_SUBMITTED,
        {"form_id": form_id, "response_id": response.id, "anonymous": response.responder_id is None},
    )
    logger.info(
        "response_submitted",
        extra={"form_id": form_id, "response_id": response.id, "answer_count": len(response.answers)},
    )
    return response


__all__ = [
    "ValidatedSubmission",
    "check_required_answers",
    "resolve_responder_id",
    "submit_response",
    "validate_submission",
]
