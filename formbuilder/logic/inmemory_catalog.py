"""In-process FormCatalog implementation.

Holds records in dictionaries guarded by a re-entrant lock. Returned records
are deep copies so callers can never mutate stored state. Listing order
matches the SQL catalog: forms and responses newest first, questions by
order.
"""

from __future__ import annotations

import copy
import itertools
import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from formbuilder.logic.catalog import check_answers_belong_to_form, new_id
from formbuilder.logic.errors import Conflict, NotFound
from formbuilder.logic.repository_forms import UPDATABLE_COLUMNS as FORM_FIELDS
from formbuilder.logic.repository_questions import UPDATABLE_COLUMNS as QUESTION_FIELDS
from formbuilder.models.records import (
    AnswerRecord,
    FormRecord,
    QuestionRecord,
    ResponderSummary,
    ResponseRecord,
    SubmittedAnswer,
    UserRecord,
    utc_timestamp,
)

logger = logging.getLogger(__name__)


class InMemoryFormCatalog:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._seq = itertools.count(1)
        self._users: Dict[str, UserRecord] = {}
        self._forms: Dict[str, FormRecord] = {}
        self._questions: Dict[str, QuestionRecord] = {}
        self._responses: Dict[str, ResponseRecord] = {}
        # Insertion sequence per record id; tie-breaker for equal timestamps
        self._order: Dict[str, int] = {}

    def _stamp(self, record_id: str) -> None:
        self._order[record_id] = next(self._seq)

    # ----- users -----

    def create_user(self, *, email: str, name: str, role: str, password_hash: str) -> UserRecord:
        email = email.strip()
        with self._lock:
            if any(u.email.lower() == email.lower() for u in self._users.values()):
                raise Conflict("Email already registered")
            user = UserRecord(
                id=new_id(),
                email=email,
                name=name,
                role=role,
                password_hash=password_hash,
                created_at=utc_timestamp(),
            )
            self._users[user.id] = user
            return copy.deepcopy(user)

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self._lock:
            user = self._users.get(user_id)
            return copy.deepcopy(user) if user else None

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        needle = email.strip().lower()
        with self._lock:
            for user in self._users.values():
                if user.email.lower() == needle:
                    return copy.deepcopy(user)
        return None

    # ----- forms -----

    def _questions_of(self, form_id: str) -> List[QuestionRecord]:
        found = [q for q in self._questions.values() if q.form_id == form_id]
        return sorted(found, key=lambda q: (q.order, q.id))

    def _hydrate(self, form: FormRecord) -> FormRecord:
        out = copy.deepcopy(form)
        out.questions = copy.deepcopy(self._questions_of(form.id))
        out.response_count = sum(1 for r in self._responses.values() if r.form_id == form.id)
        return out

    def create_form(self, *, owner_id: str, title: str, description: Optional[str] = None,
                    is_published: bool = False, header_image: Optional[str] = None,
                    logo_url: Optional[str] = None, theme_color: Optional[str] = None) -> FormRecord:
        now = utc_timestamp()
        form = FormRecord(
            id=new_id(),
            title=title,
            description=description,
            is_published=bool(is_published),
            header_image=header_image,
            logo_url=logo_url,
            theme_color=theme_color,
            created_by_id=owner_id,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._forms[form.id] = form
            self._stamp(form.id)
            return self._hydrate(form)

    def get_form(self, form_id: str) -> Optional[FormRecord]:
        with self._lock:
            form = self._forms.get(form_id)
            return self._hydrate(form) if form else None

    def list_forms_for_owner(self, owner_id: str) -> List[FormRecord]:
        with self._lock:
            owned = [f for f in self._forms.values() if f.created_by_id == owner_id]
            owned.sort(key=lambda f: (f.created_at, self._order[f.id]), reverse=True)
            return [self._hydrate(f) for f in owned]

    def update_form(self, form_id: str, changes: Mapping[str, Any]) -> FormRecord:
        with self._lock:
            form = self._forms.get(form_id)
            if form is None:
                raise NotFound("Form not found")
            for key, value in changes.items():
                if key in FORM_FIELDS:
                    setattr(form, key, value)
            form.updated_at = utc_timestamp()
            return self._hydrate(form)

    def delete_form(self, form_id: str) -> None:
        with self._lock:
            if self._forms.pop(form_id, None) is None:
                return
            for qid in [q.id for q in self._questions.values() if q.form_id == form_id]:
                del self._questions[qid]
            for rid in [r.id for r in self._responses.values() if r.form_id == form_id]:
                del self._responses[rid]

    # ----- questions -----

    def create_question(self, *, form_id: str, title: str, type: str, order: int,
                        is_required: bool = False, description: Optional[str] = None,
                        options: Optional[Sequence[str]] = None) -> QuestionRecord:
        now = utc_timestamp()
        question = QuestionRecord(
            id=new_id(),
            form_id=form_id,
            title=title,
            description=description,
            type=type,
            is_required=bool(is_required),
            order=int(order),
            options=list(options or []),
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            if form_id not in self._forms:
                raise NotFound("Form not found")
            self._questions[question.id] = question
            self._stamp(question.id)
            return copy.deepcopy(question)

    def get_question(self, question_id: str) -> Optional[QuestionRecord]:
        with self._lock:
            question = self._questions.get(question_id)
            return copy.deepcopy(question) if question else None

    def list_questions(self, form_id: str) -> List[QuestionRecord]:
        with self._lock:
            return copy.deepcopy(self._questions_of(form_id))

    def update_question(self, question_id: str, changes: Mapping[str, Any]) -> QuestionRecord:
        with self._lock:
            question = self._questions.get(question_id)
            if question is None:
                raise NotFound("Question not found")
            for key, value in changes.items():
                if key in QUESTION_FIELDS:
                    setattr(question, key, list(value or []) if key == "options" else value)
            question.updated_at = utc_timestamp()
            return copy.deepcopy(question)

    def delete_question(self, question_id: str) -> None:
        with self._lock:
            if self._questions.pop(question_id, None) is None:
                return
            for response in self._responses.values():
                response.answers = [a for a in response.answers if a.question_id != question_id]

    def reorder_questions(self, orders: Sequence[Tuple[str, int]]) -> None:
        with self._lock:
            missing = [qid for qid, _ in orders if qid not in self._questions]
            if missing:
                raise NotFound(f"Question {missing[0]} not found")
            now = utc_timestamp()
            for question_id, order in orders:
                question = self._questions[question_id]
                question.order = int(order)
                question.updated_at = now

    # ----- responses -----

    def _present(self, response: ResponseRecord) -> ResponseRecord:
        out = copy.deepcopy(response)
        user = self._users.get(out.responder_id) if out.responder_id else None
        out.responder = ResponderSummary(id=user.id, name=user.name, email=user.email) if user else None
        for answer in out.answers:
            question = self._questions.get(answer.question_id)
            answer.question = copy.deepcopy(question) if question else None
        return out

    def create_response(self, *, form_id: str, answers: Sequence[SubmittedAnswer],
                        responder_id: Optional[str] = None,
                        responder_name: Optional[str] = None) -> ResponseRecord:
        with self._lock:
            if form_id not in self._forms:
                raise NotFound("Form not found")
            check_answers_belong_to_form(answers, {q.id for q in self._questions_of(form_id)})
            if responder_id and responder_id not in self._users:
                logger.info("responder_account_missing responder_id=%s", responder_id)
                responder_id = None
            response = ResponseRecord(
                id=new_id(),
                form_id=form_id,
                created_at=utc_timestamp(),
                responder_id=responder_id,
                responder_name=responder_name,
            )
            response.answers = [
                AnswerRecord(id=new_id(), response_id=response.id, question_id=a.question_id, value=a.value)
                for a in answers
            ]
            self._responses[response.id] = response
            self._stamp(response.id)
            return self._present(response)

    def get_response(self, response_id: str) -> Optional[ResponseRecord]:
        with self._lock:
            response = self._responses.get(response_id)
            return self._present(response) if response else None

    def list_responses(self, form_id: str, *, newest_first: bool = True) -> List[ResponseRecord]:
        with self._lock:
            found = [r for r in self._responses.values() if r.form_id == form_id]
            found.sort(key=lambda r: (r.created_at, self._order[r.id]), reverse=newest_first)
            return [self._present(r) for r in found]

    def delete_response(self, response_id: str) -> None:
        with self._lock:
            self._responses.pop(response_id, None)


__all__ = ["InMemoryFormCatalog"]
