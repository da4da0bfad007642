"""Form catalog: the persistence interface used by the core and the routes.

`FormCatalog` is the read/write contract. `SqlFormCatalog` implements it over
SQLAlchemy Core using the repository modules; `InMemoryFormCatalog`
(formbuilder/logic/inmemory_catalog.py) implements the same contract for
tests and local runs. The application receives one instance at construction
time instead of reaching for a module-level client.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, List, Mapping, Optional, Protocol, Sequence, Tuple

from sqlalchemy.engine import Engine

from formbuilder.logic import (
    repository_forms,
    repository_questions,
    repository_responses,
    repository_users,
)
from formbuilder.logic.errors import Conflict, NotFound, ValidationError
from formbuilder.models.records import (
    FormRecord,
    QuestionRecord,
    ResponseRecord,
    SubmittedAnswer,
    UserRecord,
    utc_timestamp,
)

logger = logging.getLogger(__name__)


class FormCatalog(Protocol):
    # Users
    def create_user(self, *, email: str, name: str, role: str, password_hash: str) -> UserRecord: ...
    def get_user(self, user_id: str) -> Optional[UserRecord]: ...
    def get_user_by_email(self, email: str) -> Optional[UserRecord]: ...

    # Forms
    def create_form(self, *, owner_id: str, title: str, description: Optional[str] = None,
                    is_published: bool = False, header_image: Optional[str] = None,
                    logo_url: Optional[str] = None, theme_color: Optional[str] = None) -> FormRecord: ...
    def get_form(self, form_id: str) -> Optional[FormRecord]: ...
    def list_forms_for_owner(self, owner_id: str) -> List[FormRecord]: ...
    def update_form(self, form_id: str, changes: Mapping[str, Any]) -> FormRecord: ...
    def delete_form(self, form_id: str) -> None: ...

    # Questions
    def create_question(self, *, form_id: str, title: str, type: str, order: int,
                        is_required: bool = False, description: Optional[str] = None,
                        options: Optional[Sequence[str]] = None) -> QuestionRecord: ...
    def get_question(self, question_id: str) -> Optional[QuestionRecord]: ...
    def list_questions(self, form_id: str) -> List[QuestionRecord]: ...
    def update_question(self, question_id: str, changes: Mapping[str, Any]) -> QuestionRecord: ...
    def delete_question(self, question_id: str) -> None: ...
    def reorder_questions(self, orders: Sequence[Tuple[str, int]]) -> None: ...

    # Responses
    def create_response(self, *, form_id: str, answers: Sequence[SubmittedAnswer],
                        responder_id: Optional[str] = None,
                        responder_name: Optional[str] = None) -> ResponseRecord: ...
    def get_response(self, response_id: str) -> Optional[ResponseRecord]: ...
    def list_responses(self, form_id: str, *, newest_first: bool = True) -> List[ResponseRecord]: ...
    def delete_response(self, response_id: str) -> None: ...


def new_id() -> str:
    return str(uuid.uuid4())


def check_answers_belong_to_form(answers: Sequence[SubmittedAnswer], question_ids: set[str]) -> None:
    """Reject answers whose question is not part of the target form."""
    for answer in answers:
        if answer.question_id not in question_ids:
            raise ValidationError(f"Question {answer.question_id} does not belong to this form")


class SqlFormCatalog:
    """FormCatalog over a relational database (PostgreSQL or SQLite)."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    # ----- users -----

    def create_user(self, *, email: str, name: str, role: str, password_hash: str) -> UserRecord:
        user = UserRecord(
            id=new_id(),
            email=email.strip(),
            name=name,
            role=role,
            password_hash=password_hash,
            created_at=utc_timestamp(),
        )
        with self.engine.begin() as conn:
            if repository_users.email_taken(conn, user.email):
                raise Conflict("Email already registered")
            repository_users.insert_user(conn, user)
        return user

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self.engine.connect() as conn:
            return repository_users.fetch_user(conn, user_id)

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self.engine.connect() as conn:
            return repository_users.fetch_user_by_email(conn, email.strip())

    # ----- forms -----

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
        with self.engine.begin() as conn:
            repository_forms.insert_form(conn, form)
        return form

    def get_form(self, form_id: str) -> Optional[FormRecord]:
        with self.engine.connect() as conn:
            form = repository_forms.fetch_form_row(conn, form_id)
            if form is None:
                return None
            form.questions = repository_questions.fetch_questions_for_form(conn, form_id)
            form.response_count = repository_forms.count_responses(conn, form_id)
        return form

    def list_forms_for_owner(self, owner_id: str) -> List[FormRecord]:
        with self.engine.connect() as conn:
            forms = repository_forms.fetch_forms_for_owner(conn, owner_id)
            for form in forms:
                form.questions = repository_questions.fetch_questions_for_form(conn, form.id)
                form.response_count = repository_forms.count_responses(conn, form.id)
        return forms

    def update_form(self, form_id: str, changes: Mapping[str, Any]) -> FormRecord:
        with self.engine.begin() as conn:
            if repository_forms.fetch_form_row(conn, form_id) is None:
                raise NotFound("Form not found")
            repository_forms.update_form_columns(conn, form_id, changes, utc_timestamp())
        updated = self.get_form(form_id)
        if updated is None:
            raise NotFound("Form not found")
        return updated

    def delete_form(self, form_id: str) -> None:
        with self.engine.begin() as conn:
            repository_forms.delete_form_cascade(conn, form_id)

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
        with self.engine.begin() as conn:
            if repository_forms.fetch_form_row(conn, form_id) is None:
                raise NotFound("Form not found")
            repository_questions.insert_question(conn, question)
        return question

    def get_question(self, question_id: str) -> Optional[QuestionRecord]:
        with self.engine.connect() as conn:
            return repository_questions.fetch_question(conn, question_id)

    def list_questions(self, form_id: str) -> List[QuestionRecord]:
        with self.engine.connect() as conn:
            return repository_questions.fetch_questions_for_form(conn, form_id)

    def update_question(self, question_id: str, changes: Mapping[str, Any]) -> QuestionRecord:
        with self.engine.begin() as conn:
            if repository_questions.fetch_question(conn, question_id) is None:
                raise NotFound("Question not found")
            repository_questions.update_question_columns(conn, question_id, changes, utc_timestamp())
            updated = repository_questions.fetch_question(conn, question_id)
        if updated is None:
            raise NotFound("Question not found")
        return updated

    def delete_question(self, question_id: str) -> None:
        with self.engine.begin() as conn:
            repository_questions.delete_question(conn, question_id)

    def reorder_questions(self, orders: Sequence[Tuple[str, int]]) -> None:
        now = utc_timestamp()
        with self.engine.begin() as conn:
            for question_id, order in orders:
                if repository_questions.update_question_order(conn, question_id, order, now) == 0:
                    raise NotFound(f"Question {question_id} not found")

    # ----- responses -----

    def create_response(self, *, form_id: str, answers: Sequence[SubmittedAnswer],
                        responder_id: Optional[str] = None,
                        responder_name: Optional[str] = None) -> ResponseRecord:
        response = ResponseRecord(
            id=new_id(),
            form_id=form_id,
            created_at=utc_timestamp(),
            responder_id=responder_id,
            responder_name=responder_name,
        )
        with self.engine.begin() as conn:
            if repository_forms.fetch_form_row(conn, form_id) is None:
                raise NotFound("Form not found")
            check_answers_belong_to_form(answers, repository_questions.question_ids_for_form(conn, form_id))
            if responder_id and repository_users.fetch_user(conn, responder_id) is None:
                # Token outlived its account; keep the response anonymous
                logger.info("responder_account_missing responder_id=%s", responder_id)
                response.responder_id = None
            repository_responses.insert_response(conn, response, answers, [new_id() for _ in answers])
            stored = repository_responses.fetch_response(conn, response.id)
        if stored is None:
            raise NotFound("Response not found")
        return stored

    def get_response(self, response_id: str) -> Optional[ResponseRecord]:
        with self.engine.connect() as conn:
            return repository_responses.fetch_response(conn, response_id)

    def list_responses(self, form_id: str, *, newest_first: bool = True) -> List[ResponseRecord]:
        with self.engine.connect() as conn:
            return repository_responses.fetch_responses_for_form(conn, form_id, newest_first=newest_first)

    def delete_response(self, response_id: str) -> None:
        with self.engine.begin() as conn:
            repository_responses.delete_response(conn, response_id)


__all__ = ["FormCatalog", "SqlFormCatalog", "check_answers_belong_to_form", "new_id"]
