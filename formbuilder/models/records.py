"""Catalog record types shared by the repositories, core logic and routes.

Plain dataclasses: both catalog implementations return these, so the
validator and aggregator never see storage rows or HTTP payloads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from formbuilder.models.answer_value import AnswerValue


ROLE_ADMIN = "ADMIN"
ROLE_USER = "USER"


def utc_timestamp() -> str:
    """RFC3339 UTC timestamp with microseconds and a trailing 'Z'."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


@dataclass
class UserRecord:
    id: str
    email: str
    name: str
    role: str = ROLE_USER
    password_hash: str = field(default="", repr=False)
    created_at: str = ""


@dataclass
class ResponderSummary:
    id: str
    name: str
    email: str


@dataclass
class QuestionRecord:
    id: str
    form_id: str
    title: str
    type: str
    order: int
    is_required: bool = False
    description: Optional[str] = None
    options: List[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""


@dataclass
class FormRecord:
    id: str
    title: str
    created_by_id: str
    description: Optional[str] = None
    is_published: bool = False
    header_image: Optional[str] = None
    logo_url: Optional[str] = None
    theme_color: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""
    # Ordered by question order ascending
    questions: List[QuestionRecord] = field(default_factory=list)
    response_count: int = 0


@dataclass(frozen=True)
class SubmittedAnswer:
    question_id: str
    value: AnswerValue


@dataclass
class AnswerRecord:
    id: str
    response_id: str
    question_id: str
    value: AnswerValue
    question: Optional[QuestionRecord] = None


@dataclass
class ResponseRecord:
    id: str
    form_id: str
    created_at: str
    responder_id: Optional[str] = None
    responder_name: Optional[str] = None
    responder: Optional[ResponderSummary] = None
    answers: List[AnswerRecord] = field(default_factory=list)


__all__ = [
    "ROLE_ADMIN",
    "ROLE_USER",
    "AnswerRecord",
    "FormRecord",
    "QuestionRecord",
    "ResponderSummary",
    "ResponseRecord",
    "SubmittedAnswer",
    "UserRecord",
    "utc_timestamp",
]
