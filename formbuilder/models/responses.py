"""Pydantic models for response submission, listing and statistics."""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import Field

from formbuilder.models.base import CamelModel
from formbuilder.models.forms import QuestionOut
from formbuilder.models.records import ResponderSummary, ResponseRecord


class AnswerIn(CamelModel):
    question_id: str = Field(min_length=1)
    value: Union[str, List[str]]


class SubmitResponseRequest(CamelModel):
    form_id: str = Field(min_length=1)
    answers: List[AnswerIn]
    responder_name: Optional[str] = Field(default=None, max_length=200)


class ResponderOut(CamelModel):
    id: str
    name: str
    email: str

    @classmethod
    def from_record(cls, responder: ResponderSummary) -> "ResponderOut":
        return cls(id=responder.id, name=responder.name, email=responder.email)


class AnswerOut(CamelModel):
    id: str
    response_id: str
    question_id: str
    value: Union[str, List[str]]
    question: Optional[QuestionOut] = None


class ResponseOut(CamelModel):
    id: str
    form_id: str
    responder_id: Optional[str] = None
    responder_name: Optional[str] = None
    responder: Optional[ResponderOut] = None
    created_at: str
    answers: List[AnswerOut]

    @classmethod
    def from_record(cls, response: ResponseRecord) -> "ResponseOut":
        return cls(
            id=response.id,
            form_id=response.form_id,
            responder_id=response.responder_id,
            responder_name=response.responder_name,
            responder=ResponderOut.from_record(response.responder) if response.responder else None,
            created_at=response.created_at,
            answers=[
                AnswerOut(
                    id=a.id,
                    response_id=a.response_id,
                    question_id=a.question_id,
                    value=a.value.to_wire(),
                    question=QuestionOut.from_record(a.question) if a.question else None,
                )
                for a in response.answers
            ],
        )


class QuestionStatOut(CamelModel):
    question_id: str
    question_title: str
    question_type: str
    total_answers: int
    answers: Dict[str, int]


class FormStatisticsOut(CamelModel):
    total_responses: int
    question_stats: List[QuestionStatOut]


__all__ = [
    "AnswerIn",
    "AnswerOut",
    "FormStatisticsOut",
    "QuestionStatOut",
    "ResponderOut",
    "ResponseOut",
    "SubmitResponseRequest",
]
