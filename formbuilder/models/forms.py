"""Pydantic models for form and question authoring payloads."""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from formbuilder.models.base import CamelModel
from formbuilder.models.records import FormRecord, QuestionRecord


class FormCreate(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    is_published: Optional[bool] = None
    header_image: Optional[str] = None
    logo_url: Optional[str] = None
    theme_color: Optional[str] = None


class FormUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    is_published: Optional[bool] = None
    header_image: Optional[str] = None
    logo_url: Optional[str] = None
    theme_color: Optional[str] = None


class PublishRequest(CamelModel):
    # Omitted -> toggle the current flag
    is_published: Optional[bool] = None


class QuestionCreate(CamelModel):
    form_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: Optional[str] = None
    type: str
    is_required: bool = False
    order: int = Field(ge=0)
    options: Optional[List[str]] = None


class QuestionUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    type: Optional[str] = None
    is_required: Optional[bool] = None
    order: Optional[int] = Field(default=None, ge=0)
    options: Optional[List[str]] = None


class ReorderItem(CamelModel):
    id: str = Field(min_length=1)
    order: int = Field(ge=0)


class ReorderRequest(CamelModel):
    questions: List[ReorderItem]


class QuestionOut(CamelModel):
    id: str
    form_id: str
    title: str
    description: Optional[str] = None
    type: str
    is_required: bool
    order: int
    options: List[str]
    created_at: str
    updated_at: str

    @classmethod
    def from_record(cls, q: QuestionRecord) -> "QuestionOut":
        return cls(
            id=q.id,
            form_id=q.form_id,
            title=q.title,
            description=q.description,
            type=q.type,
            is_required=q.is_required,
            order=q.order,
            options=list(q.options),
            created_at=q.created_at,
            updated_at=q.updated_at,
        )


class FormOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    is_published: bool
    header_image: Optional[str] = None
    logo_url: Optional[str] = None
    theme_color: Optional[str] = None
    created_by_id: str
    created_at: str
    updated_at: str
    questions: List[QuestionOut]
    response_count: int

    @classmethod
    def from_record(cls, form: FormRecord) -> "FormOut":
        return cls(
            id=form.id,
            title=form.title,
            description=form.description,
            is_published=form.is_published,
            header_image=form.header_image,
            logo_url=form.logo_url,
            theme_color=form.theme_color,
            created_by_id=form.created_by_id,
            created_at=form.created_at,
            updated_at=form.updated_at,
            questions=[QuestionOut.from_record(q) for q in form.questions],
            response_count=form.response_count,
        )


__all__ = [
    "FormCreate",
    "FormOut",
    "FormUpdate",
    "PublishRequest",
    "QuestionCreate",
    "QuestionOut",
    "QuestionUpdate",
    "ReorderItem",
    "ReorderRequest",
]
