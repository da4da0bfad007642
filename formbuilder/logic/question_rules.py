"""Authoring-time checks for question definitions."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from formbuilder.logic.errors import ValidationError
from formbuilder.models.question_type import QuestionType
from formbuilder.models.records import QuestionRecord

LINEAR_SCALE_OPTION_COUNT = 4


def check_question_type(question_type: str) -> str:
    if question_type not in QuestionType.ALL:
        raise ValidationError(
            f"Unknown question type '{question_type}'; expected one of {sorted(QuestionType.ALL)}"
        )
    return question_type


def check_linear_scale_options(options: Sequence[str]) -> None:
    """Linear scales store [minValue, maxValue, minLabel, maxLabel]."""
    if len(options) != LINEAR_SCALE_OPTION_COUNT:
        raise ValidationError("Linear scale options must be [minValue, maxValue, minLabel, maxLabel]")
    try:
        low, high = int(options[0]), int(options[1])
    except (TypeError, ValueError):
        raise ValidationError("Linear scale bounds must be integers")
    if low >= high:
        raise ValidationError("Linear scale minimum must be lower than its maximum")


def normalize_options(question_type: str, options: Optional[Sequence[str]]) -> List[str]:
    """Return the stored option list for a question of `question_type`."""
    values = [str(o) for o in (options or [])]
    if question_type == QuestionType.LINEAR_SCALE:
        check_linear_scale_options(values)
    return values


def check_order_available(
    siblings: Iterable[QuestionRecord],
    order: int,
    *,
    exclude_id: Optional[str] = None,
) -> None:
    if order < 0:
        raise ValidationError("Question order must be zero or greater")
    for sibling in siblings:
        if sibling.id != exclude_id and sibling.order == order:
            raise ValidationError(f"Order {order} is already used by another question in this form")


def check_reorder_unique(current: Iterable[QuestionRecord], new_orders: dict[str, int]) -> None:
    """Reject a bulk reorder that would leave two questions sharing an order."""
    seen: dict[int, str] = {}
    for question in current:
        order = new_orders.get(question.id, question.order)
        if order < 0:
            raise ValidationError("Question order must be zero or greater")
        if order in seen:
            raise ValidationError(f"Order {order} would be shared by more than one question")
        seen[order] = question.id


__all__ = [
    "LINEAR_SCALE_OPTION_COUNT",
    "check_linear_scale_options",
    "check_order_available",
    "check_question_type",
    "check_reorder_unique",
    "normalize_options",
]
