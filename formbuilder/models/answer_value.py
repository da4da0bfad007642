"""Tagged answer values.

An answer is either a single string (text, single choice, linear scale) or a
list of strings (checkbox). The wire format is resolved into one of these two
classes at the HTTP boundary and when reading persisted rows.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Tuple, Union


@dataclass(frozen=True)
class ScalarValue:
    text: str

    def is_blank(self) -> bool:
        return self.text == ""

    def tally_keys(self) -> Tuple[str, ...]:
        return (self.text,)

    def to_wire(self) -> str:
        return self.text

    def display(self) -> str:
        return self.text


@dataclass(frozen=True)
class MultiSelectValue:
    items: Tuple[str, ...]

    def is_blank(self) -> bool:
        return len(self.items) == 0

    def tally_keys(self) -> Tuple[str, ...]:
        return self.items

    def to_wire(self) -> list[str]:
        return list(self.items)

    def display(self) -> str:
        return ", ".join(self.items)


AnswerValue = Union[ScalarValue, MultiSelectValue]


def answer_value_from_wire(raw: Any) -> AnswerValue:
    """Resolve a decoded JSON value into a tagged answer value.

    Raises ValueError for anything other than a string or a list of strings.
    """
    if isinstance(raw, str):
        return ScalarValue(raw)
    if isinstance(raw, (list, tuple)) and all(isinstance(item, str) for item in raw):
        return MultiSelectValue(tuple(raw))
    raise ValueError("answer value must be a string or a list of strings")


def dump_answer_value(value: AnswerValue) -> str:
    return json.dumps(value.to_wire(), ensure_ascii=False)


def load_answer_value(stored: str) -> AnswerValue:
    return answer_value_from_wire(json.loads(stored))


__all__ = [
    "AnswerValue",
    "MultiSelectValue",
    "ScalarValue",
    "answer_value_from_wire",
    "dump_answer_value",
    "load_answer_value",
]
