"""QuestionType constants for the six supported question kinds.

Provides a simple constants container instead of an Enum so the wire values
stay plain strings end to end.
"""

from __future__ import annotations


class QuestionType:
    SHORT_TEXT = "SHORT_TEXT"
    LONG_TEXT = "LONG_TEXT"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    CHECKBOX = "CHECKBOX"
    LINEAR_SCALE = "LINEAR_SCALE"
    SECTION_HEADER = "SECTION_HEADER"

    ALL = frozenset({SHORT_TEXT, LONG_TEXT, MULTIPLE_CHOICE, CHECKBOX, LINEAR_SCALE, SECTION_HEADER})
    CHOICE = frozenset({MULTIPLE_CHOICE, CHECKBOX})


def is_answerable(question_type: str) -> bool:
    """Section headers carry no value; every other type takes an answer."""
    return question_type != QuestionType.SECTION_HEADER


__all__ = ["QuestionType", "is_answerable"]
