"""Domain error taxonomy.

Every rejection raised by the catalog, validator, aggregator or guards is a
FormBuilderError carrying a stable `code` and the HTTP `status` it maps to.
The HTTP layer renders them as problem+json (see formbuilder/http/problem.py).
"""

from __future__ import annotations

from typing import Any, Dict


class FormBuilderError(Exception):
    code = "SERVER_ERROR"
    status = 500
    title = "Internal Server Error"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail or self.title
        super().__init__(self.detail)

    def to_problem(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "status": self.status,
            "detail": self.detail,
            "code": self.code,
        }


class NotFound(FormBuilderError):
    code = "NOT_FOUND"
    status = 404
    title = "Not Found"


class AccessDenied(FormBuilderError):
    code = "ACCESS_DENIED"
    status = 403
    title = "Forbidden"


class NotAuthenticated(AccessDenied):
    """Missing, malformed or expired credential on a protected route."""

    code = "NOT_AUTHENTICATED"
    status = 401
    title = "Unauthorized"


class FormClosed(FormBuilderError):
    code = "FORM_CLOSED"
    status = 403
    title = "Form Closed"


class MissingRequiredAnswer(FormBuilderError):
    code = "MISSING_REQUIRED_ANSWER"
    status = 400
    title = "Missing Required Answer"

    def __init__(self, question_id: str, question_title: str) -> None:
        self.question_id = question_id
        self.question_title = question_title
        super().__init__(f'Question "{question_title}" is required')

    def to_problem(self) -> Dict[str, Any]:
        problem = super().to_problem()
        problem["question"] = {"id": self.question_id, "title": self.question_title}
        return problem


class ValidationError(FormBuilderError):
    code = "VALIDATION_ERROR"
    status = 422
    title = "Invalid Request"


class Conflict(FormBuilderError):
    code = "CONFLICT"
    status = 409
    title = "Conflict"


class ServerError(FormBuilderError):
    pass


__all__ = [
    "AccessDenied",
    "Conflict",
    "FormBuilderError",
    "FormClosed",
    "MissingRequiredAnswer",
    "NotAuthenticated",
    "NotFound",
    "ServerError",
    "ValidationError",
]
