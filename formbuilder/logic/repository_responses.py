"""Response and answer data access helpers.

A response and its answers are written by the caller inside one transaction.
Reads join each answer with its question and each response with its
responder account (when one is attached).
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from formbuilder.logic.repository_questions import row_to_question
from formbuilder.models.answer_value import dump_answer_value, load_answer_value
from formbuilder.models.records import (
    AnswerRecord,
    ResponderSummary,
    ResponseRecord,
    SubmittedAnswer,
)

_RESPONSE_SELECT = """
    SELECT r.response_id, r.form_id, r.responder_id, r.responder_name, r.created_at,
           u.name AS responder_account_name, u.email AS responder_email
    FROM response r
    LEFT JOIN app_user u ON u.user_id = r.responder_id
"""

_ANSWER_SELECT = """
    SELECT a.answer_id, a.response_id, a.question_id, a.value_json, a.answer_position,
           q.form_id, q.title, q.description, q.question_type, q.is_required,
           q.question_order, q.options_json, q.created_at, q.updated_at
    FROM answer a
    JOIN question q ON q.question_id = a.question_id
"""


def _row_to_response(row: Mapping[str, Any]) -> ResponseRecord:
    responder_id = row.get("responder_id")
    responder = None
    if responder_id and row.get("responder_email") is not None:
        responder = ResponderSummary(
            id=str(responder_id),
            name=str(row.get("responder_account_name") or ""),
            email=str(row.get("responder_email") or ""),
        )
    return ResponseRecord(
        id=str(row["response_id"]),
        form_id=str(row["form_id"]),
        created_at=str(row["created_at"]),
        responder_id=str(responder_id) if responder_id else None,
        responder_name=row.get("responder_name"),
        responder=responder,
    )


def _row_to_answer(row: Mapping[str, Any]) -> AnswerRecord:
    return AnswerRecord(
        id=str(row["answer_id"]),
        response_id=str(row["response_id"]),
        question_id=str(row["question_id"]),
        value=load_answer_value(str(row["value_json"])),
        question=row_to_question(row),
    )


def insert_response(
    conn: Connection,
    response: ResponseRecord,
    answers: Sequence[SubmittedAnswer],
    answer_ids: Sequence[str],
) -> None:
    conn.execute(
        sql_text(
            """
            INSERT INTO response (response_id, form_id, responder_id, responder_name, created_at, insert_seq)
            SELECT :id, :form_id, :responder_id, :responder_name, :created_at,
                   COALESCE(MAX(insert_seq), 0) + 1
            FROM response
            """
        ),
        {
            "id": response.id,
            "form_id": response.form_id,
            "responder_id": response.responder_id,
            "responder_name": response.responder_name,
            "created_at": response.created_at,
        },
    )
    for position, (answer, answer_id) in enumerate(zip(answers, answer_ids)):
        conn.execute(
            sql_text(
                """
                INSERT INTO answer (answer_id, response_id, question_id, answer_position, value_json)
                VALUES (:id, :rid, :qid, :pos, :value)
                """
            ),
            {
                "id": answer_id,
                "rid": response.id,
                "qid": answer.question_id,
                "pos": position,
                "value": dump_answer_value(answer.value),
            },
        )


def _attach_answers(responses: List[ResponseRecord], answer_rows: Sequence[Mapping[str, Any]]) -> None:
    by_id: Dict[str, ResponseRecord] = {r.id: r for r in responses}
    for row in answer_rows:
        owner = by_id.get(str(row["response_id"]))
        if owner is not None:
            owner.answers.append(_row_to_answer(row))


def fetch_response(conn: Connection, response_id: str) -> Optional[ResponseRecord]:
    row = conn.execute(
        sql_text(_RESPONSE_SELECT + " WHERE r.response_id = :id"),
        {"id": response_id},
    ).mappings().fetchone()
    if not row:
        return None
    response = _row_to_response(row)
    answer_rows = conn.execute(
        sql_text(_ANSWER_SELECT + " WHERE a.response_id = :id ORDER BY a.answer_position ASC"),
        {"id": response_id},
    ).mappings().all()
    _attach_answers([response], answer_rows)
    return response


def fetch_responses_for_form(conn: Connection, form_id: str, *, newest_first: bool = True) -> List[ResponseRecord]:
    direction = "DESC" if newest_first else "ASC"
    rows = conn.execute(
        sql_text(
            _RESPONSE_SELECT
            + f" WHERE r.form_id = :fid ORDER BY r.created_at {direction}, r.insert_seq {direction}"
        ),
        {"fid": form_id},
    ).mappings().all()
    responses = [_row_to_response(r) for r in rows]
    if not responses:
        return responses
    answer_rows = conn.execute(
        sql_text(
            _ANSWER_SELECT
            + """
            JOIN response r ON r.response_id = a.response_id
            WHERE r.form_id = :fid
            ORDER BY a.response_id ASC, a.answer_position ASC
            """
        ),
        {"fid": form_id},
    ).mappings().all()
    _attach_answers(responses, answer_rows)
    return responses


def delete_response(conn: Connection, response_id: str) -> None:
    conn.execute(sql_text("DELETE FROM answer WHERE response_id = :id"), {"id": response_id})
    conn.execute(sql_text("DELETE FROM response WHERE response_id = :id"), {"id": response_id})


__all__ = [
    "delete_response",
    "fetch_response",
    "fetch_responses_for_form",
    "insert_response",
]
