"""Question data access helpers.

Questions are always returned ordered by question_order ascending
(tie-breaker by question_id) so callers can rely on display order.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from formbuilder.models.records import QuestionRecord

# Record attribute -> column for partial updates
UPDATABLE_COLUMNS: Dict[str, str] = {
    "title": "title",
    "description": "description",
    "type": "question_type",
    "is_required": "is_required",
    "order": "question_order",
    "options": "options_json",
}

QUESTION_COLUMNS = (
    "question_id, form_id, title, description, question_type, is_required, "
    "question_order, options_json, created_at, updated_at"
)


def row_to_question(row: Mapping[str, Any]) -> QuestionRecord:
    options_raw = row.get("options_json") or "[]"
    options = json.loads(options_raw)
    return QuestionRecord(
        id=str(row["question_id"]),
        form_id=str(row["form_id"]),
        title=str(row["title"]),
        description=row.get("description"),
        type=str(row["question_type"]),
        is_required=bool(row["is_required"]),
        order=int(row["question_order"]),
        options=[str(o) for o in options] if isinstance(options, list) else [],
        created_at=str(row["created_at"]),
        updated_at=str(row["updated_at"]),
    )


def insert_question(conn: Connection, question: QuestionRecord) -> None:
    conn.execute(
        sql_text(
            f"""
            INSERT INTO question ({QUESTION_COLUMNS})
            VALUES (:id, :form_id, :title, :description, :qtype, :required, :ord, :options, :created_at, :updated_at)
            """
        ),
        {
            "id": question.id,
            "form_id": question.form_id,
            "title": question.title,
            "description": question.description,
            "qtype": question.type,
            "required": bool(question.is_required),
            "ord": int(question.order),
            "options": json.dumps(list(question.options), ensure_ascii=False),
            "created_at": question.created_at,
            "updated_at": question.updated_at,
        },
    )


def fetch_question(conn: Connection, question_id: str) -> Optional[QuestionRecord]:
    row = conn.execute(
        sql_text(f"SELECT {QUESTION_COLUMNS} FROM question WHERE question_id = :id"),
        {"id": question_id},
    ).mappings().fetchone()
    return row_to_question(row) if row else None


def fetch_questions_for_form(conn: Connection, form_id: str) -> List[QuestionRecord]:
    rows = conn.execute(
        sql_text(
            f"""
            SELECT {QUESTION_COLUMNS}
            FROM question
            WHERE form_id = :fid
            ORDER BY question_order ASC, question_id ASC
            """
        ),
        {"fid": form_id},
    ).mappings().all()
    return [row_to_question(r) for r in rows]


def question_ids_for_form(conn: Connection, form_id: str) -> set[str]:
    rows = conn.execute(
        sql_text("SELECT question_id FROM question WHERE form_id = :fid"),
        {"fid": form_id},
    ).fetchall()
    return {str(r[0]) for r in rows}


def update_question_columns(conn: Connection, question_id: str, changes: Mapping[str, Any], updated_at: str) -> None:
    assignments: List[str] = []
    params: Dict[str, Any] = {"id": question_id, "updated_at": updated_at}
    for attr, value in changes.items():
        column = UPDATABLE_COLUMNS.get(attr)
        if column is None:
            raise KeyError(f"question attribute not updatable: {attr}")
        if attr == "options":
            value = json.dumps(list(value or []), ensure_ascii=False)
        elif attr == "is_required":
            value = bool(value)
        assignments.append(f"{column} = :{column}")
        params[column] = value
    assignments.append("updated_at = :updated_at")
    conn.execute(
        sql_text(f"UPDATE question SET {', '.join(assignments)} WHERE question_id = :id"),
        params,
    )


def update_question_order(conn: Connection, question_id: str, order: int, updated_at: str) -> int:
    result = conn.execute(
        sql_text(
            "UPDATE question SET question_order = :ord, updated_at = :updated_at WHERE question_id = :id"
        ),
        {"id": question_id, "ord": int(order), "updated_at": updated_at},
    )
    return int(result.rowcount or 0)


def delete_question(conn: Connection, question_id: str) -> None:
    conn.execute(sql_text("DELETE FROM answer WHERE question_id = :id"), {"id": question_id})
    conn.execute(sql_text("DELETE FROM question WHERE question_id = :id"), {"id": question_id})


__all__ = [
    "QUESTION_COLUMNS",
    "UPDATABLE_COLUMNS",
    "delete_question",
    "fetch_question",
    "fetch_questions_for_form",
    "insert_question",
    "question_ids_for_form",
    "row_to_question",
    "update_question_columns",
    "update_question_order",
]
