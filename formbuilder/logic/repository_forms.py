"""Form data access helpers.

Encapsulates form queries and writes so route handlers stay free of inline
SQL. Deletes cascade explicitly (answers, responses, questions, form) inside
the caller's transaction.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from formbuilder.models.records import FormRecord

UPDATABLE_COLUMNS = frozenset(
    {"title", "description", "is_published", "header_image", "logo_url", "theme_color"}
)

FORM_COLUMNS = (
    "form_id, title, description, is_published, header_image, logo_url, "
    "theme_color, created_by_id, created_at, updated_at"
)


def row_to_form(row: Mapping[str, Any]) -> FormRecord:
    return FormRecord(
        id=str(row["form_id"]),
        title=str(row["title"]),
        description=row.get("description"),
        is_published=bool(row["is_published"]),
        header_image=row.get("header_image"),
        logo_url=row.get("logo_url"),
        theme_color=row.get("theme_color"),
        created_by_id=str(row["created_by_id"]),
        created_at=str(row["created_at"]),
        updated_at=str(row["updated_at"]),
    )


def insert_form(conn: Connection, form: FormRecord) -> None:
    conn.execute(
        sql_text(
            f"""
            INSERT INTO form ({FORM_COLUMNS}, insert_seq)
            SELECT :id, :title, :description, :published, :header_image, :logo_url,
                   :theme_color, :owner, :created_at, :updated_at,
                   COALESCE(MAX(insert_seq), 0) + 1
            FROM form
            """
        ),
        {
            "id": form.id,
            "title": form.title,
            "description": form.description,
            "published": bool(form.is_published),
            "header_image": form.header_image,
            "logo_url": form.logo_url,
            "theme_color": form.theme_color,
            "owner": form.created_by_id,
            "created_at": form.created_at,
            "updated_at": form.updated_at,
        },
    )


def fetch_form_row(conn: Connection, form_id: str) -> Optional[FormRecord]:
    row = conn.execute(
        sql_text(f"SELECT {FORM_COLUMNS} FROM form WHERE form_id = :id"),
        {"id": form_id},
    ).mappings().fetchone()
    return row_to_form(row) if row else None


def fetch_forms_for_owner(conn: Connection, owner_id: str) -> List[FormRecord]:
    rows = conn.execute(
        sql_text(
            f"""
            SELECT {FORM_COLUMNS}
            FROM form
            WHERE created_by_id = :owner
            ORDER BY created_at DESC, insert_seq DESC
            """
        ),
        {"owner": owner_id},
    ).mappings().all()
    return [row_to_form(r) for r in rows]


def count_responses(conn: Connection, form_id: str) -> int:
    row = conn.execute(
        sql_text("SELECT COUNT(*) FROM response WHERE form_id = :fid"),
        {"fid": form_id},
    ).fetchone()
    return int(row[0]) if row and row[0] is not None else 0


def update_form_columns(conn: Connection, form_id: str, changes: Mapping[str, Any], updated_at: str) -> None:
    assignments: List[str] = []
    params: Dict[str, Any] = {"id": form_id, "updated_at": updated_at}
    for column, value in changes.items():
        if column not in UPDATABLE_COLUMNS:
            raise KeyError(f"form attribute not updatable: {column}")
        assignments.append(f"{column} = :{column}")
        params[column] = bool(value) if column == "is_published" else value
    assignments.append("updated_at = :updated_at")
    conn.execute(
        sql_text(f"UPDATE form SET {', '.join(assignments)} WHERE form_id = :id"),
        params,
    )


def delete_form_cascade(conn: Connection, form_id: str) -> None:
    params = {"fid": form_id}
    conn.execute(
        sql_text(
            "DELETE FROM answer WHERE response_id IN (SELECT response_id FROM response WHERE form_id = :fid)"
        ),
        params,
    )
    conn.execute(sql_text("DELETE FROM response WHERE form_id = :fid"), params)
    conn.execute(sql_text("DELETE FROM question WHERE form_id = :fid"), params)
    conn.execute(sql_text("DELETE FROM form WHERE form_id = :fid"), params)


__all__ = [
    "FORM_COLUMNS",
    "UPDATABLE_COLUMNS",
    "count_responses",
    "delete_form_cascade",
    "fetch_form_row",
    "fetch_forms_for_owner",
    "insert_form",
    "row_to_form",
    "update_form_columns",
]
