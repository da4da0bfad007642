"""User data access helpers."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from formbuilder.models.records import UserRecord


def _row_to_user(row: Mapping[str, Any]) -> UserRecord:
    return UserRecord(
        id=str(row["user_id"]),
        email=str(row["email"]),
        name=str(row["name"]),
        role=str(row["role"]),
        password_hash=str(row["password_hash"]),
        created_at=str(row["created_at"]),
    )


def insert_user(conn: Connection, user: UserRecord) -> None:
    conn.execute(
        sql_text(
            """
            INSERT INTO app_user (user_id, email, name, role, password_hash, created_at)
            VALUES (:id, :email, :name, :role, :pw, :created_at)
            """
        ),
        {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "role": user.role,
            "pw": user.password_hash,
            "created_at": user.created_at,
        },
    )


def email_taken(conn: Connection, email: str) -> bool:
    row = conn.execute(
        sql_text("SELECT 1 FROM app_user WHERE lower(email) = lower(:email)"),
        {"email": email},
    ).fetchone()
    return row is not None


def fetch_user(conn: Connection, user_id: str) -> Optional[UserRecord]:
    row = conn.execute(
        sql_text(
            "SELECT user_id, email, name, role, password_hash, created_at FROM app_user WHERE user_id = :id"
        ),
        {"id": user_id},
    ).mappings().fetchone()
    return _row_to_user(row) if row else None


def fetch_user_by_email(conn: Connection, email: str) -> Optional[UserRecord]:
    row = conn.execute(
        sql_text(
            """
            SELECT user_id, email, name, role, password_hash, created_at
            FROM app_user
            WHERE lower(email) = lower(:email)
            """
        ),
        {"email": email},
    ).mappings().fetchone()
    return _row_to_user(row) if row else None


__all__ = ["email_taken", "fetch_user", "fetch_user_by_email", "insert_user"]
