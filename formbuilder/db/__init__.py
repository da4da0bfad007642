"""Database bootstrap utilities for the form builder service.

Exposes engine construction and the migrations runner that applies the SQL
files shipped in `formbuilder/db/migrations/`. The DB layer does not leak ORM
models into route handlers; repositories use SQLAlchemy Core text queries.
"""

from formbuilder.db.base import get_engine
from formbuilder.db.migrations_runner import apply_migrations

__all__ = [
    "get_engine",
    "apply_migrations",
]
