"""bcrypt password hashing."""

from __future__ import annotations

import bcrypt

from formbuilder.logic.errors import ValidationError

# bcrypt only considers the first 72 bytes of input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    raw = password.encode("utf-8")
    if len(raw) > MAX_PASSWORD_BYTES:
        raise ValidationError("Password must be at most 72 bytes")
    return bcrypt.hashpw(raw, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    raw = password.encode("utf-8")
    if len(raw) > MAX_PASSWORD_BYTES or not password_hash:
        return False
    return bcrypt.checkpw(raw, password_hash.encode("utf-8"))


__all__ = ["hash_password", "verify_password"]
