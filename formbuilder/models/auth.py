"""Pydantic models for registration, login and user bodies."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from formbuilder.models.base import CamelModel
from formbuilder.models.records import UserRecord


class RegisterRequest(CamelModel):
    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=6, max_length=72)
    name: str = Field(min_length=1, max_length=200)
    role: Literal["ADMIN", "USER"] = "USER"


class LoginRequest(CamelModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserOut(CamelModel):
    id: str
    email: str
    name: str
    role: str
    created_at: str

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserOut":
        return cls(id=user.id, email=user.email, name=user.name, role=user.role, created_at=user.created_at)


__all__ = ["LoginRequest", "RegisterRequest", "UserOut"]
