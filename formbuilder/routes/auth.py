"""Registration, login and current-user routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from formbuilder.guards.auth import CatalogDep, IdentityDep, SignerDep
from formbuilder.http.envelope import success
from formbuilder.logic.errors import NotAuthenticated
from formbuilder.logic.passwords import hash_password, verify_password
from formbuilder.models.auth import LoginRequest, RegisterRequest, UserOut

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/auth/register", status_code=201, summary="Register a user account")
def register(payload: RegisterRequest, catalog: CatalogDep, signer: SignerDep):
    user = catalog.create_user(
        email=payload.email,
        name=payload.name,
        role=payload.role,
        password_hash=hash_password(payload.password),
    )
    logger.info("user_registered", extra={"user_id": user.id, "role": user.role})
    return success(
        {"user": UserOut.from_record(user).to_wire(), "token": signer.issue(user)},
        "User registered successfully",
    )


@router.post("/auth/login", summary="Exchange credentials for a token")
def login(payload: LoginRequest, catalog: CatalogDep, signer: SignerDep):
    user = catalog.get_user_by_email(payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info("login_failed")
        raise NotAuthenticated("Invalid email or password")
    return success(
        {"user": UserOut.from_record(user).to_wire(), "token": signer.issue(user)},
        "Login successful",
    )


@router.get("/auth/me", summary="Return the authenticated user")
def me(identity: IdentityDep, catalog: CatalogDep):
    user = catalog.get_user(identity.user_id)
    if user is None:
        raise NotAuthenticated("User not found")
    return success(UserOut.from_record(user).to_wire())
