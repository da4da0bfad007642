"""Authentication dependencies for the API routes.

`current_identity` requires a valid bearer token; `require_admin` further
requires the ADMIN role. `optional_bearer_token` only extracts the header so
public routes can attach an identity when one is offered.
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from formbuilder.config import AppConfig
from formbuilder.logic.auth_tokens import Identity, InvalidToken, TokenSigner, bearer_token_from_header
from formbuilder.logic.catalog import FormCatalog
from formbuilder.logic.errors import AccessDenied, NotAuthenticated
from formbuilder.models.records import ROLE_ADMIN

logger = logging.getLogger(__name__)


def get_catalog(request: Request) -> FormCatalog:
    return request.app.state.catalog


def get_token_signer(request: Request) -> TokenSigner:
    return request.app.state.token_signer


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def optional_bearer_token(
    authorization: Annotated[Optional[str], Header()] = None,
) -> Optional[str]:
    return bearer_token_from_header(authorization)


def current_identity(
    token: Annotated[Optional[str], Depends(optional_bearer_token)],
    signer: Annotated[TokenSigner, Depends(get_token_signer)],
) -> Identity:
    if not token:
        raise NotAuthenticated("No token provided")
    try:
        return signer.verify(token)
    except InvalidToken as exc:
        logger.info("auth_token_rejected reason=%s", exc)
        raise NotAuthenticated("Invalid token")


def require_admin(identity: Annotated[Identity, Depends(current_identity)]) -> Identity:
    if identity.role != ROLE_ADMIN:
        raise AccessDenied("Admin access required")
    return identity


CatalogDep = Annotated[FormCatalog, Depends(get_catalog)]
SignerDep = Annotated[TokenSigner, Depends(get_token_signer)]
ConfigDep = Annotated[AppConfig, Depends(get_config)]
IdentityDep = Annotated[Identity, Depends(current_identity)]
AdminDep = Annotated[Identity, Depends(require_admin)]


__all__ = [
    "AdminDep",
    "CatalogDep",
    "ConfigDep",
    "IdentityDep",
    "SignerDep",
    "current_identity",
    "get_catalog",
    "get_config",
    "get_token_signer",
    "optional_bearer_token",
    "require_admin",
]
