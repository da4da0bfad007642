"""Form authoring routes.

Admins create and manage their own forms. Reading a single form is public
once it is published; an unpublished form is only visible to its owner.
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends

from formbuilder.guards.auth import AdminDep, CatalogDep, SignerDep, optional_bearer_token
from formbuilder.http.envelope import success
from formbuilder.logic.auth_tokens import InvalidToken
from formbuilder.logic.errors import AccessDenied, NotFound
from formbuilder.logic.events import FORM_DELETED, FORM_PUBLISHED, FORM_UNPUBLISHED, publish
from formbuilder.logic.ownership import require_owned_form
from formbuilder.models.forms import FormCreate, FormOut, FormUpdate, PublishRequest
from formbuilder.models.records import FormRecord

router = APIRouter()
logger = logging.getLogger(__name__)


def _publish_state_change(before: bool, after: FormRecord) -> None:
    if before == after.is_published:
        return
    event = FORM_PUBLISHED if after.is_published else FORM_UNPUBLISHED
    publish(event, {"form_id": after.id})


@router.post("/forms", status_code=201, summary="Create a form")
def create_form(payload: FormCreate, identity: AdminDep, catalog: CatalogDep):
    form = catalog.create_form(
        owner_id=identity.user_id,
        title=payload.title,
        description=payload.description,
        is_published=bool(payload.is_published),
        header_image=payload.header_image,
        logo_url=payload.logo_url,
        theme_color=payload.theme_color,
    )
    logger.info("form_created", extra={"form_id": form.id, "owner_id": identity.user_id})
    return success(FormOut.from_record(form).to_wire(), "Form created successfully")


@router.get("/forms", summary="List the caller's forms, newest first")
def list_forms(identity: AdminDep, catalog: CatalogDep):
    forms = catalog.list_forms_for_owner(identity.user_id)
    return success([FormOut.from_record(f).to_wire() for f in forms])


@router.get("/forms/{form_id}", summary="Get a form (public when published)")
def get_form(
    form_id: str,
    catalog: CatalogDep,
    signer: SignerDep,
    token: Annotated[Optional[str], Depends(optional_bearer_token)],
):
    form = catalog.get_form(form_id)
    if form is None:
        raise NotFound("Form not found")
    if not form.is_published:
        if not token:
            raise AccessDenied("This form is not published")
        try:
            identity = signer.verify(token)
        except InvalidToken:
            raise AccessDenied("This form is not published")
        if identity.user_id != form.created_by_id:
            raise AccessDenied("Access denied")
    return success(FormOut.from_record(form).to_wire())


@router.put("/forms/{form_id}", summary="Update form fields")
def update_form(form_id: str, payload: FormUpdate, identity: AdminDep, catalog: CatalogDep):
    before = require_owned_form(catalog, form_id, identity.user_id)
    changes = payload.model_dump(exclude_unset=True)
    # title and is_published are NOT NULL columns; an explicit null leaves them as is
    for key in ("title", "is_published"):
        if key in changes and changes[key] is None:
            del changes[key]
    updated = catalog.update_form(form_id, changes)
    _publish_state_change(before.is_published, updated)
    return success(FormOut.from_record(updated).to_wire(), "Form updated successfully")


@router.delete("/forms/{form_id}", summary="Delete a form with its questions and responses")
def delete_form(form_id: str, identity: AdminDep, catalog: CatalogDep):
    require_owned_form(catalog, form_id, identity.user_id)
    catalog.delete_form(form_id)
    publish(FORM_DELETED, {"form_id": form_id})
    logger.info("form_deleted", extra={"form_id": form_id})
    return success(message="Form deleted successfully")


@router.patch("/forms/{form_id}/publish", summary="Publish, unpublish or toggle a form")
def publish_form(form_id: str, identity: AdminDep, catalog: CatalogDep, payload: Optional[PublishRequest] = None):
    form = require_owned_form(catalog, form_id, identity.user_id)
    requested = payload.is_published if payload is not None else None
    target = (not form.is_published) if requested is None else requested
    updated = catalog.update_form(form_id, {"is_published": target})
    _publish_state_change(form.is_published, updated)
    state = "published" if updated.is_published else "unpublished"
    return success(FormOut.from_record(updated).to_wire(), f"Form {state} successfully")
