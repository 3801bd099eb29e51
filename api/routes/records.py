"""
api/routes/records.py -- CRUD router shared by invoices and zakazky.

build_router() produces the five routes for one Resource:

  POST   /<plural>        -- create; 201 with the stored row
  GET    /<plural>        -- list every row, unfiltered
  GET    /<plural>/{id}   -- one row or 404
  PUT    /<plural>/{id}   -- overwrite every field; row or 404
  DELETE /<plural>/{id}   -- {message, <noun>: prior row} or 404

Every route requires a valid bearer token (router-level require_token).
Handlers are plain ``def`` so FastAPI runs them on its thread pool and a
slow database call never blocks the event loop.

A StoreError from the repository is logged with its subclass
(ConstraintViolationError vs StoreUnavailableError) and answered with one
fixed 500 message per operation. No driver detail reaches the client.

No ``from __future__ import annotations`` here: the handler signatures use
the Resource's pydantic models, and FastAPI needs them as real objects.
"""

import logging
from dataclasses import dataclass

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, create_model

from auth.dependencies import require_token
from billing.store import RecordStore
from core.errors import StoreError

logger = logging.getLogger("stavba.api")


@dataclass(frozen=True)
class Resource:
    """Names and models describing one CRUD resource."""

    noun: str  # "invoice" -- messages and the delete response key
    plural: str  # "invoices" -- URL segment and list messages
    state_attr: str  # attribute on app.state holding the RecordStore
    body_model: type[BaseModel]
    row_model: type[BaseModel]

    @property
    def title(self) -> str:
        return self.noun.capitalize()


def _store_failure(exc: StoreError, log_message: str, client_message: str) -> HTTPException:
    logger.exception("%s (%s)", log_message, type(exc).__name__)
    return HTTPException(status_code=500, detail=client_message)


def build_router(resource: Resource) -> APIRouter:
    """Return an APIRouter exposing create/list/get/update/delete for resource."""
    router = APIRouter(prefix=f"/{resource.plural}", dependencies=[Depends(require_token)])

    body_model = resource.body_model
    row_model = resource.row_model
    deleted_model = create_model(
        f"{resource.title}Deleted",
        message=(str, ...),
        **{resource.noun: (row_model, ...)},
    )
    not_found = f"{resource.title} not found"

    def _store(request: Request) -> RecordStore:
        return getattr(request.app.state, resource.state_attr)

    @router.post("", response_model=row_model, status_code=201, name=f"create_{resource.noun}")
    def create_record(request: Request, body: body_model):
        try:
            return _store(request).create(body.model_dump())
        except StoreError as exc:
            raise _store_failure(
                exc, f"Error inserting {resource.noun}", f"Failed to create {resource.noun}"
            ) from exc

    @router.get("", response_model=list[row_model], name=f"list_{resource.plural}")
    def list_records(request: Request):
        try:
            return _store(request).list_all()
        except StoreError as exc:
            raise _store_failure(
                exc, f"Error fetching {resource.plural}", f"Failed to fetch {resource.plural}"
            ) from exc

    @router.get("/{record_id}", response_model=row_model, name=f"get_{resource.noun}")
    def get_record(request: Request, record_id: int):
        try:
            row = _store(request).get(record_id)
        except StoreError as exc:
            raise _store_failure(
                exc, f"Error fetching {resource.noun}", f"Failed to fetch {resource.noun}"
            ) from exc
        if row is None:
            raise HTTPException(status_code=404, detail=not_found)
        return row

    @router.put("/{record_id}", response_model=row_model, name=f"update_{resource.noun}")
    def update_record(request: Request, record_id: int, body: body_model):
        try:
            row = _store(request).update(record_id, body.model_dump())
        except StoreError as exc:
            raise _store_failure(
                exc, f"Error updating {resource.noun}", f"Failed to update {resource.noun}"
            ) from exc
        if row is None:
            raise HTTPException(status_code=404, detail=not_found)
        return row

    @router.delete("/{record_id}", response_model=deleted_model, name=f"delete_{resource.noun}")
    def delete_record(request: Request, record_id: int):
        try:
            row = _store(request).delete(record_id)
        except StoreError as exc:
            raise _store_failure(
                exc, f"Error deleting {resource.noun}", f"Failed to delete {resource.noun}"
            ) from exc
        if row is None:
            raise HTTPException(status_code=404, detail=not_found)
        return {"message": f"{resource.title} deleted successfully", resource.noun: row}

    return router
