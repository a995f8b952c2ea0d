"""
Contact endpoints for API v1.

All routes are scoped to the authenticated user: a contact of another
user answers 404 exactly like a missing one.  ``/search`` is declared
before ``/{contact_id}`` so it is never parsed as an id.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from starlette.concurrency import run_in_threadpool

from library_api.app.core.pagination import validate_page
from library_api.app.core.security import Identity, get_current_user
from library_api.app.schemas.common import DataResponse, PageResponse
from library_api.app.schemas.contact import ContactCreate, ContactRead, ContactUpdate
from library_api.app.services.contact_service import ContactService
from library_api.app.services.images import read_upload

router = APIRouter()


@router.post(
    "",
    response_model=DataResponse[ContactRead],
    status_code=status.HTTP_201_CREATED,
)
def create_contact(data: ContactCreate, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": ContactService.create(identity, data)}


@router.get("", response_model=DataResponse[List[ContactRead]])
def list_contacts(identity: Identity = Depends(get_current_user)) -> dict:
    """Return every contact of the caller, unpaged."""
    return ContactService.list(identity)


@router.get("/search", response_model=PageResponse[ContactRead])
def search_contacts(
    name: Optional[str] = Query(None, description="Matches first or last name"),
    phone: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    page: Optional[int] = Query(None),
    size: Optional[int] = Query(None),
    identity: Identity = Depends(get_current_user),
) -> dict:
    page, size = validate_page(page, size)
    params = {"name": name, "phone": phone, "email": email}
    return ContactService.search(identity, params, page, size)


@router.get("/{contact_id}", response_model=DataResponse[ContactRead])
def get_contact(contact_id: int, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": ContactService.get(identity, contact_id)}


@router.put("/{contact_id}", response_model=DataResponse[ContactRead])
def update_contact(contact_id: int, data: ContactUpdate, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": ContactService.update(identity, contact_id, data)}


@router.put("/{contact_id}/profile_image", response_model=DataResponse[ContactRead])
async def upload_contact_image(
    contact_id: int,
    request: Request,
    identity: Identity = Depends(get_current_user),
) -> dict:
    """Replace the contact's profile image with the raw request body."""
    body = await read_upload(request)
    contact = await run_in_threadpool(
        ContactService.set_profile_image, identity, contact_id, body, request.headers.get("content-type")
    )
    return {"data": contact}


@router.delete("/{contact_id}", response_model=DataResponse[bool])
def delete_contact(contact_id: int, identity: Identity = Depends(get_current_user)) -> dict:
    """Delete the contact; its addresses go with it."""
    return {"data": ContactService.delete(identity, contact_id)}
