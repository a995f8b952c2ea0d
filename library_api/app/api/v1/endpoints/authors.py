"""
Author endpoints for API v1.

Authors are a shared catalog; any authenticated user may manage them.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from starlette.concurrency import run_in_threadpool

from library_api.app.core.pagination import validate_page
from library_api.app.core.security import Identity, get_current_user
from library_api.app.schemas.author import AuthorCreate, AuthorRead, AuthorUpdate
from library_api.app.schemas.common import DataResponse, PageResponse
from library_api.app.services.author_service import AuthorService
from library_api.app.services.images import read_upload

router = APIRouter()


@router.post(
    "",
    response_model=DataResponse[AuthorRead],
    status_code=status.HTTP_201_CREATED,
)
def create_author(data: AuthorCreate, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": AuthorService.create(data)}


@router.get("", response_model=DataResponse[List[AuthorRead]])
def list_authors(identity: Identity = Depends(get_current_user)) -> dict:
    return AuthorService.list()


@router.get("/search", response_model=PageResponse[AuthorRead])
def search_authors(
    name: Optional[str] = Query(None),
    address: Optional[str] = Query(None),
    phone: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    nationality: Optional[str] = Query(None),
    birth_date_start: Optional[date] = Query(None),
    birth_date_end: Optional[date] = Query(None),
    page: Optional[int] = Query(None),
    size: Optional[int] = Query(None),
    identity: Identity = Depends(get_current_user),
) -> dict:
    """Search authors; the birth date range needs both bounds to apply."""
    page, size = validate_page(page, size)
    params = {
        "name": name,
        "address": address,
        "phone": phone,
        "email": email,
        "nationality": nationality,
        "birth_date_start": birth_date_start.isoformat() if birth_date_start else None,
        "birth_date_end": birth_date_end.isoformat() if birth_date_end else None,
    }
    return AuthorService.search(params, page, size)


@router.get("/{author_id}", response_model=DataResponse[AuthorRead])
def get_author(author_id: int, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": AuthorService.get(author_id)}


@router.put("/{author_id}", response_model=DataResponse[AuthorRead])
def update_author(author_id: int, data: AuthorUpdate, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": AuthorService.update(author_id, data)}


@router.put("/{author_id}/profile_image", response_model=DataResponse[AuthorRead])
async def upload_author_image(
    author_id: int,
    request: Request,
    identity: Identity = Depends(get_current_user),
) -> dict:
    body = await read_upload(request)
    author = await run_in_threadpool(
        AuthorService.set_profile_image, author_id, body, request.headers.get("content-type")
    )
    return {"data": author}


@router.delete("/{author_id}", response_model=DataResponse[bool])
def delete_author(author_id: int, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": AuthorService.delete(author_id)}
