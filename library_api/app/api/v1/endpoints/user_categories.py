"""User category endpoints for API v1."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from library_api.app.core.pagination import validate_page
from library_api.app.core.security import Identity, get_current_user
from library_api.app.schemas.common import DataResponse, PageResponse
from library_api.app.schemas.user_category import UserCategoryCreate, UserCategoryRead, UserCategoryUpdate
from library_api.app.services.user_category_service import UserCategoryService

router = APIRouter()


@router.post(
    "",
    response_model=DataResponse[UserCategoryRead],
    status_code=status.HTTP_201_CREATED,
)
def create_user_category(data: UserCategoryCreate, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": UserCategoryService.create(data)}


@router.get("", response_model=DataResponse[List[UserCategoryRead]])
def list_user_categories(identity: Identity = Depends(get_current_user)) -> dict:
    return UserCategoryService.list()


@router.get("/search", response_model=PageResponse[UserCategoryRead])
def search_user_categories(
    name: Optional[str] = Query(None),
    description: Optional[str] = Query(None),
    page: Optional[int] = Query(None),
    size: Optional[int] = Query(None),
    identity: Identity = Depends(get_current_user),
) -> dict:
    page, size = validate_page(page, size)
    return UserCategoryService.search({"name": name, "description": description}, page, size)


@router.get("/{category_id}", response_model=DataResponse[UserCategoryRead])
def get_user_category(category_id: int, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": UserCategoryService.get(category_id)}


@router.put("/{category_id}", response_model=DataResponse[UserCategoryRead])
def update_user_category(
    category_id: int,
    data: UserCategoryUpdate,
    identity: Identity = Depends(get_current_user),
) -> dict:
    return {"data": UserCategoryService.update(category_id, data)}


@router.delete("/{category_id}", response_model=DataResponse[bool])
def delete_user_category(category_id: int, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": UserCategoryService.delete(category_id)}
