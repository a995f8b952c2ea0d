"""
Address endpoints for API v1, nested under ``/contacts/{contact_id}``.

The contact must belong to the caller; otherwise every route answers
404 before the address is even looked at.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from library_api.app.core.pagination import validate_page
from library_api.app.core.security import Identity, get_current_user
from library_api.app.schemas.address import AddressCreate, AddressRead, AddressUpdate
from library_api.app.schemas.common import DataResponse, PageResponse
from library_api.app.services.address_service import AddressService

router = APIRouter()


@router.post(
    "/{contact_id}/addresses",
    response_model=DataResponse[AddressRead],
    status_code=status.HTTP_201_CREATED,
)
def create_address(contact_id: int, data: AddressCreate, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": AddressService.create(identity, contact_id, data)}


@router.get("/{contact_id}/addresses", response_model=DataResponse[List[AddressRead]])
def list_addresses(contact_id: int, identity: Identity = Depends(get_current_user)) -> dict:
    return AddressService.list(identity, contact_id)


@router.get("/{contact_id}/addresses/search", response_model=PageResponse[AddressRead])
def search_addresses(
    contact_id: int,
    street: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    province: Optional[str] = Query(None),
    country: Optional[str] = Query(None),
    postal_code: Optional[str] = Query(None),
    page: Optional[int] = Query(None),
    size: Optional[int] = Query(None),
    identity: Identity = Depends(get_current_user),
) -> dict:
    page, size = validate_page(page, size)
    params = {
        "street": street,
        "city": city,
        "province": province,
        "country": country,
        "postal_code": postal_code,
    }
    return AddressService.search(identity, contact_id, params, page, size)


@router.get("/{contact_id}/addresses/{address_id}", response_model=DataResponse[AddressRead])
def get_address(contact_id: int, address_id: int, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": AddressService.get(identity, contact_id, address_id)}


@router.put("/{contact_id}/addresses/{address_id}", response_model=DataResponse[AddressRead])
def update_address(
    contact_id: int,
    address_id: int,
    data: AddressUpdate,
    identity: Identity = Depends(get_current_user),
) -> dict:
    return {"data": AddressService.update(identity, contact_id, address_id, data)}


@router.delete("/{contact_id}/addresses/{address_id}", response_model=DataResponse[bool])
def delete_address(contact_id: int, address_id: int, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": AddressService.delete(identity, contact_id, address_id)}
