"""
Loan endpoints for API v1.

Loan search pages with ``page_size`` rather than ``size`` and validates
its date ranges strictly (see ``LoanService.validate_search``).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from library_api.app.core.pagination import validate_page
from library_api.app.core.security import Identity, get_current_user
from library_api.app.schemas.common import DataResponse, PageResponse
from library_api.app.schemas.loan import LoanCreate, LoanRead, LoanUpdate
from library_api.app.services.loan_service import LoanService

router = APIRouter()


@router.post(
    "",
    response_model=DataResponse[LoanRead],
    status_code=status.HTTP_201_CREATED,
)
def create_loan(data: LoanCreate, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": LoanService.create(data)}


@router.get("", response_model=DataResponse[List[LoanRead]])
def list_loans(identity: Identity = Depends(get_current_user)) -> dict:
    return LoanService.list()


@router.get("/search", response_model=PageResponse[LoanRead])
def search_loans(
    member_id: Optional[int] = Query(None),
    librarian_id: Optional[int] = Query(None),
    loan_date_start: Optional[str] = Query(None, examples=["2023-06-01 00:00:00"]),
    loan_date_end: Optional[str] = Query(None),
    return_date_start: Optional[str] = Query(None),
    return_date_end: Optional[str] = Query(None),
    page: Optional[int] = Query(None),
    page_size: Optional[int] = Query(None),
    identity: Identity = Depends(get_current_user),
) -> dict:
    page, page_size = validate_page(page, page_size, size_param="page_size")
    params = {
        "member_id": member_id,
        "librarian_id": librarian_id,
        "loan_date_start": loan_date_start,
        "loan_date_end": loan_date_end,
        "return_date_start": return_date_start,
        "return_date_end": return_date_end,
    }
    return LoanService.search(params, page, page_size)


@router.get("/{loan_id}", response_model=DataResponse[LoanRead])
def get_loan(loan_id: int, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": LoanService.get(loan_id)}


@router.put("/{loan_id}", response_model=DataResponse[LoanRead])
def update_loan(loan_id: int, data: LoanUpdate, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": LoanService.update(loan_id, data)}


@router.delete("/{loan_id}", response_model=DataResponse[bool])
def delete_loan(loan_id: int, identity: Identity = Depends(get_current_user)) -> dict:
    return {"data": LoanService.delete(loan_id)}
