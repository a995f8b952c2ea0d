"""
Pydantic models for book loans.

A loan links a member and a librarian (both user ids) to a loan
timestamp and an optional return timestamp.  Timestamps use the
``YYYY-MM-DD HH:MM:SS`` format on input and output.  Whether the
referenced users exist is checked by ``LoanService``, not here.
"""

from typing import Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from .common import RequestModel, check_datetime
from .user import UserSummary


class LoanCreate(RequestModel):
    member_id: int = Field(..., examples=[1])
    librarian_id: int = Field(..., examples=[2])
    loan_date: str = Field(..., examples=["2023-06-01 11:11:11"])
    return_date: Optional[str] = Field(None, examples=["2023-06-08 11:11:11"])

    @field_validator("loan_date", "return_date")
    @classmethod
    def _timestamp(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        return check_datetime(v, info.field_name)


class LoanUpdate(RequestModel):
    """All fields optional; omitted fields keep their stored value."""

    member_id: Optional[int] = None
    librarian_id: Optional[int] = None
    loan_date: Optional[str] = None
    return_date: Optional[str] = None

    @field_validator("loan_date", "return_date")
    @classmethod
    def _timestamp(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        return check_datetime(v, info.field_name)


class LoanRelationships(BaseModel):
    member: Optional[UserSummary] = None
    librarian: Optional[UserSummary] = None


class LoanRead(BaseModel):
    id: int
    member_id: int
    librarian_id: int
    loan_date: str
    return_date: Optional[str] = None
    relationships: LoanRelationships
