"""
Pydantic models for contacts.

A contact always belongs to the authenticated user who created it;
``user_id`` is therefore read only and never accepted from clients.
``profile_image`` is the public URL of the stored image, if any.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .common import RequestModel, check_email

Gender = Literal["male", "female"]


class ContactCreate(RequestModel):
    first_name: str = Field(..., max_length=100, examples=["Test"])
    last_name: Optional[str] = Field(None, max_length=100, examples=["User"])
    email: Optional[str] = Field(None, max_length=200, examples=["test_user@mail.com"])
    phone: Optional[str] = Field(None, max_length=20, examples=["1234567890"])
    gender: Optional[Gender] = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return check_email(v)


class ContactUpdate(RequestModel):
    """All fields optional; omitted fields keep their stored value."""

    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)
    gender: Optional[Gender] = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return check_email(v)


class ContactRead(BaseModel):
    id: int
    first_name: str
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    profile_image: Optional[str] = None
    user_id: int
