"""
Pydantic models for user accounts and authentication payloads.

Passwords are accepted on registration, login and update but never
returned.  Login additionally returns the access and refresh tokens.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from .address import AddressRead
from .common import RequestModel, check_email


class UserRegister(RequestModel):
    """Schema for registering a user.

    ``password_confirmation`` must repeat ``password``.
    """

    name: str = Field(..., max_length=100, examples=["Test User"])
    email: str = Field(..., max_length=100, examples=["test@mail.com"])
    username: str = Field(..., max_length=100, examples=["test"])
    password: str = Field(..., min_length=5, max_length=100, examples=["secret123"])
    password_confirmation: Optional[str] = Field(None, validate_default=True)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return check_email(v)

    @field_validator("password_confirmation")
    @classmethod
    def _confirmed(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        password = info.data.get("password")
        if password is not None and v != password:
            raise ValueError("The password field confirmation does not match.")
        return v


class UserLogin(RequestModel):
    username: str = Field(..., max_length=100)
    password: str = Field(..., max_length=100)


class UserUpdate(RequestModel):
    """Schema for updating the current user.

    All fields are optional; only provided values are changed.
    """

    name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=100)
    username: Optional[str] = Field(None, max_length=100)
    password: Optional[str] = Field(None, min_length=5, max_length=100)

    @field_validator("email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return check_email(v)


class LogoutRequest(RequestModel):
    refresh_token: Optional[str] = None


class UserSummary(BaseModel):
    id: int
    name: str
    username: str
    email: str


class UserRead(UserSummary):
    """Schema for reading a user from the API."""

    user_category_id: Optional[int] = None


class UserWithTokens(UserRead):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class ContactWithAddresses(BaseModel):
    id: int
    first_name: str
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    addresses: List[AddressRead] = []


class UserRelationships(BaseModel):
    contacts: List[ContactWithAddresses] = []


class UserProfile(UserRead):
    """The current user together with their contacts and addresses."""

    relationships: UserRelationships


class TokenRefresh(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
