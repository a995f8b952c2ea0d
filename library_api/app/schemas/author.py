"""
Pydantic models for authors.

``social_media`` is a JSON object mapping a network name to a profile
URL (e.g. ``{"twitter": "https://twitter.com/author"}``); clients may
send it either as an object or as a JSON encoded string.
``categories`` is an ordered list of tags such as ``["fiction",
"research"]``.  Both are stored as JSON text.
"""

import json
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .common import RequestModel, check_email, check_url


def _parse_social_media(v: Any) -> Any:
    if isinstance(v, str):
        try:
            v = json.loads(v)
        except json.JSONDecodeError:
            raise ValueError("The social media field must be a valid JSON string.")
        if not isinstance(v, dict):
            raise ValueError("The social media field must be a JSON object.")
    return v


class AuthorFields(RequestModel):
    address: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None
    social_media: Optional[Dict[str, Any]] = None
    nationality: Optional[str] = Field(None, max_length=100)
    birth_date: Optional[date] = None
    categories: Optional[List[str]] = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return check_email(v)

    @field_validator("website")
    @classmethod
    def _website(cls, v: Optional[str]) -> Optional[str]:
        return check_url(v)

    @field_validator("social_media", mode="before")
    @classmethod
    def _social_media(cls, v: Any) -> Any:
        return _parse_social_media(v)


class AuthorCreate(AuthorFields):
    name: str = Field(..., max_length=100, examples=["Test Author"])


class AuthorUpdate(AuthorFields):
    """All fields optional; omitted fields keep their stored value."""

    name: Optional[str] = Field(None, max_length=100)


class AuthorRead(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    social_media: Optional[Dict[str, Any]] = None
    nationality: Optional[str] = None
    birth_date: Optional[date] = None
    categories: Optional[List[str]] = None
