"""Pydantic models for user categories (roles such as member or librarian)."""

from typing import Optional

from pydantic import BaseModel, Field

from .common import RequestModel


class UserCategoryCreate(RequestModel):
    name: str = Field(..., max_length=100, examples=["Pustakawan"])
    description: Optional[str] = Field(None, max_length=255, examples=["Manages the collection"])


class UserCategoryUpdate(RequestModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=255)


class UserCategoryRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
