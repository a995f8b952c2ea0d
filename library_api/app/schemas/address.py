"""Pydantic models for contact addresses."""

from typing import Optional

from pydantic import BaseModel, Field

from .common import RequestModel


class AddressCreate(RequestModel):
    street: Optional[str] = Field(None, max_length=200, examples=["Jl. Merdeka 1"])
    city: Optional[str] = Field(None, max_length=100, examples=["Makassar"])
    province: Optional[str] = Field(None, max_length=100)
    country: str = Field(..., max_length=100, examples=["Indonesia"])
    postal_code: Optional[str] = Field(None, max_length=10)


class AddressUpdate(RequestModel):
    street: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=100)
    province: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=10)


class AddressRead(BaseModel):
    id: int
    street: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    country: str
    postal_code: Optional[str] = None
    contact_id: int
