"""
Shared pieces for request and response schemas.

``RequestModel`` is the base for every request body: blank strings are
dropped before validation so that ``""`` is reported exactly like a
missing field, and unknown keys are ignored.  The helpers below
validate the string formats used across resources and raise
``ValueError`` with client-facing wording; the validation exception
handler in ``main`` forwards those messages unchanged.

``DataResponse`` and ``PageResponse`` are the response envelopes:
``{"data": ...}`` for single records and unpaged lists, and
``{"data": [...], "meta": {...}}`` for search pages.
"""

import re
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, model_validator

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+\-]+@[A-Za-z0-9\-]+(\.[A-Za-z0-9\-]+)*$")
URL_RE = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)


T = TypeVar("T")


def label(field: str) -> str:
    return field.replace("_", " ")


class RequestModel(BaseModel):
    """Base for request payloads."""

    model_config = {"extra": "ignore"}

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_strings(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if not (isinstance(v, str) and v.strip() == "")}
        return data

    def changes(self) -> Dict[str, Any]:
        """Fields the client actually supplied with a non-null value."""
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


def check_email(value: Optional[str], field: str = "email") -> Optional[str]:
    if value is not None and not EMAIL_RE.match(value):
        raise ValueError(f"The {label(field)} field must be a valid email address.")
    return value


def check_url(value: Optional[str], field: str = "website") -> Optional[str]:
    if value is not None and not URL_RE.match(value):
        raise ValueError(f"The {label(field)} field must be a valid URL.")
    return value


def check_datetime(value: Optional[str], field: str) -> Optional[str]:
    """Accept ``YYYY-MM-DD HH:MM:SS`` timestamps only."""
    if value is None:
        return None
    try:
        datetime.strptime(value, DATETIME_FORMAT)
    except (TypeError, ValueError):
        raise ValueError(f"The {label(field)} field must match the format Y-m-d H:i:s.")
    return value


class DataResponse(BaseModel, Generic[T]):
    data: T


class PageMeta(BaseModel):
    """Position of a search page within the full result set."""

    model_config = {"populate_by_name": True}

    total: int
    current_page: int
    per_page: int
    last_page: int
    from_: Optional[int] = Field(None, alias="from")
    to: Optional[int] = None


class PageResponse(BaseModel, Generic[T]):
    data: List[T]
    meta: PageMeta
