"""
Business logic for the author catalog.

Authors are global: any authenticated user may manage any author.
``social_media`` and ``categories`` are stored as JSON text and decoded
again on the way out.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from library_api.app.core import db
from library_api.app.core.pagination import listing, paginated
from library_api.app.core.query import Filter, FilterSpec, RangeFilter, build_predicate
from library_api.app.core.storage import get_blob_store
from library_api.app.schemas.author import AuthorCreate, AuthorRead, AuthorUpdate
from library_api.app.services.images import remove_image, replace_image
from library_api.app.services.ownership import resolve

TABLE = "authors"
IMAGE_DIR = "author_images"
JSON_COLUMNS = ("social_media", "categories")

SEARCH = FilterSpec(
    filters=(
        Filter("name", ("name",)),
        Filter("address", ("address",)),
        Filter("phone", ("phone",)),
        Filter("email", ("email",)),
        Filter("nationality", ("nationality",)),
    ),
    ranges=(RangeFilter("birth_date_start", "birth_date_end", "birth_date"),),
)


def _loads(value: Optional[str]) -> Any:
    if value is None:
        return None
    return json.loads(value)


def _to_columns(values: Dict[str, Any]) -> Dict[str, Any]:
    columns = dict(values)
    for name in JSON_COLUMNS:
        if columns.get(name) is not None:
            columns[name] = json.dumps(columns[name])
    if columns.get("birth_date") is not None:
        columns["birth_date"] = columns["birth_date"].isoformat()
    return columns


class AuthorService:
    @staticmethod
    def to_read(row: Dict[str, Any]) -> AuthorRead:
        return AuthorRead(
            id=row["id"],
            name=row["name"],
            address=row["address"],
            phone=row["phone"],
            email=row["email"],
            website=row["website"],
            bio=row["bio"],
            profile_image=get_blob_store().url_for(row["profile_image"]),
            social_media=_loads(row["social_media"]),
            nationality=row["nationality"],
            birth_date=row["birth_date"],
            categories=_loads(row["categories"]),
        )

    @classmethod
    def create(cls, data: AuthorCreate) -> AuthorRead:
        row = db.insert(TABLE, _to_columns(data.model_dump()))
        logging.getLogger(__name__).info("Created author %s (%s)", row["id"], row["name"])
        return cls.to_read(row)

    @classmethod
    def list(cls) -> Dict[str, List[AuthorRead]]:
        return listing(cls.to_read(r) for r in db.find_by_predicate(TABLE))

    @classmethod
    def search(cls, params: Dict[str, Any], page: int, size: int) -> Dict[str, Any]:
        """Search authors.

        The birth date range only applies when both ``birth_date_start``
        and ``birth_date_end`` are given; a lone bound is ignored.
        """
        predicate = build_predicate(SEARCH, params)
        return paginated(TABLE, predicate, page, size, lambda rows: [cls.to_read(r) for r in rows])

    @classmethod
    def get(cls, author_id: int) -> AuthorRead:
        return cls.to_read(resolve(TABLE, author_id))

    @classmethod
    def update(cls, author_id: int, data: AuthorUpdate) -> AuthorRead:
        row = resolve(TABLE, author_id)
        changes = _to_columns(data.changes())
        updated = db.update(TABLE, row["id"], changes)
        logging.getLogger(__name__).info("Author %s updated fields %s", author_id, sorted(changes))
        return cls.to_read(updated)

    @classmethod
    def set_profile_image(cls, author_id: int, data: bytes, content_type: str) -> AuthorRead:
        row = resolve(TABLE, author_id)
        return cls.to_read(replace_image(TABLE, row, data, content_type, IMAGE_DIR))

    @classmethod
    def delete(cls, author_id: int) -> bool:
        row = resolve(TABLE, author_id)
        db.delete(TABLE, row["id"])
        remove_image(row)
        logging.getLogger(__name__).info("Deleted author %s", author_id)
        return True
