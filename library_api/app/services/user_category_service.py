"""Business logic for user categories (global, not ownership scoped)."""

import logging
from typing import Any, Dict, List

from library_api.app.core import db
from library_api.app.core.pagination import listing, paginated
from library_api.app.core.query import Filter, FilterSpec, build_predicate
from library_api.app.schemas.user_category import (
    UserCategoryCreate,
    UserCategoryRead,
    UserCategoryUpdate,
)
from library_api.app.services.ownership import resolve

TABLE = "user_categories"

SEARCH = FilterSpec(
    filters=(
        Filter("name", ("name",)),
        Filter("description", ("description",)),
    )
)


class UserCategoryService:
    @staticmethod
    def to_read(row: Dict[str, Any]) -> UserCategoryRead:
        return UserCategoryRead(id=row["id"], name=row["name"], description=row["description"])

    @classmethod
    def create(cls, data: UserCategoryCreate) -> UserCategoryRead:
        row = db.insert(TABLE, data.model_dump())
        logging.getLogger(__name__).info("Created user category %s (%s)", row["id"], row["name"])
        return cls.to_read(row)

    @classmethod
    def list(cls) -> Dict[str, List[UserCategoryRead]]:
        return listing(cls.to_read(r) for r in db.find_by_predicate(TABLE))

    @classmethod
    def search(cls, params: Dict[str, Any], page: int, size: int) -> Dict[str, Any]:
        predicate = build_predicate(SEARCH, params)
        return paginated(TABLE, predicate, page, size, lambda rows: [cls.to_read(r) for r in rows])

    @classmethod
    def get(cls, category_id: int) -> UserCategoryRead:
        return cls.to_read(resolve(TABLE, category_id))

    @classmethod
    def update(cls, category_id: int, data: UserCategoryUpdate) -> UserCategoryRead:
        row = resolve(TABLE, category_id)
        changes = data.changes()
        updated = db.update(TABLE, row["id"], changes)
        logging.getLogger(__name__).info("User category %s updated fields %s", category_id, sorted(changes))
        return cls.to_read(updated)

    @classmethod
    def delete(cls, category_id: int) -> bool:
        row = resolve(TABLE, category_id)
        # users.user_category_id is set to NULL by the foreign key.
        db.delete(TABLE, row["id"])
        logging.getLogger(__name__).info("Deleted user category %s", category_id)
        return True
