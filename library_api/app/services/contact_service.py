"""
Business logic for contacts.

Every contact belongs to exactly one user and is only visible to that
user.  All single-record operations go through ``resolve_owned``, so a
contact of another user behaves exactly like a missing one.  Searching
always ANDs the caller's ``user_id`` into the predicate.

Deleting a contact removes its addresses through the ``ON DELETE
CASCADE`` foreign key of the ``addresses`` table.
"""

import logging
from typing import Any, Dict, List

from library_api.app.core import db
from library_api.app.core.config import settings
from library_api.app.core.errors import TooManyContacts
from library_api.app.core.pagination import listing, paginated
from library_api.app.core.query import Filter, FilterSpec, Predicate, build_predicate
from library_api.app.core.security import Identity
from library_api.app.core.storage import get_blob_store
from library_api.app.schemas.contact import ContactCreate, ContactRead, ContactUpdate
from library_api.app.services.images import remove_image, replace_image
from library_api.app.services.ownership import resolve_owned

TABLE = "contacts"
OWNER = "user_id"
IMAGE_DIR = "contact_images"

SEARCH = FilterSpec(
    filters=(
        Filter("name", ("first_name", "last_name")),
        Filter("phone", ("phone",)),
        Filter("email", ("email",)),
    )
)


class ContactService:
    """Contact CRUD and search, scoped to the authenticated user."""

    @staticmethod
    def to_read(row: Dict[str, Any]) -> ContactRead:
        return ContactRead(
            id=row["id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            email=row["email"],
            phone=row["phone"],
            gender=row["gender"],
            profile_image=get_blob_store().url_for(row["profile_image"]),
            user_id=row["user_id"],
        )

    @classmethod
    def _owner(cls, identity: Identity) -> Predicate:
        return Predicate.equals(OWNER, identity.user_id)

    @classmethod
    def get_owned(cls, identity: Identity, contact_id: int) -> Dict[str, Any]:
        return resolve_owned(TABLE, contact_id, OWNER, identity.user_id)

    @classmethod
    def create(cls, identity: Identity, data: ContactCreate) -> ContactRead:
        """Create a contact for the caller.

        With ``settings.max_contacts_per_user`` above zero, a caller who
        already owns that many contacts gets ``TooManyContacts``.
        """
        logger = logging.getLogger(__name__)
        limit = settings.max_contacts_per_user
        if limit > 0 and db.count_by_predicate(TABLE, cls._owner(identity)) >= limit:
            logger.info("User %s hit the contact limit of %s", identity.user_id, limit)
            raise TooManyContacts(limit)
        values = data.model_dump()
        values[OWNER] = identity.user_id
        row = db.insert(TABLE, values)
        logger.info("User %s created contact %s", identity.user_id, row["id"])
        return cls.to_read(row)

    @classmethod
    def list(cls, identity: Identity) -> Dict[str, List[ContactRead]]:
        rows = db.find_by_predicate(TABLE, cls._owner(identity))
        return listing(cls.to_read(r) for r in rows)

    @classmethod
    def search(cls, identity: Identity, params: Dict[str, Any], page: int, size: int) -> Dict[str, Any]:
        predicate = build_predicate(SEARCH, params, base=cls._owner(identity))
        return paginated(TABLE, predicate, page, size, lambda rows: [cls.to_read(r) for r in rows])

    @classmethod
    def get(cls, identity: Identity, contact_id: int) -> ContactRead:
        return cls.to_read(cls.get_owned(identity, contact_id))

    @classmethod
    def update(cls, identity: Identity, contact_id: int, data: ContactUpdate) -> ContactRead:
        row = cls.get_owned(identity, contact_id)
        changes = data.changes()
        updated = db.update(TABLE, row["id"], changes)
        logging.getLogger(__name__).info("Contact %s updated fields %s", contact_id, sorted(changes))
        return cls.to_read(updated)

    @classmethod
    def set_profile_image(cls, identity: Identity, contact_id: int, data: bytes, content_type: str) -> ContactRead:
        row = cls.get_owned(identity, contact_id)
        return cls.to_read(replace_image(TABLE, row, data, content_type, IMAGE_DIR))

    @classmethod
    def delete(cls, identity: Identity, contact_id: int) -> bool:
        row = cls.get_owned(identity, contact_id)
        db.delete(TABLE, row["id"])
        remove_image(row)
        logging.getLogger(__name__).info("User %s deleted contact %s", identity.user_id, contact_id)
        return True
