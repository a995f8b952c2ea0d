"""
Business logic for contact addresses.

Addresses are reached through their contact only.  Every operation
first resolves the contact under the caller, then the address under
that contact, so an address of a foreign contact is reported as not
found just like a missing one.
"""

import logging
from typing import Any, Dict, List

from library_api.app.core import db
from library_api.app.core.pagination import listing, paginated
from library_api.app.core.query import Filter, FilterSpec, Predicate, build_predicate
from library_api.app.core.security import Identity
from library_api.app.schemas.address import AddressCreate, AddressRead, AddressUpdate
from library_api.app.services.contact_service import ContactService
from library_api.app.services.ownership import resolve_owned

TABLE = "addresses"
OWNER = "contact_id"

SEARCH = FilterSpec(
    filters=(
        Filter("street", ("street",)),
        Filter("city", ("city",)),
        Filter("province", ("province",)),
        Filter("country", ("country",)),
        Filter("postal_code", ("postal_code",)),
    )
)


class AddressService:
    @staticmethod
    def to_read(row: Dict[str, Any]) -> AddressRead:
        return AddressRead(
            id=row["id"],
            street=row["street"],
            city=row["city"],
            province=row["province"],
            country=row["country"],
            postal_code=row["postal_code"],
            contact_id=row["contact_id"],
        )

    @classmethod
    def _contact_id(cls, identity: Identity, contact_id: int) -> int:
        return ContactService.get_owned(identity, contact_id)["id"]

    @classmethod
    def _get_owned(cls, identity: Identity, contact_id: int, address_id: int) -> Dict[str, Any]:
        owner = cls._contact_id(identity, contact_id)
        return resolve_owned(TABLE, address_id, OWNER, owner)

    @classmethod
    def create(cls, identity: Identity, contact_id: int, data: AddressCreate) -> AddressRead:
        owner = cls._contact_id(identity, contact_id)
        values = data.model_dump()
        values[OWNER] = owner
        row = db.insert(TABLE, values)
        logging.getLogger(__name__).info("Created address %s for contact %s", row["id"], owner)
        return cls.to_read(row)

    @classmethod
    def list(cls, identity: Identity, contact_id: int) -> Dict[str, List[AddressRead]]:
        owner = cls._contact_id(identity, contact_id)
        rows = db.find_by_predicate(TABLE, Predicate.equals(OWNER, owner))
        return listing(cls.to_read(r) for r in rows)

    @classmethod
    def search(cls, identity: Identity, contact_id: int, params: Dict[str, Any], page: int, size: int) -> Dict[str, Any]:
        owner = cls._contact_id(identity, contact_id)
        predicate = build_predicate(SEARCH, params, base=Predicate.equals(OWNER, owner))
        return paginated(TABLE, predicate, page, size, lambda rows: [cls.to_read(r) for r in rows])

    @classmethod
    def get(cls, identity: Identity, contact_id: int, address_id: int) -> AddressRead:
        return cls.to_read(cls._get_owned(identity, contact_id, address_id))

    @classmethod
    def update(cls, identity: Identity, contact_id: int, address_id: int, data: AddressUpdate) -> AddressRead:
        row = cls._get_owned(identity, contact_id, address_id)
        changes = data.changes()
        updated = db.update(TABLE, row["id"], changes)
        logging.getLogger(__name__).info("Address %s updated fields %s", address_id, sorted(changes))
        return cls.to_read(updated)

    @classmethod
    def delete(cls, identity: Identity, contact_id: int, address_id: int) -> bool:
        row = cls._get_owned(identity, contact_id, address_id)
        db.delete(TABLE, row["id"])
        logging.getLogger(__name__).info("Deleted address %s of contact %s", address_id, row["contact_id"])
        return True
