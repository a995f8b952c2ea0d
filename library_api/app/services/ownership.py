"""
Ownership-scoped record resolution.

``resolve_owned`` looks a row up by id *and* owner in one query, so a
row owned by somebody else is indistinguishable from a row that does
not exist: both raise the same ``NotFound`` with the same message.
Callers must never fetch by id first and compare the owner afterwards.

Two-level ownership (address → contact → user) is expressed by
chaining: resolve the contact under the user, then the address under
the resolved contact id.
"""

from typing import Any, Dict

from library_api.app.core import db
from library_api.app.core.errors import NotFound
from library_api.app.core.query import Predicate, all_of


def resolve_owned(table: str, record_id: int, owner_column: str, owner_value: Any) -> Dict[str, Any]:
    row = db.find_one(
        table,
        all_of(Predicate.equals("id", record_id), Predicate.equals(owner_column, owner_value)),
    )
    if row is None:
        raise NotFound()
    return row


def resolve(table: str, record_id: int) -> Dict[str, Any]:
    """Resolve a global (not ownership-scoped) record by id."""
    row = db.find_by_id(table, record_id)
    if row is None:
        raise NotFound()
    return row
