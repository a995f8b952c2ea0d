"""
Business logic for the loan ledger.

Loans are global records linking two users, a member and a librarian.
Both references are checked against the users table on create, update
and search; a missing user is a validation failure on the field, not a
``NotFound``.  Responses embed both users under ``relationships``; for
a page of loans the users are loaded with one query.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from library_api.app.core import db
from library_api.app.core.errors import ValidationFailed
from library_api.app.core.pagination import listing, paginated
from library_api.app.core.query import Filter, FilterSpec, RangeFilter, build_predicate, is_supplied
from library_api.app.schemas.common import DATETIME_FORMAT, label
from library_api.app.schemas.loan import LoanCreate, LoanRead, LoanRelationships, LoanUpdate
from library_api.app.schemas.user import UserSummary
from library_api.app.services.ownership import resolve

TABLE = "loans"
USER_COLUMNS = ("member_id", "librarian_id")

SEARCH = FilterSpec(
    filters=(
        Filter("member_id", ("member_id",), match="equals"),
        Filter("librarian_id", ("librarian_id",), match="equals"),
    ),
    ranges=(
        RangeFilter("loan_date_start", "loan_date_end", "loan_date"),
        RangeFilter("return_date_start", "return_date_end", "return_date"),
    ),
)


def _parse(value: str) -> Optional[datetime]:
    try:
        return datetime.strptime(value, DATETIME_FORMAT)
    except (TypeError, ValueError):
        return None


def _summary(row: Optional[Dict[str, Any]]) -> Optional[UserSummary]:
    if row is None:
        return None
    return UserSummary(id=row["id"], name=row["name"], username=row["username"], email=row["email"])


class LoanService:
    @classmethod
    def to_read_many(cls, rows: Iterable[Dict[str, Any]]) -> List[LoanRead]:
        rows = list(rows)
        ids = [r[c] for r in rows for c in USER_COLUMNS]
        users = db.find_by_ids("users", ids)
        return [
            LoanRead(
                id=r["id"],
                member_id=r["member_id"],
                librarian_id=r["librarian_id"],
                loan_date=r["loan_date"],
                return_date=r["return_date"],
                relationships=LoanRelationships(
                    member=_summary(users.get(r["member_id"])),
                    librarian=_summary(users.get(r["librarian_id"])),
                ),
            )
            for r in rows
        ]

    @classmethod
    def to_read(cls, row: Dict[str, Any]) -> LoanRead:
        return cls.to_read_many([row])[0]

    @classmethod
    def _check_users(cls, values: Dict[str, Any]) -> None:
        """Raise ``ValidationFailed`` for user references that do not exist."""
        refs = {c: values[c] for c in USER_COLUMNS if values.get(c) is not None}
        if not refs:
            return
        found = db.find_by_ids("users", list(refs.values()))
        errors = {
            column: [f"The selected {label(column)} is invalid."]
            for column, user_id in refs.items()
            if user_id not in found
        }
        if errors:
            raise ValidationFailed(errors)

    @classmethod
    def validate_search(cls, params: Dict[str, Any]) -> None:
        """Reject malformed loan search parameters.

        Each ``*_end`` bound is required once its ``*_start`` is given,
        both bounds must be ``YYYY-MM-DD HH:MM:SS`` timestamps and the
        start may not be after the end.
        """
        errors: Dict[str, List[str]] = {}
        for rng in SEARCH.ranges:
            start, end = params.get(rng.start_param), params.get(rng.end_param)
            parsed = {}
            for param, value in ((rng.start_param, start), (rng.end_param, end)):
                if not is_supplied(value):
                    continue
                parsed[param] = _parse(value)
                if parsed[param] is None:
                    errors.setdefault(param, []).append(
                        f"The {label(param)} field must match the format Y-m-d H:i:s."
                    )
            if is_supplied(start) and not is_supplied(end):
                errors.setdefault(rng.end_param, []).append(
                    f"The {label(rng.end_param)} field is required when {label(rng.start_param)} is present."
                )
            if parsed.get(rng.start_param) and parsed.get(rng.end_param):
                if parsed[rng.start_param] > parsed[rng.end_param]:
                    errors.setdefault(rng.start_param, []).append(
                        f"The {label(rng.start_param)} field must be a date before or equal to {label(rng.end_param)}."
                    )
        if errors:
            raise ValidationFailed(errors)
        cls._check_users(params)

    @classmethod
    def create(cls, data: LoanCreate) -> LoanRead:
        values = data.model_dump()
        cls._check_users(values)
        row = db.insert(TABLE, values)
        logging.getLogger(__name__).info(
            "Created loan %s (member=%s, librarian=%s)", row["id"], row["member_id"], row["librarian_id"]
        )
        return cls.to_read(row)

    @classmethod
    def list(cls) -> Dict[str, List[LoanRead]]:
        return listing(cls.to_read_many(db.find_by_predicate(TABLE)))

    @classmethod
    def search(cls, params: Dict[str, Any], page: int, size: int) -> Dict[str, Any]:
        cls.validate_search(params)
        predicate = build_predicate(SEARCH, params)
        return paginated(TABLE, predicate, page, size, cls.to_read_many)

    @classmethod
    def get(cls, loan_id: int) -> LoanRead:
        return cls.to_read(resolve(TABLE, loan_id))

    @classmethod
    def update(cls, loan_id: int, data: LoanUpdate) -> LoanRead:
        row = resolve(TABLE, loan_id)
        changes = data.changes()
        cls._check_users(changes)
        updated = db.update(TABLE, row["id"], changes)
        logging.getLogger(__name__).info("Loan %s updated fields %s", loan_id, sorted(changes))
        return cls.to_read(updated)

    @classmethod
    def delete(cls, loan_id: int) -> bool:
        row = resolve(TABLE, loan_id)
        db.delete(TABLE, row["id"])
        logging.getLogger(__name__).info("Deleted loan %s", loan_id)
        return True
