"""
Business logic for user accounts.

``UserService`` is the credential store of the API: it registers users
with hashed passwords, checks login credentials, issues the token pair
on login and applies partial profile updates.  Token verification and
revocation live in ``TokenService``.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from library_api.app.core import db
from library_api.app.core.errors import (
    DuplicateUsername,
    InvalidCredentials,
    NotFound,
    ValidationFailed,
)
from library_api.app.core.query import Predicate, all_of
from library_api.app.core.security import Identity, hash_password, verify_password
from library_api.app.schemas.address import AddressRead
from library_api.app.schemas.user import (
    ContactWithAddresses,
    UserLogin,
    UserProfile,
    UserRead,
    UserRegister,
    UserRelationships,
    UserUpdate,
    UserWithTokens,
)
from library_api.app.services.token_service import TokenService

TABLE = "users"


class UserService:
    """Registration, login and self-service profile updates."""

    @staticmethod
    def to_read(row: Dict[str, Any]) -> UserRead:
        return UserRead(
            id=row["id"],
            name=row["name"],
            username=row["username"],
            email=row["email"],
            user_category_id=row["user_category_id"],
        )

    @classmethod
    def _taken(cls, column: str, value: str, exclude_id: Optional[int] = None) -> bool:
        predicate = Predicate.equals(column, value)
        if exclude_id is not None:
            predicate = all_of(predicate, Predicate("id != ?", (exclude_id,)))
        return db.count_by_predicate(TABLE, predicate) > 0

    @classmethod
    def register(cls, data: UserRegister) -> UserRead:
        """Create a user with a hashed password.

        The username check runs before the insert and raises
        ``DuplicateUsername``; a duplicate email is a plain validation
        failure on the ``email`` field.
        """
        logger = logging.getLogger(__name__)
        if cls._taken("username", data.username):
            raise DuplicateUsername()
        if cls._taken("email", data.email):
            raise ValidationFailed.field("email", "The email has already been taken.")
        try:
            row = db.insert(
                TABLE,
                {
                    "name": data.name,
                    "email": data.email,
                    "username": data.username,
                    "password": hash_password(data.password),
                },
            )
        except sqlite3.IntegrityError as exc:
            # Lost a race against a concurrent registration.
            logger.warning("Registration of %s hit a uniqueness constraint: %s", data.username, exc)
            raise DuplicateUsername() from exc
        logger.info("Registered user %s (id=%s)", row["username"], row["id"])
        return cls.to_read(row)

    @classmethod
    def verify_password(cls, username: str, password: str) -> Dict[str, Any]:
        """Return the user row if the credentials match.

        Unknown usernames and wrong passwords raise the same
        ``InvalidCredentials`` error.
        """
        row = db.find_one(TABLE, Predicate.equals("username", username))
        if row is None or not verify_password(password, row["password"]):
            logging.getLogger(__name__).info("Failed login for %s", username)
            raise InvalidCredentials()
        return row

    @classmethod
    def login(cls, data: UserLogin) -> UserWithTokens:
        row = cls.verify_password(data.username, data.password)
        access_token = TokenService.issue_access_token(row["id"], row["username"])
        refresh_token = TokenService.issue_refresh_token(row["id"], row["username"])
        logging.getLogger(__name__).info("User %s logged in", row["username"])
        return UserWithTokens(
            **cls.to_read(row).model_dump(),
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=TokenService.access_ttl(),
        )

    @classmethod
    def get_profile(cls, identity: Identity) -> UserProfile:
        """Return the caller with their contacts and each contact's addresses."""
        row = db.find_by_id(TABLE, identity.user_id)
        if row is None:
            raise NotFound()
        contacts = db.find_by_predicate("contacts", Predicate.equals("user_id", row["id"]))
        addresses_by_contact: Dict[int, List[AddressRead]] = {c["id"]: [] for c in contacts}
        if contacts:
            ids = tuple(addresses_by_contact)
            for address in db.find_by_predicate("addresses", Predicate.one_of("contact_id", ids)):
                addresses_by_contact[address["contact_id"]].append(AddressRead(**address))
        relationships = UserRelationships(
            contacts=[
                ContactWithAddresses(
                    id=c["id"],
                    first_name=c["first_name"],
                    last_name=c["last_name"],
                    email=c["email"],
                    phone=c["phone"],
                    addresses=addresses_by_contact[c["id"]],
                )
                for c in contacts
            ]
        )
        return UserProfile(**cls.to_read(row).model_dump(), relationships=relationships)

    @classmethod
    def update_fields(cls, identity: Identity, data: UserUpdate) -> UserRead:
        """Apply the supplied subset of name, email, username and password.

        Absent fields are left untouched.  A new password is hashed
        before it is stored.
        """
        logger = logging.getLogger(__name__)
        changes = data.changes()
        if "username" in changes and cls._taken("username", changes["username"], identity.user_id):
            raise DuplicateUsername()
        if "email" in changes and cls._taken("email", changes["email"], identity.user_id):
            raise ValidationFailed.field("email", "The email has already been taken.")
        if "password" in changes:
            changes["password"] = hash_password(changes["password"])
        row = db.update(TABLE, identity.user_id, changes)
        if row is None:
            raise NotFound()
        logger.info("User %s updated fields %s", identity.user_id, sorted(changes))
        return cls.to_read(row)
