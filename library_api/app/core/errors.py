"""
Error taxonomy shared by services and the HTTP layer.

Services raise a subclass of ``ServiceError``; each carries an
``ErrorKind`` and a mapping of field (or ``"message"``) to a list of
human readable messages.  The exception handlers registered in
``main.create_app`` turn the kind into a status code and the messages
into the ``{"errors": {...}}`` envelope, so no service ever builds an
HTTP response itself.
"""

from enum import Enum
from typing import Dict, List, Optional

NOT_FOUND_MESSAGE = "not found."
UNAUTHENTICATED_MESSAGE = "Unauthenticated."


class ErrorKind(str, Enum):
    VALIDATION_FAILED = "validation_failed"
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not_found"
    DUPLICATE_USERNAME = "duplicate_username"
    TOO_MANY_CONTACTS = "too_many_contacts"
    TOKEN_ISSUANCE_FAILED = "token_issuance_failed"
    INVALID_CREDENTIALS = "invalid_credentials"
    TOKEN_NOT_PROVIDED = "token_not_provided"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_INVALID = "token_invalid"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.DUPLICATE_USERNAME: 400,
    ErrorKind.TOO_MANY_CONTACTS: 400,
    ErrorKind.TOKEN_NOT_PROVIDED: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.TOKEN_EXPIRED: 401,
    ErrorKind.TOKEN_INVALID: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.TOKEN_ISSUANCE_FAILED: 500,
}


class ServiceError(Exception):
    """Base class for every expected failure raised by the core."""

    kind: ErrorKind = ErrorKind.VALIDATION_FAILED
    default_message: str = "Invalid request."

    def __init__(self, errors: Optional[Dict[str, List[str]]] = None, message: Optional[str] = None) -> None:
        if errors is None:
            errors = {"message": [message or self.default_message]}
        self.errors = errors
        super().__init__(self._summary())

    def _summary(self) -> str:
        parts = [f"{field}: {'; '.join(msgs)}" for field, msgs in self.errors.items()]
        return f"{self.kind.value} ({', '.join(parts)})"

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationFailed(ServiceError):
    kind = ErrorKind.VALIDATION_FAILED

    @classmethod
    def field(cls, name: str, message: str) -> "ValidationFailed":
        return cls({name: [message]})


class Unauthenticated(ServiceError):
    kind = ErrorKind.UNAUTHENTICATED
    default_message = UNAUTHENTICATED_MESSAGE


class NotFound(ServiceError):
    kind = ErrorKind.NOT_FOUND
    default_message = NOT_FOUND_MESSAGE


class DuplicateUsername(ServiceError):
    kind = ErrorKind.DUPLICATE_USERNAME

    def __init__(self) -> None:
        super().__init__({"username": ["The username has already been taken."]})


class TooManyContacts(ServiceError):
    kind = ErrorKind.TOO_MANY_CONTACTS

    def __init__(self, limit: int) -> None:
        noun = "contact" if limit == 1 else "contacts"
        super().__init__({"contact": [f"A user may have at most {limit} {noun}."]})


class TokenIssuanceFailed(ServiceError):
    kind = ErrorKind.TOKEN_ISSUANCE_FAILED
    default_message = "Could not create token."


class InvalidCredentials(ServiceError):
    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "Username or password is incorrect."


class TokenNotProvided(ServiceError):
    kind = ErrorKind.TOKEN_NOT_PROVIDED
    default_message = "Token not provided."


class TokenExpired(ServiceError):
    kind = ErrorKind.TOKEN_EXPIRED
    default_message = "Token has expired and cannot be refreshed."


class TokenInvalid(ServiceError):
    kind = ErrorKind.TOKEN_INVALID
    default_message = "Failed to refresh token. Please login again."
