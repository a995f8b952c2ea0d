"""
Security helpers for password hashing and JWT authentication.

This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC‑SHA256 signatures and base64url encoding.  Tokens embed
arbitrary claims, an issue time (``iat``) and an expiration timestamp
(``exp``).  The secret key from the application settings is used to
sign and verify the token.  Password hashing uses PBKDF2‑HMAC with
SHA‑256 and a random per‑password salt; both hash and signature
comparisons are constant time.

``get_current_user`` is the FastAPI dependency that turns the bearer
credential of a request into an ``Identity``.  It runs before any
endpoint logic, so an unauthenticated request never reaches a
service.
"""

import base64
import hashlib
import hmac
import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .errors import ServiceError, TokenExpired, TokenInvalid, Unauthenticated

PBKDF2_ITERATIONS = 100_000

logger = logging.getLogger(__name__)


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    """Compute HMAC‑SHA256 signature of a message using the given secret."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def encode_token(claims: Dict[str, Any], expires_in: int) -> str:
    """Create a signed JWT carrying ``claims``.

    The payload is extended with ``iat`` and ``exp`` (UNIX timestamps).
    The token is ``header.payload.signature`` with each part base64url
    encoded.

    Parameters
    ----------
    claims : dict
        Claims to embed in the token (e.g. ``{"sub": "1", "type": "access"}``).
    expires_in : int
        Lifetime of the token in seconds.

    Returns
    -------
    str
        A signed JWT token.

    Raises
    ------
    ValueError
        If no secret key is configured or the algorithm is unsupported.
    """
    if not settings.secret_key:
        raise ValueError("SECRET_KEY is not configured")
    if settings.algorithm != "HS256":
        raise ValueError(f"Unsupported signing algorithm {settings.algorithm}")
    now = int(time.time())
    to_encode = dict(claims)
    to_encode["iat"] = now
    to_encode["exp"] = now + expires_in
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, settings.secret_key))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_token(token: str, verify_exp: bool = True) -> Dict[str, Any]:
    """Verify the signature of a JWT and return its payload.

    Raises ``TokenInvalid`` for malformed tokens or bad signatures and
    ``TokenExpired`` when ``exp`` has passed (unless ``verify_exp`` is
    false, which the denylist uses to revoke already expired tokens).
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise TokenInvalid()
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    expected_sig = _sign(signing_input, settings.secret_key)
    try:
        actual_sig = _b64_url_decode(signature_b64)
        header = json.loads(_b64_url_decode(header_b64).decode("utf-8"))
        payload = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        raise TokenInvalid()
    if not hmac.compare_digest(expected_sig, actual_sig):
        raise TokenInvalid()
    if not isinstance(header, dict) or header.get("alg") != "HS256":
        raise TokenInvalid()
    if not isinstance(payload, dict) or not isinstance(payload.get("exp"), int):
        raise TokenInvalid()
    if verify_exp and payload["exp"] <= int(time.time()):
        raise TokenExpired()
    return payload


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2‑HMAC with SHA‑256.

    A 16‑byte random salt is generated for each password.  The result
    is ``"<salt hex>$<hash hex>"``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check ``plain_password`` against a stored ``salt$hash`` string."""
    if not hashed_password or "$" not in hashed_password:
        return False
    salt_hex, hash_hex = hashed_password.split("$", 1)
    try:
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, resolved once per request."""

    user_id: int
    username: str
    token: str
    jti: str
    expires_at: int


security = HTTPBearer(auto_error=False)


def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> Identity:
    """Dependency that resolves the bearer access token of a request.

    Missing, malformed, expired, revoked and non‑access tokens all
    collapse into ``Unauthenticated``; so does a token whose user no
    longer exists.
    """
    if credentials is None:
        raise Unauthenticated()
    from library_api.app.services.token_service import TokenService
    from library_api.app.core import db

    token = credentials.credentials
    try:
        claims = TokenService.verify(token)
    except ServiceError as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise Unauthenticated()
    if claims.get("type") != TokenService.ACCESS:
        logger.debug("Rejected %s token used as access token", claims.get("type"))
        raise Unauthenticated()
    user = db.find_by_id("users", int(claims["sub"]))
    if user is None:
        raise Unauthenticated()
    return Identity(
        user_id=user["id"],
        username=user["username"],
        token=token,
        jti=claims["jti"],
        expires_at=claims["exp"],
    )


def get_bearer_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> Optional[str]:
    """Dependency returning the raw bearer token, or ``None`` if absent."""
    return credentials.credentials if credentials is not None else None
