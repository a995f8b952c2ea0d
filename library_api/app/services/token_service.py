"""
Bearer token lifecycle: issue, verify, refresh and revoke.

Tokens are stateless signed claims (see ``core.security``); the only
server-side state is the ``revoked_tokens`` denylist keyed by the
token's ``jti`` claim.  ``verify`` consults the denylist on every call.
Revocation is a single ``INSERT OR IGNORE`` on the primary key, which
SQLite serialises, so concurrent logout and verify calls from
different worker threads never lose an update.

Lifecycle of a token: issued → active → expired or revoked.  Nothing
leaves the expired or revoked states.
"""

import logging
import secrets
import time
from typing import Any, Dict, Optional

from library_api.app.core.config import settings
from library_api.app.core.db import get_cursor
from library_api.app.core.errors import (
    TokenExpired,
    TokenInvalid,
    TokenIssuanceFailed,
    TokenNotProvided,
)
from library_api.app.core.security import decode_token, encode_token

logger = logging.getLogger(__name__)


class TokenService:
    """Issue and validate access/refresh tokens."""

    ACCESS = "access"
    REFRESH = "refresh"

    @classmethod
    def access_ttl(cls) -> int:
        return settings.access_token_expire_minutes * 60

    @classmethod
    def refresh_ttl(cls) -> int:
        return settings.refresh_token_expire_minutes * 60

    @classmethod
    def _issue(cls, user_id: int, username: str, token_type: str, ttl: int) -> str:
        claims = {
            "sub": str(user_id),
            "username": username,
            "type": token_type,
            "jti": secrets.token_hex(16),
        }
        try:
            return encode_token(claims, ttl)
        except ValueError as exc:
            logger.error("Could not issue %s token for user %s: %s", token_type, user_id, exc)
            raise TokenIssuanceFailed() from exc

    @classmethod
    def issue_access_token(cls, user_id: int, username: str) -> str:
        return cls._issue(user_id, username, cls.ACCESS, cls.access_ttl())

    @classmethod
    def issue_refresh_token(cls, user_id: int, username: str) -> str:
        return cls._issue(user_id, username, cls.REFRESH, cls.refresh_ttl())

    @classmethod
    def is_revoked(cls, jti: str) -> bool:
        with get_cursor() as cursor:
            row = cursor.execute("SELECT 1 FROM revoked_tokens WHERE jti = ?", (jti,)).fetchone()
        return row is not None

    @classmethod
    def verify(cls, token: str) -> Dict[str, Any]:
        """Return the claims of a live token.

        Raises ``TokenExpired`` once ``exp`` has passed and
        ``TokenInvalid`` for malformed, forged or revoked tokens.
        """
        claims = decode_token(token)
        if claims.get("type") not in (cls.ACCESS, cls.REFRESH):
            raise TokenInvalid()
        if not isinstance(claims.get("jti"), str) or not str(claims.get("sub", "")).isdigit():
            raise TokenInvalid()
        if cls.is_revoked(claims["jti"]):
            raise TokenInvalid()
        return claims

    @classmethod
    def refresh(cls, token: Optional[str]) -> Dict[str, Any]:
        """Mint a new access token from a refresh token.

        Only tokens typed ``refresh`` are honoured; presenting an access
        token here is treated as invalid.  The refresh token itself stays
        valid until it expires or is revoked.
        """
        if not token:
            raise TokenNotProvided()
        try:
            claims = cls.verify(token)
        except TokenExpired:
            logger.info("Refresh rejected: token expired")
            raise
        if claims["type"] != cls.REFRESH:
            logger.info("Refresh rejected: %s token presented", claims["type"])
            raise TokenInvalid()

        from library_api.app.core import db

        user = db.find_by_id("users", int(claims["sub"]))
        if user is None:
            raise TokenInvalid()
        access_token = cls.issue_access_token(user["id"], user["username"])
        logger.info("Issued refreshed access token for user %s", user["id"])
        return {
            "access_token": access_token,
            "token_type": "bearer",
            "expires_in": cls.access_ttl(),
        }

    @classmethod
    def invalidate(cls, token: str) -> bool:
        """Revoke ``token`` for all future ``verify`` calls.

        Idempotent: revoking an already revoked (or already expired)
        token succeeds again.  Returns ``False`` only when the token
        cannot be decoded at all, since then there is no ``jti`` to
        record.
        """
        try:
            claims = decode_token(token, verify_exp=False)
        except TokenInvalid:
            return False
        jti = claims.get("jti")
        if not isinstance(jti, str):
            return False
        now = int(time.time())
        with get_cursor() as cursor:
            cursor.execute(
                "INSERT OR IGNORE INTO revoked_tokens (jti, expires_at) VALUES (?, ?)",
                (jti, int(claims["exp"])),
            )
            cursor.execute("DELETE FROM revoked_tokens WHERE expires_at < ?", (now,))
        logger.info("Revoked %s token of user %s", claims.get("type"), claims.get("sub"))
        return True

    @classmethod
    def logout(cls, user_id: int, access_token: str, refresh_token: Optional[str] = None) -> bool:
        """Revoke the caller's access token and, if given, their refresh token.

        A refresh token issued to another user is left alone.
        """
        revoked = cls.invalidate(access_token)
        if refresh_token:
            try:
                claims = decode_token(refresh_token, verify_exp=False)
            except TokenInvalid:
                logger.info("Ignoring undecodable refresh token on logout of user %s", user_id)
                return revoked
            if claims.get("type") == cls.REFRESH and claims.get("sub") == str(user_id):
                cls.invalidate(refresh_token)
            else:
                logger.warning("User %s tried to revoke a refresh token that is not theirs", user_id)
        return revoked
