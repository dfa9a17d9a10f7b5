"""
Credential handling: bcrypt password hashes and signed session tokens.

Passwords are hashed with bcrypt. Tokens are HS256 JWTs (python-jose)
whose ``sub`` claim is the user's primary key; the signing secret, the
algorithm and the lifetime are read from the settings on every call so a
test can swap them with ``get_settings.cache_clear()``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from budgetflow.config import get_settings

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes; newer releases refuse longer input.
BCRYPT_MAX_BYTES = 72
RESERVED_CLAIMS = ("exp", "iat")


class TokenError(ValueError):
    """A session token that is malformed, tampered with, expired or missing ``sub``."""


def _secret_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Return the bcrypt hash to store for *password*."""
    digest = bcrypt.hashpw(_secret_bytes(password), bcrypt.gensalt())
    return digest.decode("ascii")


def verify_password(plain: str, hashed: str) -> bool:
    """Check *plain* against a stored hash. A corrupt hash never matches."""
    try:
        return bcrypt.checkpw(_secret_bytes(plain), hashed.encode("ascii"))
    except (ValueError, UnicodeEncodeError):
        logger.warning("Stored password hash is not a bcrypt hash")
        return False


def create_access_token(data: Mapping[str, Any], expires_in: timedelta | None = None) -> str:
    """Sign *data* as a session token.

    Args:
        data: Claims to carry, at least ``sub``. ``exp`` and ``iat`` are
              stamped here and must not be passed in.
        expires_in: Token lifetime; ``JWT_EXPIRATION_MINUTES`` when omitted.

    Returns:
        The encoded token.

    Raises:
        ValueError: If *data* already holds ``exp`` or ``iat``.
    """
    clash = [name for name in RESERVED_CLAIMS if name in data]
    if clash:
        raise ValueError(f"Claims {clash} are set by create_access_token")

    settings = get_settings()
    issued = datetime.now(timezone.utc)
    lifetime = expires_in if expires_in is not None else timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)
    claims = {**data, "iat": issued, "exp": issued + lifetime}
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> dict[str, Any]:
    """Return the claims of a token built by ``create_access_token``.

    Raises:
        TokenError: On a bad signature, an expired token or a missing
                    ``sub`` claim. It is a ``ValueError``, which the auth
                    dependency turns into a 401.
    """
    settings = get_settings()
    try:
        claims: dict[str, Any] = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError as exc:
        logger.info("Rejected expired session token")
        raise TokenError("Session token has expired") from exc
    except JWTError as exc:
        logger.debug("Rejected session token: %s", exc)
        raise TokenError("Session token is invalid") from exc

    if not claims.get("sub"):
        raise TokenError("Session token has no subject")
    return claims
