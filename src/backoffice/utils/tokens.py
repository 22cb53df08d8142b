"""Signed access tokens (HS256 JWT)."""

import datetime as dt
from typing import Any

from jose import JWTError, jwt

ALGORITHM = "HS256"


class InvalidTokenError(Exception):
    """Raised when a token is malformed, tampered with or expired."""


def create_access_token(
    subject: str,
    secret: str,
    expires_in: dt.timedelta,
    now: dt.datetime | None = None,
    **claims: Any,
) -> tuple[str, dt.datetime]:
    """Create a signed token for ``subject``.

    Args:
        subject: User ID stored in the ``sub`` claim
        secret: Signing secret
        expires_in: Token lifetime
        now: Issue time, defaults to the current UTC time
        **claims: Extra claims such as ``role``

    Returns:
        Tuple of encoded token and its expiry time
    """
    issued_at = now or dt.datetime.now(dt.UTC)
    expires_at = issued_at + expires_in
    payload = {
        **claims,
        "sub": subject,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM), expires_at


def decode_access_token(token: str, secret: str) -> dict[str, Any]:
    """Verify a token and return its claims.

    Raises:
        InvalidTokenError: If the signature or expiry check fails
    """
    try:
        claims: dict[str, Any] = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e
    if not claims.get("sub"):
        raise InvalidTokenError("Token has no subject")
    return claims
