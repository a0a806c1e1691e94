"""
Password hashing and session tokens.

Passwords are hashed with passlib. Session tokens are HS256 JWTs carrying the
user id in ``sub``; they are handed out at login both in the response body and
as the ``session`` cookie.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from flyergen.server.core.config import AuthConfig, settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class InvalidTokenError(Exception):
    """The session token is malformed, expired or badly signed."""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
    config: Optional[AuthConfig] = None,
) -> str:
    """Sign a session token for ``subject`` (a user id)."""
    config = config or settings.auth
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.token_expire_minutes))
    payload: Dict[str, Any] = {"sub": subject, "exp": expire}
    return jwt.encode(payload, config.secret, algorithm=config.algorithm)


def decode_access_token(token: str, config: Optional[AuthConfig] = None) -> str:
    """Return the user id carried by ``token``.

    Raises:
        InvalidTokenError: If the token cannot be verified or has no subject.
    """
    config = config or settings.auth
    try:
        payload = jwt.decode(token, config.secret, algorithms=[config.algorithm])
    except jwt.PyJWTError as e:
        raise InvalidTokenError(str(e)) from e
    subject = payload.get("sub")
    if not subject:
        raise InvalidTokenError("Token has no subject")
    return subject
