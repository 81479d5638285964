"""Password hashing and JWT token utilities.

Passwords are hashed with bcrypt.  Access tokens are HS256 JWTs signed
with the shared ``JWT_SECRET_KEY`` and carry the claims every protected
endpoint validates:

* ``sub``: user id
* ``role``: one of ``Admin`` / ``User`` / ``Employee``
* ``iss`` / ``aud``: issuer and audience, checked on every decode
* ``exp`` / ``iat``: expiry and issue time
* ``jti``: unique token id, used by the Redis deny-list on logout
* ``type``: always ``"access"``

Tokens are short-lived (30 min by default); logout revokes a single
token through ``app.auth.token_revocation``.
"""

import uuid
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import bcrypt
from jose import jwt

from app.config import get_settings
from app.models.user import UserRole


def hash_password(password: str) -> str:
    """Hash *password* with a fresh bcrypt salt."""
    rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check *password* against a stored bcrypt hash in constant time."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash, or a password bcrypt refuses (over 72 bytes)
        return False


@lru_cache
def _dummy_hash() -> str:
    return hash_password("timing-equaliser")


def burn_password_check(password: str) -> None:
    """Spend the same bcrypt work as a real check when the user is unknown."""
    verify_password(password, _dummy_hash())


def create_access_token(
    user_id: str,
    role: str | UserRole,
    username: str = "",
    email: str = "",
) -> str:
    """Create a short-lived signed access token."""
    settings = get_settings()
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    payload = {
        "sub": user_id,
        "role": str(role),
        "username": username,
        "email": email,
        "type": "access",
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": expire,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT token. Raises JWTError on failure.

    Signature, expiry, issuer and audience are all verified.
    """
    settings = get_settings()
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
    )
