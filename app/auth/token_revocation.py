"""Redis-backed deny-list for logged-out access tokens.

A revoked token's ``jti`` is stored with a TTL equal to the token's
remaining lifetime, so the deny-list never outgrows the set of tokens
that could still validate.
"""

from datetime import UTC, datetime
from math import ceil

from redis.asyncio import Redis

_DENY_PREFIX = "token:deny:"


def _deny_key(jti: str) -> str:
    return f"{_DENY_PREFIX}{jti}"


async def revoke_token(redis: Redis, jti: str, expires_at: datetime) -> bool:
    """Deny *jti* until *expires_at*. Returns ``False`` if it has already expired."""
    remaining = ceil((expires_at - datetime.now(UTC)).total_seconds())
    if remaining <= 0:
        return False
    await redis.setex(_deny_key(jti), remaining, "1")
    return True


async def is_token_revoked(redis: Redis, jti: str) -> bool:
    """Return ``True`` if *jti* has been revoked."""
    return await redis.exists(_deny_key(jti)) > 0
