"""Rate limiting.

Two layers share the ``limits`` library:

* ``limiter``: the slowapi instance that applies the global default limit
  to every route through ``SlowAPIMiddleware``.
* ``RateLimiter``: an injectable per-operation limiter for the credential
  endpoints (login, register).  It lives on ``app.state.rate_limiter`` so
  tests and deployments can swap its storage or strategy, and it is
  checked in a dependency that runs before the route body, so a rejected
  request never reaches the credential store.
"""

import logging
import math
import time
from ipaddress import ip_address, ip_network

from fastapi import Depends, Request
from limits import RateLimitItem, parse
from limits.aio.strategies import (
    FixedWindowRateLimiter,
    MovingWindowRateLimiter,
    RateLimiter as LimitsStrategy,
)
from limits.storage import storage_from_string
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request as StarletteRequest

from app.config import Settings, get_settings
from app.core.errors import RateLimitedError

logger = logging.getLogger(__name__)


def _is_trusted_proxy(host: str, trusted_proxies: list[str]) -> bool:
    try:
        addr = ip_address(host)
    except ValueError:
        return False
    return any(addr in ip_network(net, strict=False) for net in trusted_proxies)


def _get_client_ip(request: StarletteRequest, trusted_proxies: list[str] | None = None) -> str:
    """Return the client address that rate limits are keyed on.

    ``X-Forwarded-For`` is only honoured when the direct peer is one of
    ``settings.trusted_proxies``.  The client is then the right-most hop
    that is not itself a trusted proxy; entries left of it are client-supplied.
    """
    peer = get_remote_address(request)
    if trusted_proxies is None:
        trusted_proxies = get_settings().trusted_proxies
    forwarded = request.headers.get("X-Forwarded-For")
    if not forwarded or not _is_trusted_proxy(peer, trusted_proxies):
        return peer

    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    for hop in reversed(hops):
        if not _is_trusted_proxy(hop, trusted_proxies):
            return hop
    return peer


_settings = get_settings()
limiter = Limiter(
    key_func=_get_client_ip,
    default_limits=[_settings.default_rate_limit],
    enabled=_settings.rate_limit_enabled,
)

_STRATEGIES: dict[str, type[LimitsStrategy]] = {
    "fixed-window": FixedWindowRateLimiter,
    "moving-window": MovingWindowRateLimiter,
}


class RateLimiter:
    """Per-operation quota keyed by ``operation`` + client key."""

    NAMESPACE = "auth-ops"

    def __init__(
        self,
        policies: dict[str, str],
        storage_uri: str = "async+memory://",
        strategy: str = "fixed-window",
        enabled: bool = True,
    ):
        self.enabled = enabled
        self._policies: dict[str, RateLimitItem] = {
            operation: parse(limit) for operation, limit in policies.items()
        }
        self._storage = storage_from_string(storage_uri)
        self._strategy = _STRATEGIES[strategy](self._storage)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RateLimiter":
        return cls(
            policies={
                "login": settings.login_rate_limit,
                "register": settings.register_rate_limit,
            },
            storage_uri=settings.rate_limit_storage_uri,
            strategy=settings.rate_limit_strategy,
            enabled=settings.rate_limit_enabled,
        )

    def policy(self, operation: str) -> RateLimitItem:
        try:
            return self._policies[operation]
        except KeyError:
            raise ValueError(f"No rate limit policy for operation '{operation}'") from None

    async def hit(self, operation: str, client_key: str) -> None:
        """Consume one unit of *operation* quota for *client_key*.

        Raises:
            RateLimitedError: If the quota for the current window is exhausted.
        """
        if not self.enabled:
            return
        item = self.policy(operation)
        allowed = await self._strategy.hit(item, self.NAMESPACE, operation, client_key)
        if not allowed:
            logger.warning(
                "Rate limit exceeded op=%s client=%s limit=%s", operation, client_key, item
            )
            retry_after = await self._seconds_until_reset(item, operation, client_key)
            raise RateLimitedError(retry_after=retry_after)

    async def _seconds_until_reset(
        self, item: RateLimitItem, operation: str, client_key: str
    ) -> int:
        stats = await self._strategy.get_window_stats(item, self.NAMESPACE, operation, client_key)
        return max(1, math.ceil(stats.reset_time - time.time()))

    async def reset(self) -> None:
        """Clear all counters (used by tests and admin tooling)."""
        await self._storage.reset()


def get_rate_limiter(request: Request) -> RateLimiter:
    """Dependency that provides the limiter from app.state."""
    return request.app.state.rate_limiter


def rate_limited(operation: str):
    """Dependency factory that charges one attempt against *operation*.

    Usage:
        @router.post("/login", dependencies=[Depends(rate_limited("login"))])
    """

    async def _check(
        request: Request,
        rate_limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> None:
        await rate_limiter.hit(operation, _get_client_ip(request))

    return _check
