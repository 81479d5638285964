"""Pure ASGI middlewares (no BaseHTTPMiddleware overhead)."""

import logging
import re
import time
import uuid as _uuid
from urllib.parse import parse_qsl, urlencode

from starlette.types import ASGIApp, Message, Receive, Scope, Send
from structlog.contextvars import bound_contextvars

from app.config import get_settings

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("security")

_REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9-]{1,64}")


# ---------------------------------------------------------------------------
# Request ID
# ---------------------------------------------------------------------------


class RequestIDMiddleware:
    """Inject a unique request ID into every request/response cycle."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        request_id = headers.get(b"x-request-id", b"").decode("latin-1")
        # Inbound IDs end up in every log line; anything unexpected is replaced
        if not _REQUEST_ID_PATTERN.fullmatch(request_id):
            request_id = str(_uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                response_headers = list(message.get("headers", []))
                response_headers.append((b"x-request-id", request_id.encode()))
                message["headers"] = response_headers
            await send(message)

        with bound_contextvars(request_id=request_id):
            await self.app(scope, receive, send_with_request_id)


# ---------------------------------------------------------------------------
# Security headers
# ---------------------------------------------------------------------------

_SECURITY_HEADERS: list[tuple[bytes, bytes]] = [
    (b"x-content-type-options", b"nosniff"),
    (b"x-frame-options", b"DENY"),
    (b"referrer-policy", b"no-referrer"),
    (b"cache-control", b"no-store"),
    (b"permissions-policy", b"geolocation=(), camera=(), microphone=()"),
    (b"content-security-policy", b"default-src 'none'; frame-ancestors 'none'"),
]


class SecurityHeadersMiddleware:
    """Add hardening headers to every response.

    Account and payment data must never be cached or framed, so
    ``Cache-Control: no-store`` and ``X-Frame-Options: DENY`` go on every
    response.  HSTS is only sent in production where TLS is terminated
    in front of the service.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_security_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                response_headers = list(message.get("headers", []))
                response_headers.extend(_SECURITY_HEADERS)
                if get_settings().is_production:
                    response_headers.append(
                        (
                            b"strict-transport-security",
                            b"max-age=63072000; includeSubDomains; preload",
                        )
                    )
                message["headers"] = response_headers
            await send(message)

        await self.app(scope, receive, send_with_security_headers)


# ---------------------------------------------------------------------------
# HTTP parameter pollution
# ---------------------------------------------------------------------------


class HPPMiddleware:
    """Collapse repeated query parameters to their first occurrence.

    ``?status=Pending&status=Processed`` becomes ``?status=Pending`` so that
    filters and validators always see a single value per key.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not scope.get("query_string"):
            await self.app(scope, receive, send)
            return

        pairs = parse_qsl(scope["query_string"].decode("latin-1"), keep_blank_values=True)
        seen: dict[str, str] = {}
        for key, value in pairs:
            seen.setdefault(key, value)

        if len(seen) != len(pairs):
            logger.info(
                "Dropped %d duplicate query parameter(s) on %s",
                len(pairs) - len(seen),
                scope.get("path", ""),
            )
            scope = dict(scope)
            scope["query_string"] = urlencode(list(seen.items())).encode("latin-1")

        await self.app(scope, receive, send)


# ---------------------------------------------------------------------------
# Suspicious request logging
# ---------------------------------------------------------------------------


class SuspiciousRequestLoggingMiddleware:
    """Log request patterns worth a second look on the ``security`` logger.

    Checks run in order and at most one line is written per request:

    * every 401/403 response (WARNING)
    * otherwise, state-changing requests that complete faster than
      ``slow_request_threshold_ms`` (WARNING, typical of scripted clients)
    * otherwise, every PUT/DELETE (INFO)
    """

    def __init__(self, app: ASGIApp, threshold_ms: int | None = None) -> None:
        self.app = app
        self.threshold_ms = (
            threshold_ms if threshold_ms is not None else get_settings().slow_request_threshold_ms
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        status_code = 500

        async def send_capturing_status(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_capturing_status)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            self._inspect(scope, status_code, elapsed_ms)

    def _inspect(self, scope: Scope, status_code: int, elapsed_ms: float) -> None:
        method = scope.get("method", "")
        path = scope.get("path", "")
        client = scope.get("client")
        client_ip = client[0] if client else "unknown"

        if status_code in (401, 403):
            security_logger.warning(
                "Access denied status=%s method=%s path=%s ip=%s",
                status_code,
                method,
                path,
                client_ip,
            )
        elif method != "GET" and elapsed_ms < self.threshold_ms:
            security_logger.warning(
                "Unusually fast %s %s (%.1f ms) ip=%s", method, path, elapsed_ms, client_ip
            )
        elif method in ("PUT", "DELETE"):
            security_logger.info("%s %s status=%s ip=%s", method, path, status_code, client_ip)
