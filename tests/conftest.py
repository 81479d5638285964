"""Shared test fixtures for the secure payments API."""

import os

# Set test config before any app imports trigger Settings() validation.
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-for-unit-tests-0123456789")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import uuid  # noqa: E402
from collections.abc import AsyncGenerator  # noqa: E402
from datetime import UTC, datetime  # noqa: E402
from decimal import Decimal  # noqa: E402
from types import SimpleNamespace  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import fakeredis.aioredis  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.config import get_settings  # noqa: E402
from app.main import app  # noqa: E402
from app.models.payment import PaymentStatus  # noqa: E402
from app.models.user import UserRole  # noqa: E402
from app.rate_limit import RateLimiter, limiter  # noqa: E402
from tests.helpers.token_factory import create_access_token  # noqa: E402

# ---------------------------------------------------------------------------
# Fake Redis (drop-in async replacement)
# ---------------------------------------------------------------------------


def _make_fake_redis():
    """Create a fakeredis instance that behaves like redis.asyncio.Redis."""
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


# ---------------------------------------------------------------------------
# Mock DB session
# ---------------------------------------------------------------------------


def _make_mock_session():
    """Create a mock async DB session.

    The mock supports ``async with factory() as session`` used by
    ``get_db_session`` and by the readiness probe (``SELECT 1``).
    """
    session = AsyncMock()
    result_mock = MagicMock()
    result_mock.scalar.return_value = 1
    session.execute.return_value = result_mock
    session.close = AsyncMock()
    return session


def _make_mock_session_factory():
    """Return a callable that mimics ``async_sessionmaker().__call__()``."""
    mock_session = _make_mock_session()
    factory = MagicMock()
    ctx = AsyncMock()
    ctx.__aenter__.return_value = mock_session
    factory.return_value = ctx
    return factory, mock_session


# ---------------------------------------------------------------------------
# HTTP client fixture (FastAPI app with mocked infra)
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture()
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the FastAPI app.

    Infrastructure (DB, Redis) is mocked and every test gets fresh
    rate-limit counters, so tests run without devstack and in any order.
    """
    session_factory, _ = _make_mock_session_factory()
    fake_redis = _make_fake_redis()

    app.state.engine = MagicMock()
    app.state.session_factory = session_factory
    app.state.redis = fake_redis
    app.state.rate_limiter = RateLimiter.from_settings(get_settings())
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    await fake_redis.aclose()


# ---------------------------------------------------------------------------
# Redis fixture
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture()
async def redis_client():
    """Provide a fake Redis client."""
    client = _make_fake_redis()
    yield client
    await client.aclose()


# ---------------------------------------------------------------------------
# Auth helpers — generate JWT tokens directly (no login round-trip needed)
# ---------------------------------------------------------------------------

ADMIN_ID = str(uuid.uuid4())
CUSTOMER_ID = str(uuid.uuid4())
EMPLOYEE_ID = str(uuid.uuid4())

_IDS = {
    UserRole.ADMIN: ADMIN_ID,
    UserRole.USER: CUSTOMER_ID,
    UserRole.EMPLOYEE: EMPLOYEE_ID,
}


def _make_token(role: str, username: str) -> str:
    """Create a valid JWT access token for testing."""
    return create_access_token(
        user_id=_IDS.get(UserRole(role), str(uuid.uuid4())),
        role=role,
        username=username,
        email=f"{username}@bank.co.za",
    )


def _auth_headers(role: str, username: str) -> dict[str, str]:
    """Return Authorization header dict with a valid JWT."""
    token = _make_token(role, username)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture()
async def admin_client(client) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client pre-authenticated as an Admin."""
    client.headers.update(_auth_headers("Admin", "admin"))
    yield client
    client.headers.pop("Authorization", None)


@pytest_asyncio.fixture()
async def customer_client(client) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client pre-authenticated as a customer (``User`` role)."""
    client.headers.update(_auth_headers("User", "customer"))
    yield client
    client.headers.pop("Authorization", None)


@pytest_asyncio.fixture()
async def employee_client(client) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client pre-authenticated as an Employee."""
    client.headers.update(_auth_headers("Employee", "employee"))
    yield client
    client.headers.pop("Authorization", None)


# ---------------------------------------------------------------------------
# Mock ORM model factories
# ---------------------------------------------------------------------------

_NOW = datetime.now(UTC)


def _make_user_model(**overrides):
    """Return a SimpleNamespace that looks like a User ORM instance."""
    from app.auth.security import hash_password

    data = {
        "id": str(uuid.uuid4()),
        "email": "thandi@bank.co.za",
        "username": "thandi",
        "name": "Thandi Mokoena",
        "id_number": "9001015009087",
        "account_number": "1234567890",
        "role": UserRole.USER.value,
        "password_hash": hash_password("Passw0rd!"),
        "is_active": True,
        "created_at": _NOW,
        "updated_at": _NOW,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


def _make_payment_model(**overrides):
    """Return a SimpleNamespace that looks like a Payment ORM instance."""
    data = {
        "id": str(uuid.uuid4()),
        "owner_user_id": CUSTOMER_ID,
        "amount": Decimal("100.00"),
        "currency": "ZAR",
        "swift_code": "ABSAZAJJ",
        "beneficiary_account_number": "1234567890",
        "reference": "Invoice 42",
        "status": PaymentStatus.PENDING.value,
        "verified_by": None,
        "verified_at": None,
        "processed_by": None,
        "processed_at": None,
        "created_at": _NOW,
        "updated_at": _NOW,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


# ---------------------------------------------------------------------------
# Factory helpers (payload dicts for HTTP requests)
# ---------------------------------------------------------------------------


def make_payment_payload(**overrides) -> dict:
    """Build a valid payment submission payload."""
    data = {
        "amount": "100.00",
        "currency": "ZAR",
        "swift_code": "ABSAZAJJ",
        "account_number": "1234567890",
        "reference": "Invoice 42",
    }
    data.update(overrides)
    return data


def make_register_payload(**overrides) -> dict:
    """Build a valid registration payload."""
    seq = uuid.uuid4().hex[:6]
    data = {
        "name": "Thandi Mokoena",
        "username": f"thandi_{seq}",
        "email": f"thandi.{seq}@bank.co.za",
        "id_number": "9001015009087",
        "account_number": "1234567890",
        "password": "Passw0rd!",
    }
    data.update(overrides)
    return data
