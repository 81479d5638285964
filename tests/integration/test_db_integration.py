"""Real database integration tests using testcontainers.

These tests use a real PostgreSQL container instead of mocked repositories,
verifying actual SQL, constraints, and the atomic status transition under
concurrent sessions.

Requires Docker to be running. Tests are skipped if Docker is unavailable.

Run with: pytest tests/integration/test_db_integration.py -v -s
"""

import asyncio
import subprocess
import uuid
from decimal import Decimal

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

try:
    from testcontainers.postgres import PostgresContainer

    _HAS_TESTCONTAINERS = True
except ImportError:
    _HAS_TESTCONTAINERS = False

from app.core.errors import InvalidTransitionError
from app.filters.payment import PaymentFilter
from app.models import Base, PaymentStatus, UserRole
from app.repositories.payment_repository import PaymentRepository
from app.repositories.user_repository import DuplicateUserError, UserRepository
from app.schemas.auth import Principal
from app.schemas.payment import PaymentCreate
from app.services.payment_service import PaymentService

pytestmark = [
    pytest.mark.asyncio,
    pytest.mark.integration,
    pytest.mark.skipif(not _HAS_TESTCONTAINERS, reason="testcontainers not installed"),
]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def postgres_container():
    """Start a real PostgreSQL container shared by every test in the module."""
    try:
        result = subprocess.run(["docker", "info"], capture_output=True, timeout=10)
    except (FileNotFoundError, subprocess.TimeoutExpired):
        pytest.skip("Docker is not available")
    if result.returncode != 0:
        pytest.skip("Docker is not available")

    with PostgresContainer("postgres:16-alpine") as pg:
        yield pg


@pytest.fixture(scope="module")
def async_db_url(postgres_container):
    """Connection URL rewritten for the asyncpg driver."""
    url = postgres_container.get_connection_url()
    return url.replace("psycopg2", "asyncpg").replace("postgresql://", "postgresql+asyncpg://")


@pytest.fixture(scope="module")
def _create_tables(async_db_url):
    """Create all tables in the test database (module scope)."""

    async def _setup():
        engine = create_async_engine(async_db_url)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(_setup())


@pytest.fixture()
async def session_factory(async_db_url, _create_tables):
    engine = create_async_engine(async_db_url)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture()
async def db_session(session_factory):
    """Provide a real async DB session. Each test gets a fresh session."""
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _make_user(session, role: UserRole = UserRole.USER):
    seq = uuid.uuid4().hex[:8]
    user = await UserRepository(session).create(
        email=f"user.{seq}@bank.co.za",
        username=f"user_{seq}",
        name="Test User",
        id_number="9001015009087",
        account_number="1234567890",
        password_hash="$2b$04$notarealhashnotarealhashnotarealhashnotarealhashnot",
        role=role,
    )
    await session.commit()
    return user


def _payment(**overrides) -> PaymentCreate:
    data = {
        "amount": "100.00",
        "currency": "ZAR",
        "swift_code": "ABSAZAJJ",
        "account_number": "1234567890",
    }
    data.update(overrides)
    return PaymentCreate(**data)


# ---------------------------------------------------------------------------
# UserRepository
# ---------------------------------------------------------------------------


class TestUserRepositoryRealDB:
    async def test_create_and_get_by_email(self, db_session):
        user = await _make_user(db_session)

        repo = UserRepository(db_session)
        fetched = await repo.get_by_email(user.email)

        assert fetched is not None
        assert fetched.id == user.id
        assert fetched.role == UserRole.USER

    async def test_email_lookup_is_case_sensitive(self, db_session):
        user = await _make_user(db_session)
        assert await UserRepository(db_session).get_by_email(user.email.upper()) is None

    async def test_duplicate_email_rejected(self, db_session):
        user = await _make_user(db_session)
        with pytest.raises(DuplicateUserError) as exc:
            await UserRepository(db_session).create(
                email=user.email,
                username=f"other_{uuid.uuid4().hex[:6]}",
                name="Other",
                id_number="9001015009087",
                account_number="1234567890",
                password_hash="x",
            )
        assert exc.value.field == "email"

    async def test_update_role(self, db_session):
        user = await _make_user(db_session)
        updated = await UserRepository(db_session).update_role(user.id, UserRole.EMPLOYEE)
        assert updated.role == UserRole.EMPLOYEE


# ---------------------------------------------------------------------------
# PaymentRepository
# ---------------------------------------------------------------------------


class TestPaymentRepositoryRealDB:
    async def test_create_payment_defaults_to_pending(self, db_session):
        owner = await _make_user(db_session)
        payment = await PaymentRepository(db_session).create(owner.id, _payment())
        await db_session.commit()

        assert payment.status == PaymentStatus.PENDING
        assert payment.amount == Decimal("100.00")
        assert payment.created_at is not None

    async def test_amount_positive_constraint(self, db_session):
        owner = await _make_user(db_session)
        with pytest.raises(IntegrityError):
            await db_session.execute(
                text(
                    "INSERT INTO payments (id, owner_user_id, amount, currency, swift_code,"
                    " beneficiary_account_number, status)"
                    " VALUES (:id, :owner, -5, 'ZAR', 'ABSAZAJJ', '1234567890', 'Pending')"
                ),
                {"id": str(uuid.uuid4()), "owner": owner.id},
            )
        await db_session.rollback()

    async def test_conditional_transition(self, db_session):
        owner = await _make_user(db_session)
        repo = PaymentRepository(db_session)
        payment = await repo.create(owner.id, _payment())

        moved = await repo.transition_status(
            payment.id,
            from_status=PaymentStatus.PENDING,
            to_status=PaymentStatus.VERIFIED,
            actor_id="admin-1",
        )
        assert moved is not None
        assert moved.status == PaymentStatus.VERIFIED
        assert moved.verified_by == "admin-1"

        again = await repo.transition_status(
            payment.id,
            from_status=PaymentStatus.PENDING,
            to_status=PaymentStatus.VERIFIED,
            actor_id="admin-2",
        )
        assert again is None
        await db_session.commit()

    async def test_filter_by_status(self, db_session):
        owner = await _make_user(db_session)
        repo = PaymentRepository(db_session)
        pending = await repo.create(owner.id, _payment())
        await db_session.commit()

        rows = await repo.get_all(PaymentFilter(status="Pending", owner_user_id=owner.id))
        assert [p.id for p in rows] == [pending.id]


# ---------------------------------------------------------------------------
# Concurrency: two sessions verifying the same payment
# ---------------------------------------------------------------------------


class TestConcurrentTransitions:
    async def test_concurrent_verify_exactly_one_succeeds(self, session_factory):
        async with session_factory() as setup:
            owner = await _make_user(setup)
            admin = await _make_user(setup, UserRole.ADMIN)
            payment = await PaymentRepository(setup).create(owner.id, _payment())
            await setup.commit()

        actor = Principal(id=admin.id, role=UserRole.ADMIN)

        async def _verify():
            async with session_factory() as session:
                try:
                    result = await PaymentService(PaymentRepository(session)).verify(
                        actor, payment.id
                    )
                    await session.commit()
                    return result
                except Exception:
                    await session.rollback()
                    raise

        results = await asyncio.gather(*(_verify() for _ in range(4)), return_exceptions=True)

        successes = [r for r in results if not isinstance(r, BaseException)]
        failures = [r for r in results if isinstance(r, BaseException)]
        assert len(successes) == 1
        assert all(isinstance(f, InvalidTransitionError) for f in failures)

        async with session_factory() as check:
            stored = await PaymentRepository(check).get_by_id(payment.id)
            assert stored.status == PaymentStatus.VERIFIED
            assert stored.verified_by == admin.id
