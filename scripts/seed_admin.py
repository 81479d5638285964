"""Create the first administrator account.

Usage::

    SEED_ADMIN_EMAIL=admin@bank.co.za SEED_ADMIN_PASSWORD='S3cure!pass' \
        python scripts/seed_admin.py

Re-running with an email that already exists is a no-op.
"""
import asyncio
import os
import sys
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.auth.security import hash_password
from app.config import get_settings
from app.models.user import UserRole
from app.repositories.user_repository import DuplicateUserError, UserRepository
from app.utils.logging import get_logger, setup_logging

logger = get_logger("seed_admin")


async def seed_admin(session: AsyncSession, email: str, username: str, password: str) -> bool:
    """Insert an ``Admin`` user. Returns ``False`` if the account already exists."""
    repo = UserRepository(session)
    try:
        user = await repo.create(
            email=email,
            username=username,
            name="System Administrator",
            id_number="0000000000000",
            account_number="0000000000",
            password_hash=hash_password(password),
            role=UserRole.ADMIN,
        )
    except DuplicateUserError as exc:
        logger.info("admin_exists", field=exc.field, email=email)
        return False

    await session.commit()
    logger.info("admin_created", user_id=user.id, email=email)
    return True


async def main() -> None:
    """Main entry point."""
    settings = get_settings()
    setup_logging(settings.log_level, "console")

    email = os.environ.get("SEED_ADMIN_EMAIL")
    password = os.environ.get("SEED_ADMIN_PASSWORD")
    username = os.environ.get("SEED_ADMIN_USERNAME", "admin")
    if not email or not password:
        logger.error("missing_credentials", required=["SEED_ADMIN_EMAIL", "SEED_ADMIN_PASSWORD"])
        sys.exit(1)

    engine = create_async_engine(str(settings.database_url))
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async with session_factory() as session:
        await seed_admin(session, email, username, password)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
