"""Repository for user account data access (the credential store)."""

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User, UserRole


class DuplicateUserError(Exception):
    """Raised when an email or username is already registered."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"A user with this {field} already exists")


class UserRepository:
    """Data access layer for users."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: str) -> User | None:
        """Get a user by primary key."""
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by exact (case-sensitive) email match."""
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_conflict(self, email: str, username: str) -> str | None:
        """Return ``"email"`` or ``"username"`` if either is already taken."""
        result = await self.session.execute(
            select(User.email, User.username).where(
                or_(User.email == email, User.username == username)
            )
        )
        rows = result.all()
        if any(row.email == email for row in rows):
            return "email"
        if rows:
            return "username"
        return None

    async def create(
        self,
        *,
        email: str,
        username: str,
        name: str,
        id_number: str,
        account_number: str,
        password_hash: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Create a new user.

        Raises:
            DuplicateUserError: If the email or username is already registered.
        """
        conflict = await self.find_conflict(email, username)
        if conflict:
            raise DuplicateUserError(conflict)

        user = User(
            email=email,
            username=username,
            name=name,
            id_number=id_number,
            account_number=account_number,
            password_hash=password_hash,
            role=role,
        )
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration
            await self.session.rollback()
            raise DuplicateUserError("email or username")
        await self.session.refresh(user)
        return user

    async def update_password_hash(self, user_id: str, password_hash: str) -> bool:
        """Replace the stored credential hash. Returns ``False`` if the user is unknown."""
        result = await self.session.execute(
            update(User).where(User.id == user_id).values(password_hash=password_hash)
        )
        await self.session.flush()
        return result.rowcount > 0

    async def update_role(self, user_id: str, role: UserRole) -> User | None:
        """Change a user's role."""
        user = await self.get_by_id(user_id)
        if not user:
            return None

        user.role = role
        await self.session.flush()
        await self.session.refresh(user)
        return user
