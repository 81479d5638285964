"""Protocol definitions for repository interfaces.

These protocols enable type-safe mocking in tests and decouple service
layer code from concrete SQLAlchemy implementations.
"""

from typing import Protocol

from app.filters.payment import PaymentFilter
from app.models.payment import Payment, PaymentStatus
from app.models.user import User, UserRole
from app.schemas.payment import PaymentCreate


class UserRepositoryProtocol(Protocol):
    """Interface for user (credential store) data access."""

    async def get_by_id(self, user_id: str) -> User | None: ...

    async def get_by_email(self, email: str) -> User | None: ...

    async def find_conflict(self, email: str, username: str) -> str | None: ...

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
    ) -> User: ...

    async def update_password_hash(self, user_id: str, password_hash: str) -> bool: ...

    async def update_role(self, user_id: str, role: UserRole) -> User | None: ...


class PaymentRepositoryProtocol(Protocol):
    """Interface for payment store data access."""

    async def create(self, owner_user_id: str, data: PaymentCreate) -> Payment: ...

    async def get_by_id(self, payment_id: str) -> Payment | None: ...

    async def get_all(self, filters: PaymentFilter) -> list[Payment]: ...

    async def list_for_owner(self, owner_user_id: str) -> list[Payment]: ...

    async def transition_status(
        self,
        payment_id: str,
        *,
        from_status: PaymentStatus,
        to_status: PaymentStatus,
        actor_id: str,
    ) -> Payment | None: ...
