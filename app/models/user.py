"""User account model and the closed role set used for RBAC."""

import enum

from sqlalchemy import Boolean, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UUIDMixin


class UserRole(enum.StrEnum):
    """User roles for RBAC. No hierarchy: endpoints list roles explicitly."""

    ADMIN = "Admin"
    USER = "User"
    EMPLOYEE = "Employee"


class User(Base, UUIDMixin, TimestampMixin):
    """Registered account holder or staff member."""

    __tablename__ = "users"

    # Exact-match login key (case-sensitive)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    id_number: Mapped[str] = mapped_column(String(13), nullable=False)
    account_number: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    role: Mapped[str] = mapped_column(
        SAEnum(
            UserRole,
            name="user_role",
            create_constraint=True,
            native_enum=False,
            values_callable=lambda e: [member.value for member in e],
        ),
        default=UserRole.USER.value,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email} role={self.role}>"
