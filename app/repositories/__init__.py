"""Database repositories for data access."""
from app.repositories.payment_repository import PaymentRepository
from app.repositories.user_repository import DuplicateUserError, UserRepository

__all__ = [
    "UserRepository",
    "PaymentRepository",
    "DuplicateUserError",
]
