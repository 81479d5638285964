"""Database models package."""

from app.models.base import Base
from app.models.payment import Payment, PaymentStatus
from app.models.user import User, UserRole

__all__ = [
    # Base
    "Base",
    # Models
    "User",
    "Payment",
    # Enums
    "UserRole",
    "PaymentStatus",
]
