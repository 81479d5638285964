"""Core business logic."""
from app.core.payment_state import PaymentStateMachine

__all__ = [
    "PaymentStateMachine",
]
