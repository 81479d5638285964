"""Declarative query filters (fastapi-filter)."""

from .payment import PaymentFilter

__all__ = ["PaymentFilter"]
