"""Declarative filter for payments."""

from datetime import datetime
from typing import Optional

from fastapi_filter.contrib.sqlalchemy import Filter

from app.models.payment import Payment


class PaymentFilter(Filter):
    """Query-param filter for the ``GET /admin/payments`` endpoint."""

    status: Optional[str] = None
    currency: Optional[str] = None
    owner_user_id: Optional[str] = None
    created_at__gte: Optional[datetime] = None
    created_at__lte: Optional[datetime] = None
    order_by: Optional[list[str]] = None

    class Constants(Filter.Constants):
        model = Payment
