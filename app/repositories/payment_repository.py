"""Repository for payment data access (the payment store)."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.filters.payment import PaymentFilter
from app.models.payment import Payment, PaymentStatus
from app.schemas.payment import PaymentCreate


class PaymentRepository:
    """Data access layer for payments."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, owner_user_id: str, data: PaymentCreate) -> Payment:
        """Persist a new payment in ``Pending`` status."""
        payment = Payment(
            owner_user_id=owner_user_id,
            amount=data.amount,
            currency=data.currency,
            swift_code=data.swift_code,
            beneficiary_account_number=data.account_number,
            reference=data.reference,
            status=PaymentStatus.PENDING,
        )
        self.session.add(payment)
        await self.session.flush()
        await self.session.refresh(payment)
        return payment

    async def get_by_id(self, payment_id: str) -> Payment | None:
        """Get a payment by ID."""
        result = await self.session.execute(select(Payment).where(Payment.id == payment_id))
        return result.scalar_one_or_none()

    async def get_all(self, filters: PaymentFilter) -> list[Payment]:
        """Get payments with declarative filtering and sorting."""
        query = filters.filter(select(Payment))
        query = filters.sort(query)
        if not filters.order_by:
            query = query.order_by(Payment.created_at.desc())

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_for_owner(self, owner_user_id: str) -> list[Payment]:
        """Get a customer's own payments, newest first."""
        query = (
            select(Payment)
            .where(Payment.owner_user_id == owner_user_id)
            .order_by(Payment.created_at.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def transition_status(
        self,
        payment_id: str,
        *,
        from_status: PaymentStatus,
        to_status: PaymentStatus,
        actor_id: str,
    ) -> Payment | None:
        """Atomically move a payment from *from_status* to *to_status*.

        Issues a single ``UPDATE ... WHERE id = :id AND status = :from``.
        Returns the updated payment, or ``None`` when no row matched
        (unknown id, or the payment is no longer in *from_status*).
        """
        values: dict[str, Any] = {"status": to_status.value}
        now = datetime.now(UTC)
        if to_status is PaymentStatus.VERIFIED:
            values.update(verified_by=actor_id, verified_at=now)
        elif to_status is PaymentStatus.PROCESSED:
            values.update(processed_by=actor_id, processed_at=now)

        stmt = (
            update(Payment)
            .where(Payment.id == payment_id, Payment.status == from_status.value)
            .values(**values)
            .returning(Payment)
            .execution_options(populate_existing=True, synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        payment = result.scalar_one_or_none()
        await self.session.flush()
        return payment
