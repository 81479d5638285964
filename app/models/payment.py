"""Payment database model."""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UUIDMixin


class PaymentStatus(StrEnum):
    """Payment lifecycle status. Moves forward only."""

    PENDING = "Pending"
    VERIFIED = "Verified"
    PROCESSED = "Processed"


class Payment(Base, UUIDMixin, TimestampMixin):
    """International payment submitted by a customer."""

    __tablename__ = "payments"

    owner_user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="ZAR", nullable=False)
    swift_code: Mapped[str] = mapped_column(String(11), nullable=False)
    beneficiary_account_number: Mapped[str] = mapped_column(String(20), nullable=False)
    reference: Mapped[str | None] = mapped_column(String(200), nullable=True)

    status: Mapped[str] = mapped_column(
        SAEnum(
            PaymentStatus,
            name="payment_status",
            create_constraint=True,
            native_enum=False,
            values_callable=lambda e: [member.value for member in e],
        ),
        default=PaymentStatus.PENDING.value,
        nullable=False,
    )

    # Transition audit trail
    verified_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    processed_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payment_amount_positive"),
        Index("idx_payment_status_created", "status", "created_at"),
        Index("idx_payment_owner_created", "owner_user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Payment {self.id}: {self.amount} {self.currency} status={self.status}>"
