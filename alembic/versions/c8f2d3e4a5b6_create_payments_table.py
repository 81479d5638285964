"""create_payments_table

Revision ID: c8f2d3e4a5b6
Revises: b7e1c2d3f4a5
Create Date: 2026-10-19 09:30:00.000000
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "c8f2d3e4a5b6"
down_revision: Union[str, None] = "b7e1c2d3f4a5"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create payments table with its lifecycle audit columns."""
    op.create_table(
        "payments",
        sa.Column("id", sa.UUID(as_uuid=False), nullable=False),
        sa.Column("owner_user_id", sa.UUID(as_uuid=False), nullable=False),
        sa.Column("amount", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("swift_code", sa.String(length=11), nullable=False),
        sa.Column("beneficiary_account_number", sa.String(length=20), nullable=False),
        sa.Column("reference", sa.String(length=200), nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "Pending",
                "Verified",
                "Processed",
                name="payment_status",
                native_enum=False,
                create_constraint=True,
            ),
            nullable=False,
        ),
        sa.Column("verified_by", sa.String(length=100), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("processed_by", sa.String(length=100), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint("amount > 0", name="ck_payment_amount_positive"),
        sa.ForeignKeyConstraint(["owner_user_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_payments_owner_user_id"), "payments", ["owner_user_id"], unique=False
    )
    op.create_index("idx_payment_status_created", "payments", ["status", "created_at"])
    op.create_index("idx_payment_owner_created", "payments", ["owner_user_id", "created_at"])


def downgrade() -> None:
    """Drop payments table."""
    op.drop_index("idx_payment_owner_created", table_name="payments")
    op.drop_index("idx_payment_status_created", table_name="payments")
    op.drop_index(op.f("ix_payments_owner_user_id"), table_name="payments")
    op.drop_table("payments")
