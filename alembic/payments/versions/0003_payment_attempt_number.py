"""number payment attempts per order

Revision ID: 0003_payment_attempt_number
Revises: 0002_order_version
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


revision = "0003_payment_attempt_number"
down_revision = "0002_order_version"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "payments",
        sa.Column("attempt_number", sa.Integer(), nullable=False, server_default=sa.text("1")),
    )
    # Backfill existing rows in recording order within each order.
    op.execute(
        """
        UPDATE payments SET attempt_number = (
            SELECT COUNT(*) FROM payments AS earlier
            WHERE earlier.order_id = payments.order_id
              AND (earlier.created_at < payments.created_at
                   OR (earlier.created_at = payments.created_at AND earlier.id <= payments.id))
        )
        """
    )
    op.alter_column("payments", "attempt_number", server_default=None)


def downgrade() -> None:
    op.drop_column("payments", "attempt_number")
