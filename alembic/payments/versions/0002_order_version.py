"""add order version for conditional status writes

Revision ID: 0002_order_version
Revises: 0001_payments
Create Date: 2026-10-14
"""

from alembic import op
import sqlalchemy as sa


revision = "0002_order_version"
down_revision = "0001_payments"
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Existing rows start at 1 so a freshly built Order (version 0) can never
    # overwrite them.
    op.add_column(
        "orders",
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
    )
    op.alter_column("orders", "version", server_default=None)
    op.create_index("ix_payments_order_id_created_at", "payments", ["order_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_payments_order_id_created_at", table_name="payments")
    op.drop_column("orders", "version")
