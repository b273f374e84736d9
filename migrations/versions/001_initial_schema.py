"""Initial schema: the orders table.

Revision ID: 001
Create Date: 2026-02-15
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── orders ────────────────────────────────────────────────────────
    op.create_table(
        "orders",
        sa.Column("id", sa.Uuid(as_uuid=False), primary_key=True),
        sa.Column("generated_id", sa.String(4), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("car_type", sa.Integer, nullable=False),
        sa.Column("pickup_address", sa.String(255), nullable=False),
        sa.Column("proposed_price", sa.String(32), nullable=False),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("pickup_time", sa.String(5), nullable=False),
        sa.Column("flight_number", sa.String(32), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email_address", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(32), nullable=False),
        sa.Column("additional_notes", sa.Text, nullable=False, server_default=""),
        sa.Column("locale", sa.String(2), nullable=False, server_default="en"),
        sa.Column("pending_price", sa.String(32), nullable=True),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        sa.Column("confirmation_token", sa.String(64), nullable=True),
        sa.Column("customer_access_token", sa.String(64), nullable=True),
        sa.Column("price_proposal_token", sa.String(64), nullable=True),
        sa.Column(
            "completion_reminder_sent_at",
            sa.DateTime(timezone=False),
            nullable=True,
        ),
        sa.Column(
            "customer_reminder_sent_at",
            sa.DateTime(timezone=False),
            nullable=True,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "uniq_orders_generated_id", "orders", ["generated_id"], unique=True
    )
    op.create_index("idx_orders_status", "orders", ["status"])
    op.create_index("idx_orders_date", "orders", ["date"])


def downgrade() -> None:
    op.drop_index("idx_orders_date", table_name="orders")
    op.drop_index("idx_orders_status", table_name="orders")
    op.drop_index("uniq_orders_generated_id", table_name="orders")
    op.drop_table("orders")
