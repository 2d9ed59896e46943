"""Initial schema: roster, households, fees, fines, payments, notifications, audit log.

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-11-12 13:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

OBLIGATION_STATUS = sa.Enum("PENDING", "PAID", "OVERDUE", native_enum=False)
FEE_FREQUENCY = sa.Enum("MONTHLY", "QUARTERLY", "ANNUALLY", "ONE_TIME", native_enum=False)
PAYMENT_METHOD = sa.Enum("VENMO", "CHECK", "CASH", native_enum=False)
VERIFICATION_STATUS = sa.Enum("PENDING", "VERIFIED", "REJECTED", native_enum=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
    ]


def upgrade() -> None:
    # Households: one row per distinct address + unit
    op.create_table(
        "households",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("key", sa.String(length=300), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.Column("unit_number", sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_households_key", "households", ["key"], unique=True)

    # Members
    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("telegram_id", sa.String(length=50), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.Column("unit_number", sa.String(length=50), nullable=True),
        sa.Column("household_id", sa.Integer(), nullable=True),
        sa.Column("is_resident", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("is_renter", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("is_board_member", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("is_blocked", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("block_reason", sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["household_id"], ["households.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("idx_member_email", "members", ["email"], unique=True)
    op.create_index("idx_member_board_active", "members", ["is_board_member", "is_active"])
    op.create_index("ix_members_household_id", "members", ["household_id"])
    op.create_index("ix_members_is_active", "members", ["is_active"])

    # Fees
    op.create_table(
        "fees",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("frequency", FEE_FREQUENCY, nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("is_late", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("address", sa.String(length=300), nullable=True),
        sa.Column("household_id", sa.Integer(), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("reason", sa.String(length=500), nullable=True),
        sa.Column("type", sa.String(length=20), nullable=True),
        sa.Column("status", OBLIGATION_STATUS, nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["household_id"], ["households.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_fees_user_id", "fees", ["user_id"])
    op.create_index("ix_fees_household_id", "fees", ["household_id"])
    op.create_index("idx_fee_type", "fees", ["type"])
    op.create_index("idx_fee_address_year_frequency", "fees", ["address", "year", "frequency"])

    # Fines
    op.create_table(
        "fines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("violation", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("date_issued", sa.Date(), nullable=False),
        sa.Column("status", OBLIGATION_STATUS, nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("resident_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_fines_resident_id", "fines", ["resident_id"])

    # Payments
    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("fee_type", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("status", OBLIGATION_STATUS, nullable=False),
        sa.Column("payment_method", PAYMENT_METHOD, nullable=False),
        sa.Column("transaction_id", sa.String(length=255), nullable=False),
        sa.Column("channel_username", sa.String(length=255), nullable=True),
        sa.Column("channel_transaction_id", sa.String(length=255), nullable=True),
        sa.Column("check_number", sa.String(length=50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("receipt_ref", sa.String(length=500), nullable=True),
        sa.Column("verification_status", VERIFICATION_STATUS, nullable=True),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("fee_id", sa.Integer(), nullable=True),
        sa.Column("fine_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["fee_id"], ["fees.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["fine_id"], ["fines.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payments_user_id", "payments", ["user_id"])
    op.create_index("ix_payments_payment_date", "payments", ["payment_date"])
    op.create_index("ix_payments_fee_id", "payments", ["fee_id"])
    op.create_index("ix_payments_fine_id", "payments", ["fine_id"])
    op.create_index("idx_payment_transaction", "payments", ["transaction_id"])
    op.create_index("idx_payment_user_date", "payments", ["user_id", "payment_date"])

    # In-app notifications
    op.create_table(
        "user_notifications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_notifications_user_id", "user_notifications", ["user_id"])
    op.create_index("idx_notification_user_unread", "user_notifications", ["user_id", "is_read"])

    # Audit log
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("entity_type", sa.String(), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("changes", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["actor_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("user_notifications")
    op.drop_table("payments")
    op.drop_table("fines")
    op.drop_table("fees")
    op.drop_table("members")
    op.drop_table("households")
