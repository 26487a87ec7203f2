"""Create credits, recharge, admin and verification code tables

Revision ID: 3c1f5a9e2b7d
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3c1f5a9e2b7d"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
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
    ]


def upgrade() -> None:
    op.create_table(
        "user_credits",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("total_credits", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "remaining_credits", sa.Integer(), nullable=False, server_default="0"
        ),
        *_timestamps(),
        sa.CheckConstraint("remaining_credits >= 0", name="ck_user_credits_remaining"),
        sa.CheckConstraint("total_credits >= 0", name="ck_user_credits_total"),
    )
    op.create_index(
        "ix_user_credits_user_id", "user_credits", ["user_id"], unique=True
    )
    op.create_index("ix_user_credits_email", "user_credits", ["email"])

    op.create_table(
        "recharge_records",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column(
            "payment_method", sa.String(), nullable=False, server_default="wechat"
        ),
        sa.Column("payment_screenshot_url", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("admin_id", sa.UUID(), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("amount > 0", name="ck_recharge_records_amount"),
    )
    op.create_index("ix_recharge_records_user_id", "recharge_records", ["user_id"])
    op.create_index("ix_recharge_records_status", "recharge_records", ["status"])
    op.create_index(
        "ix_recharge_records_created_at", "recharge_records", ["created_at"]
    )

    op.create_table(
        "credit_transactions",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("transaction_type", sa.String(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("created_by", sa.UUID(), nullable=False),
        sa.Column(
            "recharge_id",
            sa.UUID(),
            sa.ForeignKey("recharge_records.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )
    op.create_index(
        "ix_credit_transactions_user_id", "credit_transactions", ["user_id"]
    )
    op.create_index(
        "ix_credit_transactions_created_at", "credit_transactions", ["created_at"]
    )

    op.create_table(
        "admin_users",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("privilege", sa.String(), nullable=False, server_default="admin"),
        sa.Column("payment_qr_code_url", sa.String(), nullable=True),
        sa.Column("recharge_instructions", sa.Text(), nullable=True),
        sa.Column("contact_email", sa.String(), nullable=True),
        sa.Column("contact_phone", sa.String(), nullable=True),
        sa.Column(
            "system_settings", sa.JSON(), nullable=False, server_default=sa.text("'{}'")
        ),
        sa.Column(
            "auto_approve_recharges",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column("recharge_approval_threshold", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_admin_users_user_id", "admin_users", ["user_id"], unique=True)

    op.create_table(
        "email_verification_codes",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("code", sa.String(length=6), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )
    op.create_index(
        "ix_email_verification_codes_email", "email_verification_codes", ["email"]
    )
    op.create_index(
        "ix_email_verification_codes_created_at",
        "email_verification_codes",
        ["created_at"],
    )


def downgrade() -> None:
    op.drop_table("email_verification_codes")
    op.drop_table("admin_users")
    op.drop_table("credit_transactions")
    op.drop_table("recharge_records")
    op.drop_table("user_credits")
