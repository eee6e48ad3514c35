"""init

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("member_number", sa.String(length=32), nullable=True, unique=True),
        sa.Column("role", sa.String(length=16), nullable=False, server_default="member"),
        sa.Column("status", sa.String(length=24), nullable=False, server_default="pending_verification"),
        sa.Column("verified_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_status", "users", ["status"], unique=False)

    op.create_table(
        "savings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("balance", sa.Numeric(15, 2), nullable=False),
        sa.Column("description", sa.String(length=256), nullable=True),
        sa.Column("transaction_date", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
    )
    op.create_index("ix_savings_member_id", "savings", ["member_id"], unique=False)
    op.create_index("ix_savings_transaction_date", "savings", ["transaction_date"], unique=False)

    op.create_table(
        "loans",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("term_months", sa.Integer(), nullable=False),
        sa.Column("purpose", sa.String(length=256), nullable=True),
        sa.Column("interest_rate", sa.Numeric(5, 2), nullable=True),
        sa.Column("monthly_payment", sa.Numeric(15, 2), nullable=True),
        sa.Column("remaining_balance", sa.Numeric(15, 2), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("applied_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("approved_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("approval_notes", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.CheckConstraint("term_months >= 1", name="ck_loans_term_positive"),
    )
    op.create_index("ix_loans_member_id", "loans", ["member_id"], unique=False)
    op.create_index("ix_loans_status", "loans", ["status"], unique=False)
    op.create_index("ix_loans_applied_at", "loans", ["applied_at"], unique=False)

    op.create_table(
        "payment_schedules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("loan_id", sa.Integer(), sa.ForeignKey("loans.id", ondelete="CASCADE"), nullable=False),
        sa.Column("installment_number", sa.Integer(), nullable=False),
        sa.Column("due_date", sa.DateTime(), nullable=False),
        sa.Column("principal_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("interest_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("paid_amount", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("paid_date", sa.DateTime(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("late_fee", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.UniqueConstraint("loan_id", "installment_number", name="uq_payment_schedules_loan_number"),
    )
    op.create_index("ix_payment_schedules_loan_id", "payment_schedules", ["loan_id"], unique=False)
    op.create_index("ix_payment_schedules_due_date", "payment_schedules", ["due_date"], unique=False)

    op.create_table(
        "shu_calculations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("total_profit", sa.Numeric(15, 2), nullable=False),
        sa.Column("member_share_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("total_member_share", sa.Numeric(15, 2), nullable=False),
        sa.Column("calculated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("calculated_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("distributed", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_shu_calculations_year", "shu_calculations", ["year"], unique=True)

    op.create_table(
        "shu_distributions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "shu_calculation_id",
            sa.Integer(),
            sa.ForeignKey("shu_calculations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("savings_contribution", sa.Numeric(15, 2), nullable=False),
        sa.Column("loan_contribution", sa.Numeric(15, 2), nullable=False),
        sa.Column("share_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("distributed_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_shu_distributions_shu_calculation_id", "shu_distributions", ["shu_calculation_id"], unique=False)
    op.create_index("ix_shu_distributions_member_id", "shu_distributions", ["member_id"], unique=False)
    op.create_index(
        "ix_shu_distributions_calc_member", "shu_distributions", ["shu_calculation_id", "member_id"], unique=False
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(length=24), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("description", sa.String(length=256), nullable=False),
        sa.Column("reference_id", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
    )
    op.create_index("ix_transactions_member_id", "transactions", ["member_id"], unique=False)
    op.create_index("ix_transactions_created_at", "transactions", ["created_at"], unique=False)

def downgrade():
    op.drop_index("ix_transactions_created_at", table_name="transactions")
    op.drop_index("ix_transactions_member_id", table_name="transactions")
    op.drop_table("transactions")

    op.drop_index("ix_shu_distributions_calc_member", table_name="shu_distributions")
    op.drop_index("ix_shu_distributions_member_id", table_name="shu_distributions")
    op.drop_index("ix_shu_distributions_shu_calculation_id", table_name="shu_distributions")
    op.drop_table("shu_distributions")

    op.drop_index("ix_shu_calculations_year", table_name="shu_calculations")
    op.drop_table("shu_calculations")

    op.drop_index("ix_payment_schedules_due_date", table_name="payment_schedules")
    op.drop_index("ix_payment_schedules_loan_id", table_name="payment_schedules")
    op.drop_table("payment_schedules")

    op.drop_index("ix_loans_applied_at", table_name="loans")
    op.drop_index("ix_loans_status", table_name="loans")
    op.drop_index("ix_loans_member_id", table_name="loans")
    op.drop_table("loans")

    op.drop_index("ix_savings_transaction_date", table_name="savings")
    op.drop_index("ix_savings_member_id", table_name="savings")
    op.drop_table("savings")

    op.drop_index("ix_users_status", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
