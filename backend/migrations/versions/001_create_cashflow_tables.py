"""Create units, professionals, bank_accounts, revenues, expenses tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def _ledger_columns() -> list[sa.Column]:
    return [
        sa.Column("id", UUID(as_uuid=False), nullable=False),
        sa.Column("unit_id", UUID(as_uuid=False), sa.ForeignKey("units.id"), nullable=False),
        sa.Column("account_id", UUID(as_uuid=False), sa.ForeignKey("bank_accounts.id"), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("value", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("status", sa.String(20), server_default="Pending", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    ]


def upgrade() -> None:
    # ── Units ─────────────────────────────────────────
    op.create_table(
        "units",
        sa.Column("id", UUID(as_uuid=False), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    # ── Professionals ─────────────────────────────────
    op.create_table(
        "professionals",
        sa.Column("id", UUID(as_uuid=False), nullable=False),
        sa.Column("user_id", UUID(as_uuid=False), nullable=False),
        sa.Column("unit_id", UUID(as_uuid=False), sa.ForeignKey("units.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(30), server_default="barbeiro", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_professionals_user_id", "professionals", ["user_id"])
    op.create_index("ix_professionals_unit_id", "professionals", ["unit_id"])

    # ── Bank accounts ─────────────────────────────────
    op.create_table(
        "bank_accounts",
        sa.Column("id", UUID(as_uuid=False), nullable=False),
        sa.Column("unit_id", UUID(as_uuid=False), sa.ForeignKey("units.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("bank_name", sa.String(255), nullable=True),
        sa.Column("initial_balance", sa.Numeric(12, 2), server_default="0.00", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bank_accounts_unit_id", "bank_accounts", ["unit_id"])

    # ── Revenues / Expenses ───────────────────────────
    op.create_table("revenues", *_ledger_columns())
    op.create_index("idx_revenues_unit_date", "revenues", ["unit_id", "date"])

    op.create_table("expenses", *_ledger_columns())
    op.create_index("idx_expenses_unit_date", "expenses", ["unit_id", "date"])


def downgrade() -> None:
    op.drop_index("idx_expenses_unit_date", table_name="expenses")
    op.drop_table("expenses")
    op.drop_index("idx_revenues_unit_date", table_name="revenues")
    op.drop_table("revenues")
    op.drop_index("ix_bank_accounts_unit_id", table_name="bank_accounts")
    op.drop_table("bank_accounts")
    op.drop_index("ix_professionals_unit_id", table_name="professionals")
    op.drop_index("ix_professionals_user_id", table_name="professionals")
    op.drop_table("professionals")
    op.drop_table("units")
