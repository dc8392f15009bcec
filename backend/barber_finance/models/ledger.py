"""Revenue and Expense models."""

import datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from barber_finance.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

REVENUE_RECEIVED = "Received"
EXPENSE_PAID = "Paid"


class Revenue(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "revenues"

    unit_id: Mapped[str] = mapped_column(ForeignKey("units.id"), nullable=False)
    account_id: Mapped[str | None] = mapped_column(ForeignKey("bank_accounts.id"), nullable=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="Pending")  # Pending, Received, Cancelled
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    __table_args__ = (
        Index("idx_revenues_unit_date", "unit_id", "date"),
    )


class Expense(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "expenses"

    unit_id: Mapped[str] = mapped_column(ForeignKey("units.id"), nullable=False)
    account_id: Mapped[str | None] = mapped_column(ForeignKey("bank_accounts.id"), nullable=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="Pending")  # Pending, Paid, Cancelled
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    __table_args__ = (
        Index("idx_expenses_unit_date", "unit_id", "date"),
    )
