"""Unit (barbershop) and Professional models."""

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from barber_finance.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Unit(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "units"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Relationships
    professionals = relationship("Professional", back_populates="unit", lazy="select")
    bank_accounts = relationship("BankAccount", back_populates="unit", lazy="select")


class Professional(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Links an auth user to the unit they work in; drives unit access."""

    __tablename__ = "professionals"

    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False, index=True)
    unit_id: Mapped[str] = mapped_column(ForeignKey("units.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(30), default="barbeiro")  # administrador, gerente, barbeiro
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    unit = relationship("Unit", back_populates="professionals")
