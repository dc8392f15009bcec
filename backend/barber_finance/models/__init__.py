"""SQLAlchemy models."""

from barber_finance.models.bank_account import BankAccount
from barber_finance.models.base import Base
from barber_finance.models.ledger import Expense, Revenue
from barber_finance.models.unit import Professional, Unit

__all__ = [
    "Base",
    "Unit",
    "Professional",
    "BankAccount",
    "Revenue",
    "Expense",
]
