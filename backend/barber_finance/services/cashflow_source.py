"""Cash-flow data source: revenue and expense rows for a unit.

The forecast pipeline only talks to the ``CashflowSource`` interface, so tests
can hand it an in-memory source instead of a database session.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import func, literal, select, union_all
from sqlalchemy.ext.asyncio import AsyncSession

from barber_finance.models.bank_account import BankAccount
from barber_finance.models.ledger import EXPENSE_PAID, REVENUE_RECEIVED, Expense, Revenue


class EntryType(str, Enum):
    REVENUE = "revenue"
    EXPENSE = "expense"


@dataclass(frozen=True)
class CashflowEntry:
    """One settled revenue or expense."""
    date: date
    value: Decimal
    type: EntryType

    @property
    def signed_value(self) -> Decimal:
        return self.value if self.type == EntryType.REVENUE else -self.value


@dataclass(frozen=True)
class LedgerBalance:
    """Running balance at the end of a day that had transactions."""
    date: date
    balance: Decimal


class CashflowSource(ABC):
    """Query capability over settled revenues and expenses."""

    @abstractmethod
    async def fetch_entries(
        self, unit_id: str, account_id: str | None, start: date, end: date
    ) -> list[CashflowEntry]:
        """Entries dated within ``[start, end]``, optionally for one account."""

    @abstractmethod
    async def get_opening_balance(
        self, unit_id: str, account_id: str | None, before: date
    ) -> Decimal:
        """Balance at the start of ``before`` (zero when nothing is known)."""

    @abstractmethod
    async def fetch_ledger_balances(
        self, unit_id: str, account_id: str | None, start: date, end: date
    ) -> list[LedgerBalance]:
        """Running balance per transaction day, computed by the store itself."""


class SqlCashflowSource(CashflowSource):
    def __init__(self, db: AsyncSession):
        self.db = db

    def _revenue_filters(self, unit_id: str, account_id: str | None) -> list:
        clauses = [
            Revenue.unit_id == unit_id,
            Revenue.is_active.is_(True),
            Revenue.status == REVENUE_RECEIVED,
        ]
        if account_id:
            clauses.append(Revenue.account_id == account_id)
        return clauses

    def _expense_filters(self, unit_id: str, account_id: str | None) -> list:
        clauses = [
            Expense.unit_id == unit_id,
            Expense.is_active.is_(True),
            Expense.status == EXPENSE_PAID,
        ]
        if account_id:
            clauses.append(Expense.account_id == account_id)
        return clauses

    def _signed_flows(
        self, unit_id: str, account_id: str | None, revenue_dates: list, expense_dates: list
    ):
        """UNION ALL of revenues (+value) and expenses (-value) as (day, amount)."""
        revenues = select(
            Revenue.date.label("day"), Revenue.value.label("amount")
        ).where(*self._revenue_filters(unit_id, account_id), *revenue_dates)
        expenses = select(
            Expense.date.label("day"), (-Expense.value).label("amount")
        ).where(*self._expense_filters(unit_id, account_id), *expense_dates)
        return union_all(revenues, expenses).subquery("flows")

    async def fetch_entries(
        self, unit_id: str, account_id: str | None, start: date, end: date
    ) -> list[CashflowEntry]:
        revenue_query = (
            select(Revenue.date, Revenue.value, literal(EntryType.REVENUE.value).label("type"))
            .where(*self._revenue_filters(unit_id, account_id), Revenue.date.between(start, end))
        )
        expense_query = (
            select(Expense.date, Expense.value, literal(EntryType.EXPENSE.value).label("type"))
            .where(*self._expense_filters(unit_id, account_id), Expense.date.between(start, end))
        )
        result = await self.db.execute(union_all(revenue_query, expense_query))
        entries = [
            CashflowEntry(date=row.date, value=Decimal(row.value or 0), type=EntryType(row.type))
            for row in result.all()
        ]
        entries.sort(key=lambda e: e.date)
        return entries

    async def get_opening_balance(
        self, unit_id: str, account_id: str | None, before: date
    ) -> Decimal:
        """Initial balances of the bank accounts plus every flow before ``before``."""
        accounts_query = select(func.coalesce(func.sum(BankAccount.initial_balance), 0)).where(
            BankAccount.unit_id == unit_id,
            BankAccount.is_active.is_(True),
        )
        if account_id:
            accounts_query = accounts_query.where(BankAccount.id == account_id)
        initial = (await self.db.execute(accounts_query)).scalar() or Decimal("0")

        flows = self._signed_flows(
            unit_id, account_id, [Revenue.date < before], [Expense.date < before]
        )
        prior = (
            await self.db.execute(select(func.coalesce(func.sum(flows.c.amount), 0)))
        ).scalar() or Decimal("0")

        return Decimal(initial) + Decimal(prior)

    async def fetch_ledger_balances(
        self, unit_id: str, account_id: str | None, start: date, end: date
    ) -> list[LedgerBalance]:
        opening = await self.get_opening_balance(unit_id, account_id, start)

        flows = self._signed_flows(
            unit_id,
            account_id,
            [Revenue.date.between(start, end)],
            [Expense.date.between(start, end)],
        )
        daily = (
            select(flows.c.day, func.sum(flows.c.amount).label("net"))
            .group_by(flows.c.day)
            .subquery("daily")
        )
        query = select(
            daily.c.day,
            func.sum(daily.c.net).over(order_by=daily.c.day).label("cumulative"),
        ).order_by(daily.c.day)

        result = await self.db.execute(query)
        return [
            LedgerBalance(date=row.day, balance=opening + Decimal(row.cumulative))
            for row in result.all()
        ]
