"""Balance validation: checks the aggregated running balance against the ledger.

The forecast builds its running balance in Python; the ledger computes the
same figure in SQL with a window function. Any day where the two disagree
by more than one cent points at data the forecast would misread.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

import structlog

from barber_finance.core.exceptions import InsufficientDataError
from barber_finance.services.cashflow_forecast import aggregate_daily_cashflow
from barber_finance.services.cashflow_source import CashflowSource

logger = structlog.get_logger()

TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class BalanceValidation:
    is_valid: bool
    differences: int
    max_difference: Decimal
    total_records: int


class BalanceValidationService:
    def __init__(self, source: CashflowSource):
        self.source = source

    async def validate(
        self,
        unit_id: str,
        account_id: str | None,
        days: int = 30,
        as_of: date | None = None,
    ) -> BalanceValidation:
        end = as_of or date.today()
        start = end - timedelta(days=days - 1)

        ledger = await self.source.fetch_ledger_balances(unit_id, account_id, start, end)
        if not ledger:
            return BalanceValidation(
                is_valid=True, differences=0, max_difference=Decimal("0"), total_records=0
            )

        entries = await self.source.fetch_entries(unit_id, account_id, start, end)
        opening = await self.source.get_opening_balance(unit_id, account_id, start)
        try:
            computed = {
                p.date: p.running_balance
                for p in aggregate_daily_cashflow(entries, start, end, opening)
            }
        except InsufficientDataError:
            # Ledger has rows but the entry query returned none: every day disagrees
            computed = {}

        differences = 0
        max_difference = Decimal("0")
        for row in ledger:
            expected = computed.get(row.date)
            difference = abs(row.balance - expected) if expected is not None else abs(row.balance)
            if difference > TOLERANCE:
                differences += 1
                max_difference = max(max_difference, difference)

        result = BalanceValidation(
            is_valid=differences == 0,
            differences=differences,
            max_difference=max_difference,
            total_records=len(ledger),
        )
        logger.info(
            "Accumulated balance validation finished",
            unit_id=unit_id,
            account_id=account_id,
            is_valid=result.is_valid,
            differences=differences,
            max_difference=float(max_difference),
            total_records=len(ledger),
        )
        return result
