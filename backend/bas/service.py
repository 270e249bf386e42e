"""
BAS Backend - Service Layer

Provides business logic for:
- Quarterly BAS summary (G1, 1A, 1B, net GST, G10/G11) under CASH or ACCRUAL basis
- Quarter date ranges for a financial year
- Full financial year summary (income, expenses by category, net profit)

All reads go through a LedgerStore. Independent aggregates are issued
concurrently and only combined once every read has completed. Read
failures propagate unchanged.
"""

import asyncio
import logging
from datetime import date
from typing import List, Union

from config import get_settings
from utils.validation_errors import InvalidArgumentError

from .fy_calendar import Quarter, fy_label, fy_range, parse_quarter, quarter_range, quarters_for_year
from .ledger_store import LedgerStore
from .schemas import (
    AccountingBasis, BASSummary, QuarterRangeOut,
    CategoryExpense, FYExpenseSummary, FYIncomeSummary, FYSummary,
)

logger = logging.getLogger(__name__)


# ATO labels carried by expense categories
CAPITAL_PURCHASES_LABEL = "G10"
NON_CAPITAL_PURCHASES_LABEL = "G11"


def parse_basis(value: Union[str, AccountingBasis]) -> AccountingBasis:
    """Parse an accounting basis case-insensitively."""
    normalized = str(value.value if isinstance(value, AccountingBasis) else value).strip().upper()
    try:
        return AccountingBasis(normalized)
    except ValueError:
        raise InvalidArgumentError(
            f'Invalid accounting basis "{value}". Must be CASH or ACCRUAL.',
            parameter="basis",
            value=value,
        ) from None


# ==================== BAS SUMMARY SERVICE ====================

class BASSummaryService:
    """Service for quarterly BAS figures"""

    def __init__(self, store: LedgerStore):
        self.store = store

    async def get_summary(
        self,
        quarter: Union[str, Quarter],
        financial_year: int,
        basis: Union[str, AccountingBasis] = AccountingBasis.ACCRUAL,
    ) -> BASSummary:
        """
        Build the BAS summary for a quarter.

        G1 and 1A follow the accounting basis (CASH counts paid invoices
        only). 1B is the business portion of GST on domestic purchases and
        is never filtered by basis.
        """
        parsed_quarter = parse_quarter(quarter)
        parsed_basis = parse_basis(basis)
        period = quarter_range(parsed_quarter, financial_year)

        income, expenses, capital, non_capital = await asyncio.gather(
            self.store.income_totals(period, paid_only=parsed_basis == AccountingBasis.CASH),
            self.store.expense_totals(period, domestic_only=True),
            self.store.purchases_by_bas_label(period, CAPITAL_PURCHASES_LABEL),
            self.store.purchases_by_bas_label(period, NON_CAPITAL_PURCHASES_LABEL),
        )

        summary = BASSummary(
            quarter=parsed_quarter,
            financial_year=financial_year,
            period_start=period.start_date,
            period_end=period.end_date,
            g1_total_sales_cents=income.total_cents,
            label1a_gst_collected_cents=income.gst_cents,
            label1b_gst_paid_cents=expenses.claimable_gst_cents,
            net_gst_payable_cents=income.gst_cents - expenses.claimable_gst_cents,
            g10_capital_purchases_cents=capital,
            g11_non_capital_purchases_cents=non_capital,
            income_count=income.count,
            expense_count=expenses.count,
            basis=parsed_basis,
        )

        logger.info(
            f"BAS summary {parsed_quarter.value} FY{financial_year} ({parsed_basis.value}): "
            f"net GST {summary.net_gst_payable_cents}c"
        )
        return summary

    def get_quarters(self, financial_year: int) -> List[QuarterRangeOut]:
        """The four BAS quarters of a financial year with their date ranges"""
        return [
            QuarterRangeOut(quarter=quarter, start=period.start_date, end=period.end_date)
            for quarter, period in quarters_for_year(financial_year)
        ]


# ==================== FY REPORT SERVICE ====================

class FYReportService:
    """Service for full financial year summaries"""

    def __init__(self, store: LedgerStore):
        self.store = store

    @staticmethod
    def validate_financial_year(financial_year: int, today: date) -> None:
        settings = get_settings()
        max_year = today.year + settings.FY_LOOKAHEAD_YEARS
        if not settings.MIN_FINANCIAL_YEAR <= financial_year <= max_year:
            raise InvalidArgumentError(
                f'Invalid financial year "{financial_year}". '
                f"Must be between {settings.MIN_FINANCIAL_YEAR} and {max_year}.",
                parameter="year",
                value=financial_year,
            )

    async def get_fy_summary(self, financial_year: int, today: date) -> FYSummary:
        """
        Summarise a financial year.

        Args:
            financial_year: FY number (FY2026 = 1 July 2025 to 30 June 2026)
            today: Reference date bounding the accepted years

        Returns:
            FYSummary with income, expense and per-category totals in cents
        """
        self.validate_financial_year(financial_year, today)
        period = fy_range(financial_year)

        income, paid_income, expenses, categories = await asyncio.gather(
            self.store.income_totals(period),
            self.store.income_totals(period, paid_only=True),
            self.store.expense_totals(period),
            self.store.expenses_by_category(period),
        )

        income_summary = FYIncomeSummary(
            total_income_cents=income.total_cents,
            paid_income_cents=paid_income.total_cents,
            unpaid_income_cents=income.total_cents - paid_income.total_cents,
            gst_collected_cents=income.gst_cents,
            count=income.count,
        )
        expense_summary = FYExpenseSummary(
            total_expenses_cents=expenses.amount_cents,
            gst_paid_cents=expenses.claimable_gst_cents,
            count=expenses.count,
            by_category=[
                CategoryExpense(
                    category_id=row.category_id,
                    name=row.name,
                    bas_label=row.bas_label,
                    total_cents=row.total_cents,
                    gst_cents=row.gst_cents,
                    count=row.count,
                )
                for row in categories
            ],
        )

        return FYSummary(
            financial_year=financial_year,
            fy_label=fy_label(financial_year),
            period_start=period.start_date,
            period_end=period.end_date,
            income=income_summary,
            expenses=expense_summary,
            net_profit_cents=income_summary.total_income_cents - expense_summary.total_expenses_cents,
            net_gst_payable_cents=income_summary.gst_collected_cents - expense_summary.gst_paid_cents,
        )
