"""
Ledger Store - read side of the ledger used by BAS and FY reports

LedgerStore is the narrow interface the aggregation services depend on:
range filters, boolean filters, sums, counts and group-by on category.
SqlLedgerStore satisfies it with SQLAlchemy aggregate queries.

Claimable GST is always computed per row as
    FLOOR(gst_cents * biz_percent / 100)
over domestic-provider rows, which is the same figure
bas_calculator.claimable_gst() produces for a single expense.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import and_, case, desc, func, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from bas.fy_calendar import DateRange
from database.connection import get_session_factory
from database.ledger_models import CategoryDB, ExpenseDB, IncomeDB, ProviderDB

logger = logging.getLogger(__name__)


# ==================== RESULT TYPES ====================

@dataclass(frozen=True)
class IncomeTotals:
    total_cents: int = 0
    gst_cents: int = 0
    count: int = 0


@dataclass(frozen=True)
class ExpenseTotals:
    amount_cents: int = 0
    claimable_gst_cents: int = 0
    count: int = 0


@dataclass(frozen=True)
class CategoryTotals:
    category_id: str
    name: str
    bas_label: Optional[str]
    total_cents: int = 0
    gst_cents: int = 0
    count: int = 0


# ==================== INTERFACE ====================

class LedgerStore(ABC):
    """Aggregate reads over income and expense rows within a date range"""

    @abstractmethod
    async def income_totals(self, period: DateRange, paid_only: bool = False) -> IncomeTotals:
        """Sum of total_cents and gst_cents plus row count, optionally paid rows only."""

    @abstractmethod
    async def expense_totals(self, period: DateRange, domestic_only: bool = False) -> ExpenseTotals:
        """
        Sum of amount_cents and row count, optionally domestic-provider rows only.

        claimable_gst_cents only ever includes domestic rows, whatever the
        row filter.
        """

    @abstractmethod
    async def expenses_by_category(self, period: DateRange) -> List[CategoryTotals]:
        """Expense totals grouped by category, largest total first."""

    @abstractmethod
    async def purchases_by_bas_label(self, period: DateRange, bas_label: str) -> int:
        """Sum of amount_cents for expenses whose category carries bas_label."""


# ==================== SQLALCHEMY IMPLEMENTATION ====================

_is_domestic = ProviderDB.is_international.is_(False)

_claimable_gst = case(
    (_is_domestic, (ExpenseDB.gst_cents * ExpenseDB.biz_percent) // 100),
    else_=0,
)


def _sum(column):
    return func.coalesce(func.sum(column), 0)


class SqlLedgerStore(LedgerStore):
    """
    Ledger reads through SQLAlchemy.

    Each query opens its own session so the BAS and FY services can issue
    independent aggregates concurrently.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def _fetch_one(self, stmt):
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return result.one()

    async def _fetch_all(self, stmt):
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return result.all()

    async def income_totals(self, period: DateRange, paid_only: bool = False) -> IncomeTotals:
        conditions = [
            IncomeDB.date >= period.start_date,
            IncomeDB.date <= period.end_date,
        ]
        if paid_only:
            conditions.append(IncomeDB.is_paid.is_(True))

        stmt = select(
            _sum(IncomeDB.total_cents),
            _sum(IncomeDB.gst_cents),
            func.count(IncomeDB.id),
        ).where(and_(*conditions))

        total, gst, count = await self._fetch_one(stmt)
        return IncomeTotals(total_cents=int(total), gst_cents=int(gst), count=int(count))

    async def expense_totals(self, period: DateRange, domestic_only: bool = False) -> ExpenseTotals:
        conditions = [
            ExpenseDB.date >= period.start_date,
            ExpenseDB.date <= period.end_date,
        ]
        if domestic_only:
            conditions.append(_is_domestic)

        stmt = (
            select(
                _sum(ExpenseDB.amount_cents),
                _sum(_claimable_gst),
                func.count(ExpenseDB.id),
            )
            .select_from(ExpenseDB)
            .join(ProviderDB, ExpenseDB.provider_id == ProviderDB.id)
            .where(and_(*conditions))
        )

        amount, claimable, count = await self._fetch_one(stmt)
        return ExpenseTotals(
            amount_cents=int(amount),
            claimable_gst_cents=int(claimable),
            count=int(count),
        )

    async def expenses_by_category(self, period: DateRange) -> List[CategoryTotals]:
        total = _sum(ExpenseDB.amount_cents).label("total_cents")
        stmt = (
            select(
                CategoryDB.id,
                CategoryDB.name,
                CategoryDB.bas_label,
                total,
                _sum(_claimable_gst).label("gst_cents"),
                func.count(ExpenseDB.id).label("expense_count"),
            )
            .select_from(ExpenseDB)
            .join(CategoryDB, ExpenseDB.category_id == CategoryDB.id)
            .join(ProviderDB, ExpenseDB.provider_id == ProviderDB.id)
            .where(
                ExpenseDB.date >= period.start_date,
                ExpenseDB.date <= period.end_date,
            )
            .group_by(CategoryDB.id, CategoryDB.name, CategoryDB.bas_label)
            .order_by(desc("total_cents"), CategoryDB.name)
        )

        rows = await self._fetch_all(stmt)
        return [
            CategoryTotals(
                category_id=row.id,
                name=row.name,
                bas_label=row.bas_label,
                total_cents=int(row.total_cents),
                gst_cents=int(row.gst_cents),
                count=int(row.expense_count),
            )
            for row in rows
        ]

    async def purchases_by_bas_label(self, period: DateRange, bas_label: str) -> int:
        stmt = (
            select(_sum(ExpenseDB.amount_cents))
            .select_from(ExpenseDB)
            .join(CategoryDB, ExpenseDB.category_id == CategoryDB.id)
            .where(
                ExpenseDB.date >= period.start_date,
                ExpenseDB.date <= period.end_date,
                CategoryDB.bas_label == bas_label,
            )
        )

        (total,) = await self._fetch_one(stmt)
        return int(total)


def get_ledger_store() -> LedgerStore:
    """Dependency to get the ledger store"""
    return SqlLedgerStore(get_session_factory())
