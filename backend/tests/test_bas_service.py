"""
Unit Tests for the BAS summary service

The ledger store is mocked; the SQL side is covered in test_ledger_store.py.

Run with: pytest tests/test_bas_service.py -v
"""

import pytest
from datetime import date
from unittest.mock import AsyncMock

from bas.fy_calendar import DateRange, Quarter
from bas.ledger_store import ExpenseTotals, IncomeTotals
from bas.schemas import AccountingBasis
from bas.service import BASSummaryService, parse_basis
from utils.validation_errors import InvalidArgumentError


def make_store(income=None, expenses=None, capital=0, non_capital=0):
    store = AsyncMock()
    store.income_totals = AsyncMock(return_value=income or IncomeTotals())
    store.expense_totals = AsyncMock(return_value=expenses or ExpenseTotals())

    async def purchases(period, bas_label):
        return {"G10": capital, "G11": non_capital}[bas_label]

    store.purchases_by_bas_label = AsyncMock(side_effect=purchases)
    return store


class TestBASSummary:
    """BAS labels G1, 1A, 1B and net GST."""

    @pytest.mark.asyncio
    async def test_net_gst_payable(self):
        store = make_store(
            income=IncomeTotals(total_cents=110000, gst_cents=10000, count=2),
            expenses=ExpenseTotals(amount_cents=33000, claimable_gst_cents=3000, count=3),
        )

        summary = await BASSummaryService(store).get_summary("Q1", 2026)

        assert summary.g1_total_sales_cents == 110000
        assert summary.label1a_gst_collected_cents == 10000
        assert summary.label1b_gst_paid_cents == 3000
        assert summary.net_gst_payable_cents == 7000
        assert summary.income_count == 2
        assert summary.expense_count == 3

    @pytest.mark.asyncio
    async def test_refund_is_negative(self):
        store = make_store(
            income=IncomeTotals(total_cents=11000, gst_cents=1000, count=1),
            expenses=ExpenseTotals(amount_cents=55000, claimable_gst_cents=5000, count=1),
        )

        summary = await BASSummaryService(store).get_summary("Q2", 2026)

        assert summary.net_gst_payable_cents == -4000

    @pytest.mark.asyncio
    async def test_period_and_metadata(self):
        store = make_store()

        summary = await BASSummaryService(store).get_summary("q3", 2026, "cash")

        assert summary.quarter == Quarter.Q3
        assert summary.financial_year == 2026
        assert summary.period_start == date(2026, 1, 1)
        assert summary.period_end == date(2026, 3, 31)
        assert summary.basis == AccountingBasis.CASH

    @pytest.mark.asyncio
    async def test_cash_basis_filters_paid_income(self):
        store = make_store()

        await BASSummaryService(store).get_summary("Q1", 2026, "CASH")

        period = DateRange(date(2025, 7, 1), date(2025, 9, 30))
        store.income_totals.assert_awaited_once_with(period, paid_only=True)

    @pytest.mark.asyncio
    async def test_accrual_basis_is_default(self):
        store = make_store()

        summary = await BASSummaryService(store).get_summary("Q1", 2026)

        assert summary.basis == AccountingBasis.ACCRUAL
        _, kwargs = store.income_totals.call_args
        assert kwargs["paid_only"] is False

    @pytest.mark.asyncio
    async def test_expenses_never_filtered_by_basis(self):
        for basis in ("CASH", "ACCRUAL"):
            store = make_store()
            await BASSummaryService(store).get_summary("Q1", 2026, basis)

            _, kwargs = store.expense_totals.call_args
            assert kwargs == {"domestic_only": True}

    @pytest.mark.asyncio
    async def test_capital_and_non_capital_purchases(self):
        store = make_store(capital=250000, non_capital=12000)

        summary = await BASSummaryService(store).get_summary("Q4", 2026)

        assert summary.g10_capital_purchases_cents == 250000
        assert summary.g11_non_capital_purchases_cents == 12000

    @pytest.mark.asyncio
    async def test_empty_quarter_is_zero(self):
        summary = await BASSummaryService(make_store()).get_summary("Q1", 2026)

        assert summary.g1_total_sales_cents == 0
        assert summary.net_gst_payable_cents == 0
        assert summary.income_count == 0
        assert summary.expense_count == 0

    @pytest.mark.asyncio
    async def test_invalid_quarter_reads_nothing(self):
        store = make_store()

        with pytest.raises(InvalidArgumentError) as exc_info:
            await BASSummaryService(store).get_summary("Q5", 2026)

        assert 'Invalid quarter "Q5"' in str(exc_info.value)
        store.income_totals.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_basis(self):
        store = make_store()

        with pytest.raises(InvalidArgumentError) as exc_info:
            await BASSummaryService(store).get_summary("Q1", 2026, "HYBRID")

        assert 'Invalid accounting basis "HYBRID"' in str(exc_info.value)
        store.expense_totals.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_read_failure_propagates(self):
        store = make_store()
        store.income_totals.side_effect = ConnectionError("database unreachable")

        with pytest.raises(ConnectionError):
            await BASSummaryService(store).get_summary("Q1", 2026)

    @pytest.mark.asyncio
    async def test_camel_case_wire_names(self):
        summary = await BASSummaryService(make_store()).get_summary("Q1", 2026)

        payload = summary.model_dump(by_alias=True)
        assert "g1TotalSalesCents" in payload
        assert "label1aGstCollectedCents" in payload
        assert "netGstPayableCents" in payload


class TestQuartersAndBasis:

    def test_get_quarters(self):
        quarters = BASSummaryService(make_store()).get_quarters(2026)

        assert [q.quarter for q in quarters] == [Quarter.Q1, Quarter.Q2, Quarter.Q3, Quarter.Q4]
        assert quarters[0].start == date(2025, 7, 1)
        assert quarters[3].end == date(2026, 6, 30)

    @pytest.mark.parametrize("value,expected", [
        ("cash", AccountingBasis.CASH),
        ("Accrual", AccountingBasis.ACCRUAL),
        (AccountingBasis.CASH, AccountingBasis.CASH),
    ])
    def test_parse_basis(self, value, expected):
        assert parse_basis(value) == expected
