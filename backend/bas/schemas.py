"""
BAS and FY Report Schemas

Response models handed to the HTTP layer and to report renderers. Field
names and cent-denominated values are a stable contract: attributes are
snake_case in Python and serialised camelCase on the wire
(g1_total_sales_cents -> g1TotalSalesCents).
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bas.fy_calendar import Quarter


class AccountingBasis(str, Enum):
    """
    CASH counts income when paid (is_paid set).
    ACCRUAL counts income when invoiced.
    Expenses are never filtered by basis.
    """
    CASH = "CASH"
    ACCRUAL = "ACCRUAL"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==================== BAS ====================

class BASSummary(CamelModel):
    """Quarterly BAS summary, all amounts in cents"""
    quarter: Quarter
    financial_year: int
    period_start: date
    period_end: date

    g1_total_sales_cents: int = Field(0, description="G1 - Total sales (GST inclusive)")
    label1a_gst_collected_cents: int = Field(0, alias="label1aGstCollectedCents", description="1A - GST on sales")
    label1b_gst_paid_cents: int = Field(0, alias="label1bGstPaidCents", description="1B - GST on purchases (business portion)")
    net_gst_payable_cents: int = Field(0, description="1A - 1B, negative means a refund")
    g10_capital_purchases_cents: int = Field(0, description="G10 - Capital purchases")
    g11_non_capital_purchases_cents: int = Field(0, description="G11 - Non-capital purchases")

    income_count: int = 0
    expense_count: int = 0
    basis: AccountingBasis = AccountingBasis.ACCRUAL


class QuarterRangeOut(CamelModel):
    quarter: Quarter
    start: date
    end: date


# ==================== FY REPORT ====================

class CategoryExpense(CamelModel):
    category_id: str
    name: str
    bas_label: Optional[str] = None
    total_cents: int = 0
    gst_cents: int = 0
    count: int = 0


class FYIncomeSummary(CamelModel):
    total_income_cents: int = 0
    paid_income_cents: int = 0
    unpaid_income_cents: int = 0
    gst_collected_cents: int = 0
    count: int = 0


class FYExpenseSummary(CamelModel):
    total_expenses_cents: int = 0
    gst_paid_cents: int = Field(0, description="Claimable GST on domestic purchases")
    count: int = 0
    by_category: List[CategoryExpense] = Field(default_factory=list)


class FYSummary(CamelModel):
    """Full financial year summary, all amounts in cents"""
    financial_year: int
    fy_label: str
    period_start: date
    period_end: date
    income: FYIncomeSummary
    expenses: FYExpenseSummary
    net_profit_cents: int = 0
    net_gst_payable_cents: int = 0
