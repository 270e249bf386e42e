"""
BAS Backend Module

Provides the tax period and ledger calculation engine:
- Australian financial year / BAS quarter calendar
- Fixed-point money and GST arithmetic (integer cents)
- Quarterly BAS summaries under CASH or ACCRUAL basis
- Full financial year summaries

Module Structure:
- fy_calendar.py: FY and quarter mapping
- bas_calculator.py: GST/money arithmetic
- ledger_store.py: Ledger read interface and SQLAlchemy implementation
- schemas.py: Pydantic response models
- service.py: Business logic layer
"""

from .fy_calendar import Quarter, DateRange, financial_year_of, quarter_of, quarter_range, fy_range
from .ledger_store import LedgerStore, SqlLedgerStore, get_ledger_store
from .schemas import AccountingBasis, BASSummary, FYSummary
from .service import BASSummaryService, FYReportService

__all__ = [
    # Calendar
    "Quarter",
    "DateRange",
    "financial_year_of",
    "quarter_of",
    "quarter_range",
    "fy_range",
    # Ledger store
    "LedgerStore",
    "SqlLedgerStore",
    "get_ledger_store",
    # Schemas
    "AccountingBasis",
    "BASSummary",
    "FYSummary",
    # Services
    "BASSummaryService",
    "FYReportService",
]
