"""
BAS Backend - API Router

Provides REST API endpoints for quarterly BAS figures:
- GET /api/bas/quarters/{year} - Quarter date ranges for a financial year
- GET /api/bas/{quarter}/{year} - BAS summary (G1, 1A, 1B, net GST, G10, G11)

Amounts are integer cents. The quarter is case-insensitive (q1 == Q1).
"""

from fastapi import APIRouter, Depends, Query
from typing import List
import logging

from bas.ledger_store import LedgerStore, get_ledger_store
from bas.schemas import AccountingBasis, BASSummary, QuarterRangeOut
from bas.service import BASSummaryService
from utils.validation_errors import InvalidArgumentError, to_http_exception

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/bas", tags=["BAS - Business Activity Statement"])


# ==================== ENDPOINTS ====================

@router.get("/quarters/{year}", response_model=List[QuarterRangeOut])
async def get_quarters(
    year: int,
    store: LedgerStore = Depends(get_ledger_store)
):
    """
    Get the four BAS quarters of a financial year.

    FY2026: Q1 2025-07-01..2025-09-30 through Q4 2026-04-01..2026-06-30
    """
    return BASSummaryService(store).get_quarters(year)


@router.get("/{quarter}/{year}", response_model=BASSummary)
async def get_bas_summary(
    quarter: str,
    year: int,
    basis: str = Query(AccountingBasis.ACCRUAL.value, description="Accounting basis: CASH or ACCRUAL"),
    store: LedgerStore = Depends(get_ledger_store)
):
    """
    Get the BAS summary for a quarter.

    - CASH: only paid invoices count towards G1 and 1A
    - ACCRUAL: all invoices count
    Purchases (1B) are never filtered by basis.
    """
    service = BASSummaryService(store)

    try:
        return await service.get_summary(quarter, year, basis)
    except InvalidArgumentError as e:
        logger.warning(f"Rejected BAS request {quarter}/{year} ({basis}): {e}")
        raise to_http_exception(e)
