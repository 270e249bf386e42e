"""
Reports API Router

- GET /api/reports/fy/{year} - Financial year summary (income, expenses by category, net profit)
"""

from fastapi import APIRouter, Depends
import logging

from bas.ledger_store import LedgerStore, get_ledger_store
from bas.schemas import FYSummary
from bas.service import FYReportService
from utils.clock import business_today
from utils.validation_errors import InvalidArgumentError, to_http_exception

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/fy/{year}", response_model=FYSummary)
async def get_fy_summary(
    year: int,
    store: LedgerStore = Depends(get_ledger_store)
):
    """
    Get the summary for a financial year.

    Accepts years from 2000 up to two years past the current calendar year
    (Australia/Sydney).
    """
    service = FYReportService(store)

    try:
        return await service.get_fy_summary(year, today=business_today())
    except InvalidArgumentError as e:
        raise to_http_exception(e)
