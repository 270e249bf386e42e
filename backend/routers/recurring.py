from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import date
import logging

from database import get_db
from services.recurring_expenses import (
    RecurringExpenseService,
    RecurringExpense,
    RecurringExpenseCreate,
    RecurringExpenseUpdate,
    GenerateExpensesResult,
)
from utils.clock import business_today
from utils.validation_errors import InvalidArgumentError, NotFoundError, to_http_exception

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recurring-expenses", tags=["Recurring Expenses"])


# ==================== TEMPLATE MANAGEMENT ====================

@router.post("", response_model=RecurringExpense, status_code=status.HTTP_201_CREATED)
async def create_recurring_expense(
    data: RecurringExpenseCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Create a recurring expense template.

    GST is forced to 0 for international providers and calculated as 1/11 of
    the amount for domestic providers when not supplied.
    """
    try:
        return await RecurringExpenseService(db).create(data)
    except (InvalidArgumentError, NotFoundError) as e:
        raise to_http_exception(e)


@router.get("", response_model=List[RecurringExpense])
async def list_recurring_expenses(
    active_only: bool = Query(False, description="Only return active templates"),
    db: AsyncSession = Depends(get_db)
):
    """List recurring expense templates ordered by name."""
    return await RecurringExpenseService(db).list_templates(active_only=active_only)


# ==================== GENERATION ====================

@router.get("/due", response_model=List[RecurringExpense])
async def list_due_recurring_expenses(
    as_of_date: Optional[date] = Query(None, description="Reference date (defaults to today)"),
    db: AsyncSession = Depends(get_db)
):
    """Active templates due on or before the reference date."""
    return await RecurringExpenseService(db).find_due(as_of_date or business_today())


@router.post("/generate", response_model=GenerateExpensesResult)
async def generate_recurring_expenses(
    as_of_date: Optional[date] = Query(None, description="Reference date (defaults to today)"),
    db: AsyncSession = Depends(get_db)
):
    """
    Generate expenses for every due template.

    Each template yields at most one expense per due date, however many
    times this is called.
    """
    return await RecurringExpenseService(db).generate_expenses(as_of_date or business_today())


# ==================== SINGLE TEMPLATE ====================

@router.get("/{template_id}", response_model=RecurringExpense)
async def get_recurring_expense(
    template_id: str,
    db: AsyncSession = Depends(get_db)
):
    try:
        return await RecurringExpenseService(db).get_template(template_id)
    except NotFoundError as e:
        raise to_http_exception(e)


@router.patch("/{template_id}", response_model=RecurringExpense)
async def update_recurring_expense(
    template_id: str,
    patch: RecurringExpenseUpdate,
    db: AsyncSession = Depends(get_db)
):
    """
    Update a recurring expense template.

    Changing the schedule, day of month or start date recalculates the next
    due date.
    """
    try:
        return await RecurringExpenseService(db).update(template_id, patch)
    except (InvalidArgumentError, NotFoundError) as e:
        raise to_http_exception(e)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recurring_expense(
    template_id: str,
    db: AsyncSession = Depends(get_db)
):
    try:
        await RecurringExpenseService(db).delete(template_id)
    except NotFoundError as e:
        raise to_http_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
