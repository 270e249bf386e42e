"""
Recurring Expense Engine for the Sole Trader Ledger

Handles recurring expense templates (rent, subscriptions, insurance...) and
the generation of ledger expenses from them.

Schedule rules (day_of_month is limited to 1-28 so every month has the day):
- Never generated: the first due date is day_of_month in the start month,
  pushed one period later if that day is before the start date
- Generated before: one period after the last generated date

Generation is atomic per template: the expense insert and the template's
advance (last_generated_date, next_due_date) commit together, under a row
lock and a compare-and-set on the due date that was read. Running the
generator twice for the same as-of date never creates two expenses for the
same due date.

Schedule Examples:
- start 2025-07-20, monthly, day 15          -> first due 2025-08-15
- last generated 2025-07-15, quarterly, day 15 -> next due 2025-10-15
"""

import logging
from datetime import date, datetime
from typing import List, Optional, Union

from dateutil.relativedelta import relativedelta
from pydantic import Field
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bas.bas_calculator import gst_from_inclusive_total
from bas.schemas import CamelModel
from database.ledger_models import (
    CategoryDB, ExpenseDB, ProviderDB, RecurringExpenseDB, RecurringSchedule,
    generate_uuid, utc_now,
)
from utils.validation_errors import InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)


AUTO_GENERATED_SUFFIX = " - Auto-generated"

_SCHEDULE_PERIODS = {
    RecurringSchedule.MONTHLY: relativedelta(months=1),
    RecurringSchedule.QUARTERLY: relativedelta(months=3),
    RecurringSchedule.YEARLY: relativedelta(years=1),
}


# ==================== MODELS ====================

class RecurringExpenseCreate(CamelModel):
    """Create a recurring expense template"""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    amount_cents: int = Field(..., ge=1, description="GST-inclusive amount in cents")
    gst_cents: Optional[int] = Field(None, ge=0, description="Calculated from the amount when omitted")
    biz_percent: int = Field(100, ge=0, le=100)
    currency: str = Field("AUD", min_length=3, max_length=3)
    schedule: RecurringSchedule
    day_of_month: int = Field(1, ge=1, le=28)
    start_date: date
    end_date: Optional[date] = None
    is_active: bool = True
    provider_id: str
    category_id: str


class RecurringExpenseUpdate(CamelModel):
    """Update a recurring expense template (only fields sent are applied)"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    amount_cents: Optional[int] = Field(None, ge=1)
    gst_cents: Optional[int] = Field(None, ge=0)
    biz_percent: Optional[int] = Field(None, ge=0, le=100)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    schedule: Optional[RecurringSchedule] = None
    day_of_month: Optional[int] = Field(None, ge=1, le=28)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None
    provider_id: Optional[str] = None
    category_id: Optional[str] = None


class RecurringExpense(CamelModel):
    """Recurring expense template"""
    id: str
    name: str
    description: Optional[str] = None
    amount_cents: int
    gst_cents: int
    biz_percent: int
    currency: str
    schedule: RecurringSchedule
    day_of_month: int
    start_date: date
    end_date: Optional[date] = None
    is_active: bool
    last_generated_date: Optional[date] = None
    next_due_date: date
    provider_id: str
    provider_name: Optional[str] = None
    category_id: str
    category_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GeneratedExpenseDetail(CamelModel):
    """One expense created from a template"""
    recurring_expense_id: str
    recurring_expense_name: str
    expense_id: str
    date: date
    amount_cents: int


class GenerateExpensesResult(CamelModel):
    """Result of a generation run"""
    generated: int = 0
    skipped: int = 0
    expense_ids: List[str] = Field(default_factory=list)
    details: List[GeneratedExpenseDetail] = Field(default_factory=list)


# ==================== SCHEDULE UTILITIES ====================

def add_schedule_period(value: date, schedule: Union[str, RecurringSchedule]) -> date:
    """Advance a date by one schedule period (1, 3 or 12 months)"""
    return value + _SCHEDULE_PERIODS[RecurringSchedule(schedule)]


def calculate_next_due_date(
    start_date: date,
    schedule: Union[str, RecurringSchedule],
    day_of_month: int,
    last_generated_date: Optional[date] = None,
) -> date:
    """
    Next due date for a template.

    Args:
        start_date: First date the template may fall due
        schedule: monthly, quarterly or yearly
        day_of_month: Day the expense falls on (1-28)
        last_generated_date: Date of the last generated expense, if any
    """
    if not 1 <= day_of_month <= 28:
        raise InvalidArgumentError(
            f"Day of month must be between 1 and 28 (got {day_of_month})",
            parameter="day_of_month",
            value=day_of_month,
        )

    if last_generated_date is None:
        candidate = start_date.replace(day=day_of_month)
        if candidate < start_date:
            candidate = add_schedule_period(candidate, schedule)
        return candidate

    return add_schedule_period(last_generated_date.replace(day=day_of_month), schedule)


def validate_gst(gst_cents: int, amount_cents: int) -> None:
    if gst_cents > amount_cents:
        raise InvalidArgumentError(
            "GST cannot exceed the total amount",
            parameter="gst_cents",
            value=gst_cents,
        )


def validate_date_range(start_date: date, end_date: Optional[date]) -> None:
    if end_date is not None and end_date <= start_date:
        raise InvalidArgumentError(
            "End date must be after start date",
            parameter="end_date",
            value=end_date,
        )


# ==================== RECURRING EXPENSE SERVICE ====================

class RecurringExpenseService:
    """
    Template CRUD and expense generation.

    Usage:
        service = RecurringExpenseService(db_session)
        result = await service.generate_expenses(as_of=today)
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ---------- lookups ----------

    async def _require_provider(self, provider_id: str) -> ProviderDB:
        provider = await self.db.get(ProviderDB, provider_id)
        if provider is None:
            raise NotFoundError("Provider", provider_id)
        return provider

    async def _require_category(self, category_id: str) -> CategoryDB:
        category = await self.db.get(CategoryDB, category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    async def _get_row(self, template_id: str) -> RecurringExpenseDB:
        result = await self.db.execute(
            select(RecurringExpenseDB)
            .where(RecurringExpenseDB.id == template_id)
            .execution_options(populate_existing=True)
        )
        row = result.unique().scalar_one_or_none()
        if row is None:
            raise NotFoundError("Recurring expense", template_id)
        return row

    # ---------- CRUD ----------

    async def create(self, data: RecurringExpenseCreate) -> RecurringExpense:
        """
        Create a template.

        GST is 0 for international providers, otherwise the supplied value or
        1/11 of the amount.
        """
        provider = await self._require_provider(data.provider_id)
        await self._require_category(data.category_id)

        if provider.is_international:
            gst_cents = 0
        elif data.gst_cents is not None:
            gst_cents = data.gst_cents
        else:
            gst_cents = gst_from_inclusive_total(data.amount_cents)

        validate_gst(gst_cents, data.amount_cents)
        validate_date_range(data.start_date, data.end_date)

        next_due = calculate_next_due_date(data.start_date, data.schedule, data.day_of_month)

        row = RecurringExpenseDB(
            id=generate_uuid(),
            name=data.name,
            description=data.description,
            amount_cents=data.amount_cents,
            gst_cents=gst_cents,
            biz_percent=data.biz_percent,
            currency=data.currency,
            schedule=RecurringSchedule(data.schedule).value,
            day_of_month=data.day_of_month,
            start_date=data.start_date,
            end_date=data.end_date,
            is_active=data.is_active,
            next_due_date=next_due,
            provider_id=data.provider_id,
            category_id=data.category_id,
        )
        self.db.add(row)
        await self.db.commit()

        logger.info(f"Created recurring expense {row.id} ({row.schedule}, first due {next_due})")
        return await self.get_template(row.id)

    async def list_templates(self, active_only: bool = False) -> List[RecurringExpense]:
        """List templates ordered by name"""
        stmt = select(RecurringExpenseDB).order_by(RecurringExpenseDB.name)
        if active_only:
            stmt = stmt.where(RecurringExpenseDB.is_active.is_(True))

        result = await self.db.execute(stmt)
        return [RecurringExpense.model_validate(row.to_dict()) for row in result.unique().scalars()]

    async def get_template(self, template_id: str) -> RecurringExpense:
        row = await self._get_row(template_id)
        return RecurringExpense.model_validate(row.to_dict())

    async def update(self, template_id: str, patch: RecurringExpenseUpdate) -> RecurringExpense:
        """
        Apply a partial update.

        Everything is validated before the row is touched. A provider change
        revalidates the provider and recalculates GST from the amount when no
        GST is supplied. GST is always 0 while the resulting provider is
        international. Changing the schedule, day of month or start date
        recomputes next_due_date.
        """
        row = await self._get_row(template_id)
        changes = patch.model_dump(exclude_unset=True)

        amount_cents = changes.get("amount_cents") or row.amount_cents
        gst_cents = changes["gst_cents"] if changes.get("gst_cents") is not None else row.gst_cents

        provider = row.provider
        if changes.get("provider_id") and changes["provider_id"] != row.provider_id:
            provider = await self._require_provider(changes["provider_id"])
            if changes.get("gst_cents") is None:
                gst_cents = gst_from_inclusive_total(amount_cents)
        # International purchases carry no claimable GST
        if provider.is_international:
            gst_cents = 0

        if changes.get("category_id") and changes["category_id"] != row.category_id:
            await self._require_category(changes["category_id"])

        validate_gst(gst_cents, amount_cents)

        start_date = changes.get("start_date") or row.start_date
        end_date = changes["end_date"] if "end_date" in changes else row.end_date
        validate_date_range(start_date, end_date)

        schedule = changes.get("schedule") or row.schedule
        day_of_month = changes.get("day_of_month") or row.day_of_month

        next_due = row.next_due_date
        if changes.get("schedule") or changes.get("day_of_month") or changes.get("start_date"):
            next_due = calculate_next_due_date(start_date, schedule, day_of_month, row.last_generated_date)

        for field in ("name", "description", "biz_percent", "currency", "is_active", "category_id", "provider_id"):
            if field in changes and (changes[field] is not None or field == "description"):
                setattr(row, field, changes[field])
        row.amount_cents = amount_cents
        row.gst_cents = gst_cents
        row.schedule = RecurringSchedule(schedule).value
        row.day_of_month = day_of_month
        row.start_date = start_date
        row.end_date = end_date
        row.next_due_date = next_due

        await self.db.commit()

        logger.info(f"Updated recurring expense {template_id}: {sorted(changes)}")
        return await self.get_template(template_id)

    async def delete(self, template_id: str) -> None:
        """Delete a template. Expenses it generated keep their rows."""
        row = await self._get_row(template_id)
        await self.db.delete(row)
        await self.db.commit()
        logger.info(f"Deleted recurring expense {template_id}")

    # ---------- generation ----------

    async def find_due(self, as_of: date) -> List[RecurringExpense]:
        """Active templates with next_due_date on or before as_of, earliest first"""
        result = await self.db.execute(
            select(RecurringExpenseDB)
            .where(
                RecurringExpenseDB.is_active.is_(True),
                RecurringExpenseDB.next_due_date <= as_of,
            )
            .order_by(RecurringExpenseDB.next_due_date, RecurringExpenseDB.name)
        )
        return [RecurringExpense.model_validate(row.to_dict()) for row in result.unique().scalars()]

    async def generate_expenses(self, as_of: date) -> GenerateExpensesResult:
        """
        Generate one expense for every template due on or before as_of.

        Each template runs in its own transaction. A template whose due date
        is past its end date is counted as skipped and left unchanged.
        """
        logger.info(f"Generating recurring expenses as of {as_of}")

        due_ids = [template.id for template in await self.find_due(as_of)]
        await self.db.commit()

        result = GenerateExpensesResult()
        for template_id in due_ids:
            outcome = await self.generate_for_template(template_id, as_of)
            if outcome is None:
                continue
            if outcome == "skipped":
                result.skipped += 1
                continue
            result.generated += 1
            result.expense_ids.append(outcome.expense_id)
            result.details.append(outcome)

        logger.info(
            f"Recurring expense generation complete: {result.generated} generated, "
            f"{result.skipped} skipped"
        )
        return result

    async def generate_for_template(
        self, template_id: str, as_of: date
    ) -> Union[GeneratedExpenseDetail, str, None]:
        """
        Generate the expense for one due template, atomically.

        Returns:
            GeneratedExpenseDetail when an expense was created, "skipped" when
            the due date is past the end date, None when the template is no
            longer due (already generated by a concurrent run, deactivated
            or deleted)
        """
        try:
            locked = await self.db.execute(
                select(RecurringExpenseDB)
                .where(RecurringExpenseDB.id == template_id)
                .with_for_update(of=RecurringExpenseDB)
                .execution_options(populate_existing=True)
            )
            template = locked.unique().scalar_one_or_none()

            if template is None or not template.is_active or template.next_due_date > as_of:
                await self.db.rollback()
                return None

            due_date = template.next_due_date
            end_date = template.end_date
            if end_date is not None and due_date > end_date:
                await self.db.rollback()
                logger.info(f"Skipped recurring expense {template_id}: due {due_date} is after end date {end_date}")
                return "skipped"

            expense_id = generate_uuid()
            self.db.add(ExpenseDB(
                id=expense_id,
                date=due_date,
                description=(
                    template.description
                    if template.description is not None
                    else f"{template.name}{AUTO_GENERATED_SUFFIX}"
                ),
                amount_cents=template.amount_cents,
                gst_cents=template.gst_cents,
                biz_percent=template.biz_percent,
                currency=template.currency,
                provider_id=template.provider_id,
                category_id=template.category_id,
                recurring_expense_id=template.id,
            ))
            await self.db.flush()

            next_due = calculate_next_due_date(
                template.start_date,
                template.schedule,
                template.day_of_month,
                last_generated_date=due_date,
            )
            advanced = await self.db.execute(
                update(RecurringExpenseDB)
                .where(
                    RecurringExpenseDB.id == template_id,
                    RecurringExpenseDB.next_due_date == due_date,
                )
                .values(last_generated_date=due_date, next_due_date=next_due, updated_at=utc_now())
                .execution_options(synchronize_session=False)
            )
            if advanced.rowcount != 1:
                await self.db.rollback()
                logger.warning(f"Recurring expense {template_id} advanced concurrently; discarded duplicate for {due_date}")
                return None

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Generated expense {expense_id} from recurring expense {template_id} for {due_date}")
        return GeneratedExpenseDetail(
            recurring_expense_id=template.id,
            recurring_expense_name=template.name,
            expense_id=expense_id,
            date=due_date,
            amount_cents=template.amount_cents,
        )
