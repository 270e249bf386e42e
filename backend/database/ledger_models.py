"""
Ledger Core - Ledger Database Models

The ledger store read by the BAS/FY aggregation and written by the
recurring expense engine.

Tables:
- providers: Suppliers (domestic = GST applies, international = GST-free)
- categories: Expense categories carrying an ATO BAS label
- incomes: Invoices issued (sales)
- expenses: Purchases, optionally generated from a recurring template
- recurring_expenses: Recurring expense templates and their schedule state

All money columns are integer cents.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Dict, Any

from sqlalchemy import (
    Column, String, Text, Integer, Boolean, Date, DateTime,
    ForeignKey, Index, CheckConstraint
)
from sqlalchemy.orm import relationship

from database.connection import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ==================== ENUMS ====================

class RecurringSchedule(str, PyEnum):
    """How often a recurring expense falls due"""
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


# ==================== REFERENCE TABLES ====================

class ProviderDB(Base):
    """Supplier of goods/services. International providers never carry GST."""
    __tablename__ = "providers"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    is_international = Column(Boolean, nullable=False, default=False, index=True)
    abn_arn = Column(String(20), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)


class CategoryDB(Base):
    """Expense category mapped to an ATO BAS label (1B, G10, G11...)"""
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    bas_label = Column(String(10), nullable=False)
    is_deductible = Column(Boolean, nullable=False, default=True)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)


# ==================== LEDGER TABLES ====================

class IncomeDB(Base):
    """Issued invoice. Cash-basis reports only count rows with is_paid set."""
    __tablename__ = "incomes"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    date = Column(Date, nullable=False)
    invoice_num = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)

    subtotal_cents = Column(Integer, nullable=False)
    gst_cents = Column(Integer, nullable=False, default=0)
    total_cents = Column(Integer, nullable=False)
    is_paid = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    __table_args__ = (
        Index("idx_incomes_date", "date"),
        Index("idx_incomes_is_paid", "is_paid"),
        CheckConstraint("gst_cents <= total_cents", name="ck_incomes_gst_le_total"),
    )


class ExpenseDB(Base):
    """
    Purchase row.

    recurring_expense_id is set when the row was generated from a template,
    so generated entries can be audited (and undone) per template.
    """
    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)

    amount_cents = Column(Integer, nullable=False)
    gst_cents = Column(Integer, nullable=False, default=0)
    biz_percent = Column(Integer, nullable=False, default=100)
    currency = Column(String(3), nullable=False, default="AUD")

    provider_id = Column(String(36), ForeignKey("providers.id", ondelete="RESTRICT"), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    recurring_expense_id = Column(
        String(36),
        ForeignKey("recurring_expenses.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    provider = relationship("ProviderDB")
    category = relationship("CategoryDB")

    __table_args__ = (
        Index("idx_expenses_date", "date"),
        Index("idx_expenses_category", "category_id"),
        Index("idx_expenses_provider", "provider_id"),
        Index("idx_expenses_recurring", "recurring_expense_id"),
        CheckConstraint("gst_cents <= amount_cents", name="ck_expenses_gst_le_amount"),
        CheckConstraint("biz_percent BETWEEN 0 AND 100", name="ck_expenses_biz_percent"),
    )


class RecurringExpenseDB(Base):
    """
    Recurring expense template.

    next_due_date only moves forward; it is advanced in the same transaction
    that inserts the generated expense.
    """
    __tablename__ = "recurring_expenses"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    amount_cents = Column(Integer, nullable=False)
    gst_cents = Column(Integer, nullable=False, default=0)
    biz_percent = Column(Integer, nullable=False, default=100)
    currency = Column(String(3), nullable=False, default="AUD")

    schedule = Column(String(20), nullable=False, default=RecurringSchedule.MONTHLY.value)
    day_of_month = Column(Integer, nullable=False, default=1)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_generated_date = Column(Date, nullable=True)
    next_due_date = Column(Date, nullable=False)

    provider_id = Column(String(36), ForeignKey("providers.id", ondelete="RESTRICT"), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    provider = relationship("ProviderDB", lazy="joined")
    category = relationship("CategoryDB", lazy="joined")

    __table_args__ = (
        Index("idx_recurring_expenses_active", "is_active"),
        Index("idx_recurring_expenses_next_due", "next_due_date"),
        CheckConstraint("gst_cents <= amount_cents", name="ck_recurring_gst_le_amount"),
        CheckConstraint("day_of_month BETWEEN 1 AND 28", name="ck_recurring_day_of_month"),
        CheckConstraint("biz_percent BETWEEN 0 AND 100", name="ck_recurring_biz_percent"),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "amount_cents": self.amount_cents,
            "gst_cents": self.gst_cents,
            "biz_percent": self.biz_percent,
            "currency": self.currency,
            "schedule": self.schedule,
            "day_of_month": self.day_of_month,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "is_active": self.is_active,
            "last_generated_date": self.last_generated_date,
            "next_due_date": self.next_due_date,
            "provider_id": self.provider_id,
            "provider_name": self.provider.name if self.provider else None,
            "category_id": self.category_id,
            "category_name": self.category.name if self.category else None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
