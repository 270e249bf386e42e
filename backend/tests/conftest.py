"""
Shared fixtures: a file-backed SQLite ledger (through aiosqlite) with one
domestic and one international provider and a G10 and G11 category.

A file database is used so concurrent sessions see the same data.
"""

from datetime import date
from types import SimpleNamespace
from typing import Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from database.connection import Base, build_session_factory
from database.ledger_models import (
    CategoryDB, ExpenseDB, IncomeDB, ProviderDB, generate_uuid,
)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


class LedgerSeeder:
    """Inserts ledger rows for a test"""

    def __init__(self, session_factory, ids: SimpleNamespace):
        self.session_factory = session_factory
        self.ids = ids

    async def _add(self, row):
        async with self.session_factory() as session:
            session.add(row)
            await session.commit()
        return row.id

    async def income(self, on: date, total_cents: int, gst_cents: int, is_paid: bool = True) -> str:
        return await self._add(IncomeDB(
            id=generate_uuid(),
            date=on,
            subtotal_cents=total_cents - gst_cents,
            gst_cents=gst_cents,
            total_cents=total_cents,
            is_paid=is_paid,
        ))

    async def expense(
        self,
        on: date,
        amount_cents: int,
        gst_cents: int,
        biz_percent: int = 100,
        international: bool = False,
        category_id: Optional[str] = None,
    ) -> str:
        return await self._add(ExpenseDB(
            id=generate_uuid(),
            date=on,
            amount_cents=amount_cents,
            gst_cents=gst_cents,
            biz_percent=biz_percent,
            provider_id=self.ids.international_provider if international else self.ids.domestic_provider,
            category_id=category_id or self.ids.non_capital_category,
        ))


@pytest_asyncio.fixture
async def ledger(session_factory):
    ids = SimpleNamespace(
        domestic_provider=generate_uuid(),
        international_provider=generate_uuid(),
        capital_category=generate_uuid(),
        non_capital_category=generate_uuid(),
    )
    async with session_factory() as session:
        session.add_all([
            ProviderDB(id=ids.domestic_provider, name="Officeworks", is_international=False),
            ProviderDB(id=ids.international_provider, name="GitHub", is_international=True),
            CategoryDB(id=ids.capital_category, name="Equipment", bas_label="G10"),
            CategoryDB(id=ids.non_capital_category, name="Software", bas_label="G11"),
        ])
        await session.commit()
    return LedgerSeeder(session_factory, ids)
