"""
Ledger Core - Database Initialization

Creates the ledger tables (providers, categories, incomes, expenses,
recurring_expenses). Run this script to set up the database schema:

    python -m database.init_ledger_db [create|drop|check]
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine

# Load environment variables
ROOT_DIR = Path(__file__).parent.parent
load_dotenv(ROOT_DIR / '.env')

from database.connection import Base, get_engine
from database import ledger_models  # noqa: F401  registers the ledger tables

logger = logging.getLogger(__name__)


async def create_tables(engine: AsyncEngine) -> List[str]:
    """Create all ledger tables"""
    logger.info("Creating ledger database tables...")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    tables = await check_tables(engine)
    logger.info(f"Created ledger tables: {tables}")
    return tables


async def drop_tables(engine: AsyncEngine) -> None:
    """Drop all ledger tables (use with caution!)"""
    logger.info("Dropping ledger database tables...")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        logger.info("All ledger tables dropped")


async def check_tables(engine: AsyncEngine) -> List[str]:
    """Check which tables exist"""
    async with engine.connect() as conn:
        return await conn.run_sync(lambda sync_conn: sorted(inspect(sync_conn).get_table_names()))


async def main(argv: List[str]) -> None:
    command = argv[1] if len(argv) > 1 else "create"
    engine = get_engine()

    try:
        if command == "drop":
            await drop_tables(engine)
        elif command == "check":
            tables = await check_tables(engine)
            print(f"Existing tables: {tables}")
        elif command == "create":
            tables = await create_tables(engine)
            print(f"Created tables: {tables}")
        else:
            print(f"Unknown command: {command}")
            print("Usage: python -m database.init_ledger_db [create|drop|check]")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main(sys.argv))
