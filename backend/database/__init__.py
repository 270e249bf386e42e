from .connection import (
    get_db, get_engine, get_session_factory, build_session_factory, init_db, Base
)

# Import ledger models to ensure they are registered with Base
from .ledger_models import (
    ProviderDB, CategoryDB, IncomeDB, ExpenseDB, RecurringExpenseDB,
    RecurringSchedule, generate_uuid, utc_now
)

__all__ = [
    'get_db', 'get_engine', 'get_session_factory', 'build_session_factory', 'init_db', 'Base',
    # Ledger models
    'ProviderDB', 'CategoryDB', 'IncomeDB', 'ExpenseDB', 'RecurringExpenseDB',
    'RecurringSchedule', 'generate_uuid', 'utc_now',
]
