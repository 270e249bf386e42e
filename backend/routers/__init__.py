from .bas import router as bas_router
from .reports import router as reports_router
from .recurring import router as recurring_router

__all__ = [
    'bas_router',
    'reports_router',
    'recurring_router',
]
