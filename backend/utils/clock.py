"""
Wall-clock boundary.

The calendar, aggregation and schedule code take reference dates as explicit
parameters. This is the one place the API layer reads the current date, in
the business timezone, before threading it into those calls.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from config import get_settings


def business_today() -> date:
    """Today's date in the configured business timezone (Australia/Sydney by default)."""
    return datetime.now(ZoneInfo(get_settings().BUSINESS_TIMEZONE)).date()
