"""
Australian Financial Year Calendar

The Australian FY runs from 1 July to 30 June and is named for the calendar
year in which it ends:
- FY2026 = 1 July 2025 to 30 June 2026

BAS quarters:
- Q1: July - September      (FY start year)
- Q2: October - December    (FY start year)
- Q3: January - March       (FY end year)
- Q4: April - June          (FY end year)

Every function here is pure. Callers pass the date they care about; nothing
reads the system clock.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Tuple

from utils.validation_errors import InvalidArgumentError


FY_START_MONTH = 7  # July

# FY numbers whose whole range fits in datetime.date
MIN_FINANCIAL_YEAR = 2
MAX_FINANCIAL_YEAR = 9999


class Quarter(str, Enum):
    """BAS quarter within an Australian financial year"""
    Q1 = "Q1"
    Q2 = "Q2"
    Q3 = "Q3"
    Q4 = "Q4"


@dataclass(frozen=True)
class DateRange:
    """Inclusive date range."""
    start_date: date
    end_date: date

    def contains(self, value: date) -> bool:
        return self.start_date <= value <= self.end_date


@dataclass(frozen=True)
class FYInfo:
    financial_year: int
    quarter: Quarter
    fy_label: str
    quarter_label: str


# (start month, start day, end month, end day, offset from FY number)
_QUARTER_BOUNDS = {
    Quarter.Q1: (7, 1, 9, 30, -1),
    Quarter.Q2: (10, 1, 12, 31, -1),
    Quarter.Q3: (1, 1, 3, 31, 0),
    Quarter.Q4: (4, 1, 6, 30, 0),
}


def financial_year_of(value: date) -> int:
    """
    FY number for a date.

    financial_year_of(date(2025, 6, 30)) -> 2025
    financial_year_of(date(2025, 7, 1))  -> 2026
    """
    if value.month >= FY_START_MONTH:
        return value.year + 1
    return value.year


def quarter_of(value: date) -> Quarter:
    """BAS quarter a date falls in."""
    if 7 <= value.month <= 9:
        return Quarter.Q1
    if 10 <= value.month <= 12:
        return Quarter.Q2
    if 1 <= value.month <= 3:
        return Quarter.Q3
    return Quarter.Q4


def check_financial_year(financial_year: int) -> None:
    """Raise InvalidArgumentError when the FY has no representable date range."""
    if not MIN_FINANCIAL_YEAR <= financial_year <= MAX_FINANCIAL_YEAR:
        raise InvalidArgumentError(
            f'Invalid financial year "{financial_year}". '
            f"Must be between {MIN_FINANCIAL_YEAR} and {MAX_FINANCIAL_YEAR}.",
            parameter="year",
            value=financial_year,
        )


def quarter_range(quarter: Quarter, financial_year: int) -> DateRange:
    """
    Start and end dates (inclusive) of a quarter.

    quarter_range(Quarter.Q1, 2026) -> 2025-07-01 .. 2025-09-30
    quarter_range(Quarter.Q3, 2026) -> 2026-01-01 .. 2026-03-31
    """
    check_financial_year(financial_year)
    start_month, start_day, end_month, end_day, offset = _QUARTER_BOUNDS[Quarter(quarter)]
    year = financial_year + offset
    return DateRange(
        start_date=date(year, start_month, start_day),
        end_date=date(year, end_month, end_day),
    )


def fy_range(financial_year: int) -> DateRange:
    """1 July of the previous calendar year to 30 June of financial_year."""
    check_financial_year(financial_year)
    return DateRange(
        start_date=date(financial_year - 1, 7, 1),
        end_date=date(financial_year, 6, 30),
    )


def contained_in(value: date, quarter: Quarter, financial_year: int) -> bool:
    return quarter_range(quarter, financial_year).contains(value)


def fy_label(financial_year: int) -> str:
    return f"FY{financial_year}"


def fy_info(value: date) -> FYInfo:
    """FY number, quarter and display labels for a date, e.g. 'Q1 FY2026'."""
    financial_year = financial_year_of(value)
    quarter = quarter_of(value)
    return FYInfo(
        financial_year=financial_year,
        quarter=quarter,
        fy_label=fy_label(financial_year),
        quarter_label=f"{quarter.value} {fy_label(financial_year)}",
    )


def quarters_for_year(financial_year: int) -> List[Tuple[Quarter, DateRange]]:
    """The four quarters of a FY in order, with their date ranges."""
    return [(quarter, quarter_range(quarter, financial_year)) for quarter in Quarter]


def parse_quarter(value: str) -> Quarter:
    """
    Parse a quarter code case-insensitively ("q1" and "Q1" are both Q1).

    Raises:
        InvalidArgumentError naming the offending value
    """
    if isinstance(value, Quarter):
        return value
    normalized = str(value).strip().upper()
    try:
        return Quarter(normalized)
    except ValueError:
        raise InvalidArgumentError(
            f'Invalid quarter "{value}". Must be Q1, Q2, Q3, or Q4.',
            parameter="quarter",
            value=value,
        ) from None
