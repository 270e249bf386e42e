"""
BAS Calculator - Fixed-point money and GST arithmetic

All amounts are integer cents. Ledger arithmetic never goes through float;
Decimal is only used to parse and display dollar strings.

Australian GST Overview:
- Standard GST rate: 10%
- GST component of a GST-inclusive total T is exactly T / 11
- International (overseas) providers do not charge GST

Rounding rules:
- GST on a subtotal and GST extracted from a total: half up (ties away from zero)
- Business-use apportionment: floor. Claims are never rounded up, and the
  result matches FLOOR(gst_cents * biz_percent / 100) computed by the database
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from fractions import Fraction
from typing import Union

from utils.validation_errors import InvalidArgumentError


GST_RATE_PERCENT = 10           # Australian GST rate (10%)
GST_DIVISOR = 11                # 1 + rate, for extracting GST from a total

Percent = Union[int, Decimal]


def _divide_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounding half away from zero (denominator > 0)."""
    quotient, remainder = divmod(abs(numerator), denominator)
    if 2 * remainder >= denominator:
        quotient += 1
    return quotient if numerator >= 0 else -quotient


def add_cents(amount_a_cents: int, amount_b_cents: int) -> int:
    """
    Add two amounts in cents.

    add_cents(100000, 10000) -> 110000   ($1,000.00 + $100.00)
    """
    return int(amount_a_cents) + int(amount_b_cents)


def gst_inclusive(subtotal_cents: int) -> int:
    """
    Add 10% GST to a subtotal.

    gst_inclusive(10000) -> 11000        ($100.00 -> $110.00)
    gst_inclusive(5)     -> 6            (0.5c of GST rounds up)
    """
    return subtotal_cents + _divide_half_up(subtotal_cents * GST_RATE_PERCENT, 100)


def gst_from_inclusive_total(total_cents: int) -> int:
    """
    GST component of a GST-inclusive total: total / 11, rounded half up.

    This is the source of truth for auto-calculated GST on domestic
    provider expenses.

    gst_from_inclusive_total(11000) -> 1000
    """
    return _divide_half_up(total_cents, GST_DIVISOR)


def ex_gst_from_inclusive_total(total_cents: int) -> int:
    """
    Subtotal of a GST-inclusive total.

    Derived by subtracting the rounded GST so that
    subtotal + GST == total holds exactly.
    """
    return total_cents - gst_from_inclusive_total(total_cents)


def apply_percent(amount_cents: int, percent: Percent) -> int:
    """
    Apply a business-use percentage, rounding DOWN.

    apply_percent(10000, 50)             -> 5000
    apply_percent(1001, 50)              -> 500   (500.5 floors, never 501)
    apply_percent(1001, Decimal("50.1")) -> 501   (501.501 floors)

    Raises:
        InvalidArgumentError if percent is outside 0-100
        TypeError if percent is a float
    """
    if isinstance(percent, float):
        raise TypeError("Business percentage must be an int or Decimal, not float")
    if percent < 0 or percent > 100:
        raise InvalidArgumentError(
            f"Business percentage must be between 0 and 100 (got {percent})",
            parameter="biz_percent",
            value=percent,
        )
    return math.floor(Fraction(amount_cents) * Fraction(percent) / 100)


def claimable_gst(gst_cents: int, biz_percent: Percent) -> int:
    """
    GST credit claimable for an expense (BAS label 1B contribution).

    claimable_gst(1000, 50) -> 500
    """
    return apply_percent(gst_cents, biz_percent)


# ==================== DISPLAY / PARSING ====================

def cents_to_dollars(cents: int) -> Decimal:
    """cents_to_dollars(10050) -> Decimal('100.50')"""
    return (Decimal(cents) / 100).quantize(Decimal("0.01"))


def dollars_to_cents(dollars: Union[str, int, Decimal]) -> int:
    """
    Convert a dollar amount to cents, rounding half up.

    dollars_to_cents("100.50") -> 10050
    dollars_to_cents("0.005")  -> 1

    Raises:
        TypeError for float input (parse user input from its string form)
    """
    if isinstance(dollars, float):
        raise TypeError("Pass dollar amounts as str or Decimal, not float")
    return int((Decimal(dollars) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_cents(cents: int) -> str:
    """
    Human-readable dollar string. For display only.

    format_cents(10050) -> "$100.50"
    format_cents(-100)  -> "-$1.00"
    """
    sign = "-" if cents < 0 else ""
    return f"{sign}${cents_to_dollars(abs(cents)):,.2f}"
