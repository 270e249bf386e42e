"""
Unit Tests for fixed-point money and GST arithmetic

Run with: pytest tests/test_bas_calculator.py -v
"""

import pytest
from decimal import Decimal

from bas.bas_calculator import (
    add_cents,
    gst_inclusive,
    gst_from_inclusive_total,
    ex_gst_from_inclusive_total,
    apply_percent,
    claimable_gst,
    cents_to_dollars,
    dollars_to_cents,
    format_cents,
)
from utils.validation_errors import InvalidArgumentError


class TestGST:
    """GST on subtotals and totals (10%, half-up)."""

    def test_add_cents(self):
        assert add_cents(100000, 10000) == 110000

    def test_gst_inclusive(self):
        # $100.00 + 10% = $110.00
        assert gst_inclusive(10000) == 11000

    def test_gst_inclusive_rounds_half_up(self):
        # 0.5c of GST rounds up
        assert gst_inclusive(5) == 6
        assert gst_inclusive(4) == 4

    def test_gst_from_total(self):
        assert gst_from_inclusive_total(11000) == 1000
        assert gst_from_inclusive_total(110000) == 10000

    def test_gst_from_total_rounding(self):
        # 6 / 11 = 0.545 -> 1, 5 / 11 = 0.454 -> 0
        assert gst_from_inclusive_total(6) == 1
        assert gst_from_inclusive_total(5) == 0

    def test_subtotal_plus_gst_equals_total(self):
        for total in list(range(0, 2500)) + [99999, 123457, 10 ** 9 + 7]:
            assert ex_gst_from_inclusive_total(total) + gst_from_inclusive_total(total) == total

    def test_ex_gst(self):
        assert ex_gst_from_inclusive_total(11000) == 10000


class TestApplyPercent:
    """Business-use apportionment rounds down."""

    def test_whole_percent(self):
        assert apply_percent(10000, 50) == 5000
        assert apply_percent(10000, 100) == 10000
        assert apply_percent(10000, 0) == 0

    def test_floors_not_rounds(self):
        # 1001 * 50% = 500.5
        assert apply_percent(1001, 50) == 500
        assert apply_percent(1001, 50) != 501

    def test_floor_on_two_thirds(self):
        # 999 * 33% = 329.67
        assert apply_percent(999, 33) == 329

    def test_fractional_percent(self):
        # 1001 * 50.1% = 501.501
        assert apply_percent(1001, Decimal("50.1")) == 501

    @pytest.mark.parametrize("percent", [-1, 101, Decimal("100.01")])
    def test_out_of_range(self, percent):
        with pytest.raises(InvalidArgumentError):
            apply_percent(1000, percent)

    def test_out_of_range_is_value_error(self):
        with pytest.raises(ValueError):
            apply_percent(1000, 101)

    def test_float_refused(self):
        with pytest.raises(TypeError):
            apply_percent(1000, 50.0)

    def test_claimable_gst(self):
        assert claimable_gst(1000, 50) == 500
        assert claimable_gst(1001, 50) == 500


class TestDisplay:
    """Dollar string parsing and formatting."""

    def test_format_cents(self):
        assert format_cents(10050) == "$100.50"
        assert format_cents(0) == "$0.00"
        assert format_cents(-100) == "-$1.00"
        assert format_cents(123456789) == "$1,234,567.89"

    def test_cents_to_dollars(self):
        assert cents_to_dollars(10050) == Decimal("100.50")

    def test_dollars_to_cents(self):
        assert dollars_to_cents("100.50") == 10050
        assert dollars_to_cents(Decimal("19.99")) == 1999
        assert dollars_to_cents(5) == 500

    def test_dollars_to_cents_half_up(self):
        assert dollars_to_cents("0.005") == 1
        assert dollars_to_cents("0.004") == 0
        assert dollars_to_cents("-0.005") == -1

    def test_dollars_to_cents_refuses_float(self):
        with pytest.raises(TypeError):
            dollars_to_cents(0.1)
