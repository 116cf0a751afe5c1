"""Tests for fixed-point arithmetic.

Tests cover:
- mul_div truncation and zero-denominator behavior
- Negative operands raising InvariantViolationError
- Basis-point and exact-ratio helpers
- Unit conversion
"""

import pytest
from decimal import Decimal
from fractions import Fraction

from pledge_domain.errors import InvariantViolationError, PledgeDomainError
from pledge_domain.fixed_point import (
    BPS_DENOMINATOR,
    WAD,
    apply_bps_buffer,
    bps_to_percent,
    exact_ratio,
    from_units,
    mul_div,
    ratio_bps,
    require_non_negative,
    to_units,
)


# =============================================================================
# mul_div
# =============================================================================

class TestMulDiv:

    def test_exact_division(self):
        """Test exact division."""
        assert mul_div(12 * WAD, WAD, 600_000 * WAD) == 20_000_000_000_000

    def test_truncates(self):
        """Test results are truncated toward zero."""
        assert mul_div(10, 1, 3) == 3
        assert mul_div(2, 1, 3) == 0

    def test_zero_denominator_returns_zero(self):
        """Test a zero denominator returns zero."""
        assert mul_div(5 * WAD, WAD, 0) == 0

    def test_no_precision_loss_on_large_products(self):
        """Test large products keep full precision."""
        a = 999_999 * WAD + 7
        b = 123_456_789 * WAD
        assert mul_div(a, b, b) == a

    @pytest.mark.parametrize("a,b,d", [(-1, 1, 1), (1, -1, 1), (1, 1, -1)])
    def test_negative_operand_raises(self, a, b, d):
        """Test negative operands raise."""
        with pytest.raises(InvariantViolationError):
            mul_div(a, b, d)


class TestRequireNonNegative:

    def test_returns_value(self):
        """Test the checked value is returned."""
        assert require_non_negative(7, "x") == 7
        assert require_non_negative(0, "x") == 0

    def test_error_carries_field_and_value(self):
        """Test the error carries the field name and value."""
        with pytest.raises(InvariantViolationError) as exc_info:
            require_non_negative(-5, "vault_balance")
        assert exc_info.value.field == "vault_balance"
        assert exc_info.value.value == -5
        assert isinstance(exc_info.value, PledgeDomainError)


# =============================================================================
# Ratios and percentages
# =============================================================================

def test_ratio_bps():
    """Test basis point ratios."""
    assert ratio_bps(1, 3) == 3333
    assert ratio_bps(5, 5) == BPS_DENOMINATOR
    assert ratio_bps(1, 0) == 0


def test_exact_ratio():
    """Test exact ratios as fractions."""
    assert exact_ratio(1, 3) == Fraction(1, 3)
    assert exact_ratio(7, 0) == Fraction(0)


def test_exact_ratio_distinguishes_values_bps_cannot():
    """Test exact ratios separate values that round to the same bps."""
    # Both truncate to 3333 bps
    assert ratio_bps(3333_4, 100_000) == ratio_bps(3333_3, 100_000)
    assert exact_ratio(3333_4, 100_000) > exact_ratio(3333_3, 100_000)


def test_bps_to_percent():
    """Test bps to percent conversion."""
    assert bps_to_percent(5100) == Decimal("51.00")
    assert bps_to_percent(1) == Decimal("0.01")
    assert bps_to_percent(3333) == Decimal("33.33")


def test_apply_bps_buffer():
    """Test applying a bps buffer."""
    assert apply_bps_buffer(10_000, 100) == 10_100
    assert apply_bps_buffer(99, 100) == 99
    assert apply_bps_buffer(0, 100) == 0


# =============================================================================
# Unit conversion
# =============================================================================

def test_to_units():
    """Test conversion from wei to display units."""
    assert to_units(20_000_000_000_000_000) == Decimal("0.02")
    assert to_units(12 * WAD) == Decimal("12")
    assert to_units(1) == Decimal("1E-18")


def test_from_units():
    """Test conversion from display units to wei."""
    assert from_units("0.001") == 10**15
    assert from_units(Decimal("12")) == 12 * WAD
    assert from_units(5) == 5 * WAD


def test_from_units_truncates_sub_wei():
    """Test sub-wei precision is truncated."""
    assert from_units("0.0000000000000000019") == 1


def test_from_units_negative_raises():
    """Test negative display units raise."""
    with pytest.raises(InvariantViolationError):
        from_units("-1")
