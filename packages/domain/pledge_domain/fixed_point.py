"""Fixed-point arithmetic over the 18-decimal share/currency unit.

Every share count and currency amount in the pledge domain is an integer scaled
by WAD (10**18), the same "wei" representation the ledger uses. Rules:

- Division truncates toward zero (floor for the non-negative operands we accept).
  Amounts owed to a holder therefore never round up, and amounts owed to the
  protocol are computed unbuffered; any upward buffer is an explicit caller step
  (apply_bps_buffer).
- A zero denominator is a legitimate transient state (pre-funding or fully
  redeemed pledge) and yields 0, never an error.
- Negative operands are corrupt data and raise InvariantViolationError.
- Percentages are carried in basis points; display conversion is exact Decimal.
  Comparisons that must not lose precision use exact_ratio() (a Fraction).
"""

from decimal import Decimal, ROUND_DOWN
from fractions import Fraction
from typing import Union

from .errors import InvariantViolationError

# =============================================================================
# Constants
# =============================================================================

WAD = 10**18
"""One whole share / currency unit in fixed-point representation."""

BPS_DENOMINATOR = 10_000
"""Basis points in 100%."""

PERCENT_DENOMINATOR = 100


# =============================================================================
# Core operations
# =============================================================================

def require_non_negative(value: int, name: str) -> int:
    """Return value unchanged, or raise if it is negative.

    Raises:
        InvariantViolationError: If value < 0
    """
    if value < 0:
        raise InvariantViolationError(
            f"{name} must be non-negative, got {value}",
            field=name,
            value=value,
        )
    return value


def mul_div(a: int, b: int, denominator: int) -> int:
    """Compute floor(a * b / denominator) without intermediate precision loss.

    Args:
        a: First factor (>= 0)
        b: Second factor (>= 0)
        denominator: Divisor (>= 0)

    Returns:
        Truncated quotient, or 0 when denominator is 0

    Raises:
        InvariantViolationError: If any operand is negative

    Example:
        mul_div(12 * WAD, WAD, 600_000 * WAD) -> 20_000_000_000_000  (0.00002 units)
    """
    require_non_negative(a, "a")
    require_non_negative(b, "b")
    require_non_negative(denominator, "denominator")
    if denominator == 0:
        return 0
    return (a * b) // denominator


def ratio_bps(numerator: int, denominator: int) -> int:
    """Ratio in basis points, truncated. 0 when denominator is 0."""
    return mul_div(numerator, BPS_DENOMINATOR, denominator)


def exact_ratio(numerator: int, denominator: int) -> Fraction:
    """Unrounded ratio for comparisons. Fraction(0) when denominator is 0."""
    require_non_negative(numerator, "numerator")
    require_non_negative(denominator, "denominator")
    if denominator == 0:
        return Fraction(0)
    return Fraction(numerator, denominator)


def bps_to_percent(bps: int) -> Decimal:
    """Convert basis points to an exact percentage (2 decimals), e.g. 5100 -> 51.00."""
    return (Decimal(bps) / Decimal(PERCENT_DENOMINATOR)).quantize(Decimal("0.01"))


def apply_bps_buffer(amount: int, buffer_bps: int) -> int:
    """Add an upward buffer of buffer_bps to amount (e.g. 100 bps = +1%).

    This is a caller policy applied on top of canonical (unbuffered) amounts.
    """
    require_non_negative(amount, "amount")
    require_non_negative(buffer_bps, "buffer_bps")
    return amount + mul_div(amount, buffer_bps, BPS_DENOMINATOR)


# =============================================================================
# Unit conversion
# =============================================================================

def to_units(wei: int) -> Decimal:
    """Convert a fixed-point integer to whole units as an exact Decimal.

    Example:
        to_units(20_000_000_000_000_000) -> Decimal("0.02")
    """
    return Decimal(wei).scaleb(-18)


def from_units(value: Union[Decimal, int, str]) -> int:
    """Convert whole units to a fixed-point integer, truncating sub-wei digits.

    Args:
        value: Amount in whole units ("0.001", Decimal("12"), 5)

    Returns:
        Amount scaled by WAD

    Raises:
        InvariantViolationError: If value is negative
    """
    amount = Decimal(value) if not isinstance(value, Decimal) else value
    wei = int((amount * WAD).to_integral_value(rounding=ROUND_DOWN))
    return require_non_negative(wei, "value")
