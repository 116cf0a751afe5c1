"""Exception hierarchy for the pledge domain layer.

Three failure categories exist:
- Invariant violations: the ledger or caller supplied corrupt data (founder share
  outside 1-99%, negative amounts, treasury larger than supply). These are raised,
  never clamped into a computed zero.
- Invalid phase transitions: an attempt to move a pledge along an edge the phase
  machine does not have.
- Simulated values fed into accounting: cosmetic ticker values must never reach
  harvest/claim math.

Invalid user input to preview functions (redeem 0 shares, buy more treasury stock
than exists) is NOT an exception. Previews return a typed PreviewRejection instead,
see schemas/previews.py.
"""

from typing import Any, Dict, Optional


class PledgeDomainError(Exception):
    """Base class for all pledge domain errors.

    All domain errors are local and recoverable by the caller (show a message,
    do not submit a transaction).
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class InvariantViolationError(PledgeDomainError):
    """Ledger or caller supplied data that breaks a data-model invariant."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value


class InvalidPhaseTransitionError(PledgeDomainError):
    """Requested phase transition is not an edge of the phase machine."""

    def __init__(self, message: str, from_phase: Any = None, to_phase: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.from_phase = from_phase
        self.to_phase = to_phase


class SimulatedValueError(PledgeDomainError):
    """A cosmetic (simulated) value was passed where real accounting data is required."""
