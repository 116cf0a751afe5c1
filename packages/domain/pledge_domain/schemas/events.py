"""Yield and dividend accounting records.

Accounting events carry the snapshot that was current when they happened.
Dividend and harvest math must be computed against that snapshot, never
against whatever snapshot was fetched most recently; binding the snapshot into
the event makes that a structural guarantee rather than a caller convention.

Note on simulated yield:
    SimulatedYield is a presentation affordance (an animated ticker that
    increments between refreshes). It is a distinct type so accounting
    functions can refuse it outright.
"""

from pydantic import Field, model_validator

from ..errors import InvariantViolationError
from .base import FrozenDomainModel, Timestamp, Wei
from .pledge import PledgeSnapshot


# =============================================================================
# Harvest
# =============================================================================

class HarvestSplit(FrozenDomainModel):
    """Division of harvested yield between holders and the protocol.

    holder_share + protocol_share == harvested amount, exactly.
    """

    holder_share: Wei
    protocol_share: Wei

    @property
    def total(self) -> int:
        return self.holder_share + self.protocol_share


class HarvestEvent(FrozenDomainModel):
    """A yield harvest and the snapshot it was performed against."""

    accrued_yield: Wei = Field(description="Yield converted by this harvest")
    snapshot: PledgeSnapshot = Field(description="Pledge state at harvest time")
    timestamp: Timestamp = 0

    @model_validator(mode="after")
    def check_amount(self):
        if self.accrued_yield < 0:
            raise InvariantViolationError(
                f"accrued_yield must be non-negative, got {self.accrued_yield}",
                field="accrued_yield",
                value=self.accrued_yield,
            )
        return self


# =============================================================================
# Dividends
# =============================================================================

class DividendDeposit(FrozenDomainModel):
    """Founder revenue deposited for pro-rata distribution.

    Distributed by circulating-share ownership at the time of deposit, so the
    deposit snapshot is part of the record.

    Example:
        DividendDeposit(amount=3 * WAD, snapshot=snapshot_at_deposit)
    """

    amount: Wei = Field(description="Currency deposited")
    snapshot: PledgeSnapshot = Field(description="Pledge state at deposit time")
    timestamp: Timestamp = 0

    @model_validator(mode="after")
    def check_amount(self):
        if self.amount < 0:
            raise InvariantViolationError(
                f"Dividend amount must be non-negative, got {self.amount}",
                field="amount",
                value=self.amount,
            )
        return self


# =============================================================================
# Simulated (cosmetic) yield
# =============================================================================

class SimulatedYield(FrozenDomainModel):
    """Display-only yield value for an animated ticker.

    real_value is the last value read from the ledger and is kept untouched;
    display_value is real_value plus a fabricated per-second increment.
    Only real_value may ever be used for accounting.
    """

    real_value: Wei
    display_value: Wei
    elapsed_seconds: int = 0
