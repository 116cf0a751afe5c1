"""Holder positions and portfolio aggregates.

HolderBalance is the raw per-holder input read from the ledger. HolderPosition
and PortfolioAggregate are derived by the position engine and are never stored.

Key distinction:
    - HolderBalance: what the ledger says (shares, contribution, pending rewards)
    - HolderPosition: what those balances are worth against a specific snapshot
"""

from typing import Dict, Literal, Optional
from pydantic import Field, model_validator

from ..errors import InvariantViolationError
from .base import Address, BasisPoints, FrozenDomainModel, Wei
from .pledge import PledgePhase


# =============================================================================
# Holder Balance (ledger input)
# =============================================================================

class HolderBalance(FrozenDomainModel):
    """A holder's raw balances in one pledge, as reported by the ledger.

    Example:
        HolderBalance(
            pledge="0x5fbdb2315678afecb367f032d93f642f64180aa3",
            holder="0x70997970c51812dc3a010c7d01b50e0d17dc79c8",
            share_balance=1_000 * WAD,
            contribution=WAD // 50,
        )
    """

    pledge: Address = Field(description="Pledge contract address")
    holder: Address = Field(description="Holder wallet address")
    share_balance: Wei = Field(default=0, description="Shares held")
    contribution: Wei = Field(default=0, description="Currency paid in during funding")
    pending_rewards: Wei = Field(default=0, description="Unclaimed yield + dividends")

    @model_validator(mode="after")
    def check_non_negative(self):
        for name in ("share_balance", "contribution", "pending_rewards"):
            value = getattr(self, name)
            if value < 0:
                raise InvariantViolationError(
                    f"{name} must be non-negative, got {value}",
                    field=name,
                    value=value,
                    context={"pledge": self.pledge, "holder": self.holder},
                )
        return self


# =============================================================================
# Holder Position (derived)
# =============================================================================

class HolderPosition(FrozenDomainModel):
    """A holder's position valued against one pledge snapshot."""

    pledge: Address
    holder: Address
    name: str = ""
    ticker: str = ""
    phase: PledgePhase

    share_balance: Wei
    contribution: Wei
    pending_rewards: Wei

    circulating_supply: Wei = Field(description="Circulating supply of the snapshot valued against")
    ownership_bps: BasisPoints = Field(description="Share of circulating supply in bps")
    redeemable_value: Wei = Field(description="Pro-rata vault value of share_balance")

    @property
    def profit(self) -> int:
        """Redeemable value plus pending rewards minus contribution (may be negative)."""
        return self.redeemable_value + self.pending_rewards - self.contribution


# =============================================================================
# Portfolio Aggregate (derived)
# =============================================================================

class PortfolioAggregate(FrozenDomainModel):
    """Pointwise sum of one holder's positions across pledges.

    Carries no invariants beyond being the sum of its inputs.
    """

    holder: Optional[Address] = Field(default=None, description="None for an unknown holder with no balances")
    positions: int = Field(default=0, description="Number of positions aggregated")
    total_value: Wei = Field(default=0, description="Sum of redeemable values")
    total_shares: Wei = Field(default=0, description="Sum of share balances")
    total_pending_rewards: Wei = 0
    total_contribution: Wei = 0
    count_by_phase: Dict[str, int] = Field(default_factory=dict)
    value_by_phase: Dict[str, int] = Field(default_factory=dict)

    @property
    def total_profit(self) -> int:
        return self.total_value + self.total_pending_rewards - self.total_contribution


# =============================================================================
# Founder Share Tracking
# =============================================================================

Trend = Literal["up", "down", "neutral"]


class FounderShareTrend(FrozenDomainModel):
    """Founder ownership of total supply now versus a previous observation.

    Example:
        Founder held 51% at creation and sold 10,000 shares:
            current_bps=5000, previous_bps=5100, change_bps=-100, trend="down"
    """

    current_bps: BasisPoints
    previous_bps: BasisPoints
    change_bps: int
    trend: Trend
