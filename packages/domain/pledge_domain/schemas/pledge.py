"""Pledge snapshot model.

A PledgeSnapshot is the canonical point-in-time view of one pledge, created by
reading the external ledger. The engine treats snapshots as pure inputs: they
are fetched fresh for every computation, never cached and never mutated. Two
calls with the same snapshot return identical results.

Key properties:
    - Fixed supply: every pledge has exactly TOTAL_SUPPLY shares
    - Circulating supply = TOTAL_SUPPLY - treasury_shares (derived, not stored)
    - Phase is the ledger's stored phase; it may lag reality (see engine.phase)
"""

from enum import IntEnum
from typing import Any, Optional
from pydantic import Field, model_validator

from ..errors import InvariantViolationError
from ..fixed_point import BPS_DENOMINATOR, WAD
from .base import (
    Address,
    BasisPoints,
    DomainModel,
    FrozenDomainModel,
    Timestamp,
    Wei,
)

# =============================================================================
# Constants
# =============================================================================

TOTAL_SUPPLY = 1_000_000 * WAD
"""Share supply of every pledge. Fixed at creation, never changes."""

_AMOUNT_FIELDS = (
    "funding_goal",
    "deadline",
    "total_raised",
    "vault_balance",
    "treasury_shares",
    "accrued_yield",
    "total_yield_harvested",
    "total_principal",
    "created_at",
)


# =============================================================================
# Phase
# =============================================================================

class PledgePhase(IntEnum):
    """Lifecycle phase as encoded by the ledger.

    Funding -> Active   when total_raised >= funding_goal
    Funding -> Failed   when the deadline passes with the goal unmet
    Active and Failed are terminal.
    """

    FUNDING = 0
    ACTIVE = 1
    FAILED = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


# =============================================================================
# Pledge Snapshot
# =============================================================================

class PledgeSnapshot(FrozenDomainModel):
    """Immutable point-in-time state of a pledge.

    Usage:
        snapshot = PledgeSnapshot(
            address="0x5fbdb2315678afecb367f032d93f642f64180aa3",
            name="Solar Co-op",
            ticker="SUN",
            funding_goal=10 * WAD,
            deadline=1_750_000_000,
            total_raised=4 * WAD,
            founder_share_bps=5100,
            phase=PledgePhase.FUNDING,
            vault_balance=4 * WAD,
        )

        snapshot.circulating_supply  # TOTAL_SUPPLY - treasury_shares

    Invariants (violations raise InvariantViolationError, never a computed zero):
        - every amount >= 0
        - 0 < founder_share_bps < 10000
        - treasury_shares <= TOTAL_SUPPLY
        - a ledger-reported circulating_supply must equal TOTAL_SUPPLY - treasury_shares
    """

    # Identity
    address: Address = Field(description="Pledge contract address")
    creator: Optional[Address] = Field(default=None, description="Founder address")
    token: Optional[Address] = Field(default=None, description="Share token address")
    name: str = Field(default="", description="Display name")
    ticker: str = Field(default="", description="Share token ticker")
    description: str = Field(default="", description="Long-form description")
    image_url: str = Field(default="", description="Image URL (may be empty)")

    # Funding economics
    funding_goal: Wei = Field(description="Currency required for the pledge to become Active")
    deadline: Timestamp = Field(description="Funding deadline (unix seconds)")
    total_raised: Wei = Field(default=0, description="Currency contributed so far")
    founder_share_bps: BasisPoints = Field(
        description="Share of TOTAL_SUPPLY allocated to the founder at creation (1-9999 bps)"
    )
    phase: PledgePhase = Field(default=PledgePhase.FUNDING, description="Stored ledger phase")

    # Vault and treasury
    vault_balance: Wei = Field(
        default=0,
        description="Currency held by the vault (principal + undistributed dividends)"
    )
    treasury_shares: Wei = Field(
        default=0,
        description="Shares bought back via redemption and not yet resold"
    )

    # Yield bookkeeping
    accrued_yield: Wei = Field(default=0, description="Yield accrued and not yet harvested")
    total_yield_harvested: Wei = Field(default=0, description="Cumulative harvested yield")
    total_principal: Wei = Field(default=0, description="Principal deployed to the yield source")

    created_at: Timestamp = Field(default=0, description="Creation time (0 when unknown)")

    @model_validator(mode="before")
    @classmethod
    def check_raw_ledger_fields(cls, data: Any) -> Any:
        """Validate ledger-encoded fields that pydantic would otherwise coerce or reject."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        phase = data.get("phase", PledgePhase.FUNDING)
        if phase not in tuple(PledgePhase):
            raise InvariantViolationError(
                f"Unknown pledge phase {phase!r}", field="phase", value=phase
            )

        # The ledger reports circulating supply alongside treasury shares.
        # It is derived here, so only its consistency is checked.
        reported = data.pop("circulating_supply", None)
        if reported is not None:
            treasury = data.get("treasury_shares", 0)
            if reported != TOTAL_SUPPLY - treasury:
                raise InvariantViolationError(
                    f"Reported circulating supply {reported} does not equal "
                    f"TOTAL_SUPPLY - treasury_shares ({TOTAL_SUPPLY - treasury})",
                    field="circulating_supply",
                    value=reported,
                )
        return data

    @model_validator(mode="after")
    def check_invariants(self):
        """Enforce data-model invariants on the constructed snapshot."""
        for name in _AMOUNT_FIELDS:
            value = getattr(self, name)
            if value < 0:
                raise InvariantViolationError(
                    f"{name} must be non-negative, got {value}",
                    field=name,
                    value=value,
                    context={"pledge": self.address},
                )

        if not 0 < self.founder_share_bps < BPS_DENOMINATOR:
            raise InvariantViolationError(
                f"founder_share_bps must be between 1 and 9999, got {self.founder_share_bps}",
                field="founder_share_bps",
                value=self.founder_share_bps,
                context={"pledge": self.address},
            )

        if self.treasury_shares > TOTAL_SUPPLY:
            raise InvariantViolationError(
                f"treasury_shares {self.treasury_shares} exceeds total supply {TOTAL_SUPPLY}",
                field="treasury_shares",
                value=self.treasury_shares,
                context={"pledge": self.address},
            )

        return self

    @property
    def total_supply(self) -> int:
        """Total share supply (always TOTAL_SUPPLY)."""
        return TOTAL_SUPPLY

    @property
    def circulating_supply(self) -> int:
        """Shares held outside the treasury; denominator for ownership and floor price."""
        return TOTAL_SUPPLY - self.treasury_shares


# =============================================================================
# Pledge Creation
# =============================================================================

class PledgeCreationRequest(DomainModel):
    """User input for creating a new pledge.

    This is user input, not ledger data, so bad values surface as ordinary
    pydantic validation errors for the form to display.

    Example:
        PledgeCreationRequest(
            name="Solar Co-op",
            ticker="SUN",
            funding_goal=10 * WAD,
            duration_days=30,
            founder_share_bps=5100,
        )
    """

    name: str = Field(min_length=1, max_length=100, description="Display name")
    ticker: str = Field(
        pattern=r'^[A-Z0-9]{1,10}$',
        description="Share token ticker (upper-case, up to 10 characters)"
    )
    description: str = Field(default="", max_length=2000)
    image_url: str = Field(default="")
    funding_goal: Wei = Field(gt=0, description="Currency to raise")
    duration_days: int = Field(ge=1, le=365, description="Funding window in days")
    founder_share_bps: BasisPoints = Field(
        ge=100,
        le=9900,
        description="Founder allocation (1%-99% of total supply)"
    )

    @property
    def public_share_bps(self) -> int:
        """Share of total supply sold to the public during funding."""
        return BPS_DENOMINATOR - self.founder_share_bps
