"""Preview results for actions the presentation layer is about to submit.

Previews answer "you will receive / pay about X" before a transaction goes to
the (external) ledger write path. Invalid user input never raises here: every
preview either carries its computed values or a PreviewRejection naming the
precondition that failed, so a render path can always show a message.
"""

from enum import Enum
from typing import Optional
from pydantic import Field

from .base import FrozenDomainModel, Wei
from .pledge import PledgeSnapshot


# =============================================================================
# Rejections
# =============================================================================

class RejectionReason(str, Enum):
    """Which precondition of a preview failed."""

    NON_POSITIVE_AMOUNT = "non_positive_amount"
    BELOW_MINIMUM = "below_minimum"
    EXCEEDS_BALANCE = "exceeds_balance"
    EXCEEDS_CIRCULATING_SUPPLY = "exceeds_circulating_supply"
    EXCEEDS_TREASURY_SHARES = "exceeds_treasury_shares"
    EXCEEDS_REMAINING_CAPACITY = "exceeds_remaining_capacity"
    PHASE_CLOSED = "phase_closed"


class PreviewRejection(FrozenDomainModel):
    """Typed rejection describing why a preview could not be computed."""

    reason: RejectionReason
    message: str


class _Preview(FrozenDomainModel):
    rejection: Optional[PreviewRejection] = None

    @property
    def ok(self) -> bool:
        """True when the preview was computed (no rejection)."""
        return self.rejection is None


# =============================================================================
# Previews
# =============================================================================

class RedemptionPreview(_Preview):
    """Modelled effect of redeeming shares back into the treasury.

    Example:
        vault 12 units, circulating 600,000 shares, redeem 1,000 shares:
            payout = 0.02 units
            resulting.treasury_shares += 1,000 shares
            resulting.vault_balance   = 11.98 units
    """

    shares: int = Field(description="Shares requested for redemption")
    payout: Wei = Field(default=0, description="Currency paid to the holder")
    floor_price: Wei = Field(default=0, description="Floor price used for the payout")
    resulting: Optional[PledgeSnapshot] = Field(
        default=None,
        description="Snapshot after the redemption, None when rejected"
    )


class ContributionPreview(_Preview):
    """Modelled effect of contributing currency during funding."""

    amount: int = Field(description="Currency offered")
    estimated_shares: Wei = Field(default=0, description="Public shares the amount buys")
    ico_price: Wei = 0
    reaches_goal: bool = Field(
        default=False,
        description="True when this contribution completes the funding goal"
    )
    resulting: Optional[PledgeSnapshot] = None


class TreasuryPurchasePreview(_Preview):
    """Modelled effect of buying treasury stock at floor price."""

    shares: int
    cost: Wei = Field(default=0, description="Canonical (unbuffered) cost")
    cost_with_buffer: Wei = Field(default=0, description="Cost plus the caller slippage buffer")
    degenerate: bool = Field(
        default=False,
        description="Circulating supply is zero so floor price (and cost) is zero"
    )
    resulting: Optional[PledgeSnapshot] = None


class CreationPreview(_Preview):
    """Economics of a pledge about to be created."""

    founder_shares: Wei = 0
    public_shares: Wei = 0
    ico_price: Wei = 0
    listing_fee: Wei = 0
