"""Pricing engine.

Derives per-share prices and funding metrics from a snapshot. Every
presentation surface must call these functions instead of re-deriving the
formulas, so two views of one pledge always show the same numbers.

Prices are fixed-point: a price of WAD means 1 currency unit per whole share.

    public_shares = TOTAL_SUPPLY * (10000 - founder_share_bps) / 10000
    ico_price     = funding_goal * WAD / public_shares
    floor_price   = vault_balance * WAD / circulating_supply

floor_price is truncated, so floor_price * circulating_supply / WAD never
exceeds vault_balance.
"""

from typing import Optional

from ..fixed_point import (
    BPS_DENOMINATOR,
    PERCENT_DENOMINATOR,
    WAD,
    apply_bps_buffer,
    mul_div,
    ratio_bps,
    require_non_negative,
)
from ..schemas import (
    TOTAL_SUPPLY,
    CreationPreview,
    EngineCFG,
    PledgeCreationRequest,
    PledgeSnapshot,
    PreviewRejection,
    RejectionReason,
)


# =============================================================================
# Share allocation
# =============================================================================

def founder_shares(snapshot: PledgeSnapshot) -> int:
    """Shares allocated to the founder at creation."""
    return mul_div(TOTAL_SUPPLY, snapshot.founder_share_bps, BPS_DENOMINATOR)


def public_shares(snapshot: PledgeSnapshot) -> int:
    """Shares sold to the public during funding."""
    return mul_div(TOTAL_SUPPLY, BPS_DENOMINATOR - snapshot.founder_share_bps, BPS_DENOMINATOR)


def public_shares_sold(snapshot: PledgeSnapshot) -> int:
    """Public shares sold so far, pro rata to the capped amount raised."""
    raised = min(snapshot.total_raised, snapshot.funding_goal)
    return mul_div(raised, public_shares(snapshot), snapshot.funding_goal)


def public_shares_remaining(snapshot: PledgeSnapshot) -> int:
    return public_shares(snapshot) - public_shares_sold(snapshot)


# =============================================================================
# Prices
# =============================================================================

def ico_price(snapshot: PledgeSnapshot) -> int:
    """Fixed per-share price during funding. 0 if there are no public shares."""
    return mul_div(snapshot.funding_goal, WAD, public_shares(snapshot))


def floor_price(snapshot: PledgeSnapshot) -> int:
    """Minimum redeemable value per share. 0 if circulating supply is 0."""
    return mul_div(snapshot.vault_balance, WAD, snapshot.circulating_supply)


def is_degenerate(snapshot: PledgeSnapshot) -> bool:
    """True when no shares circulate, so floor price and buy cost are 0.

    This is a legitimate state (every share redeemed into the treasury), not
    an error; callers render zeros.
    """
    return snapshot.circulating_supply == 0


def treasury_buy_cost(snapshot: PledgeSnapshot, shares: int) -> int:
    """Canonical, unbuffered cost of buying `shares` treasury shares at floor price.

    Callers add their slippage buffer with buffered_treasury_cost() before
    submitting; the buffer is policy, not part of this value.
    """
    require_non_negative(shares, "shares")
    return mul_div(shares, floor_price(snapshot), WAD)


def buffered_treasury_cost(snapshot: PledgeSnapshot, shares: int, cfg: Optional[EngineCFG] = None) -> int:
    """Treasury buy cost plus the configured slippage buffer (default +1%)."""
    cfg = cfg or EngineCFG()
    return apply_bps_buffer(treasury_buy_cost(snapshot, shares), cfg.slippage_buffer_bps)


# =============================================================================
# Funding and supply metrics
# =============================================================================

def remaining_capacity(snapshot: PledgeSnapshot) -> int:
    """Currency still needed to reach the goal (0 once reached or exceeded)."""
    return max(snapshot.funding_goal - snapshot.total_raised, 0)


def funding_progress_bps(snapshot: PledgeSnapshot) -> int:
    """Funding progress in basis points, clamped to 10000."""
    return min(ratio_bps(snapshot.total_raised, snapshot.funding_goal), BPS_DENOMINATOR)


def funding_progress_percent(snapshot: PledgeSnapshot) -> int:
    """Funding progress as a whole percentage, clamped to 100."""
    progress = mul_div(snapshot.total_raised, PERCENT_DENOMINATOR, snapshot.funding_goal)
    return min(progress, PERCENT_DENOMINATOR)


def circulating_bps(snapshot: PledgeSnapshot) -> int:
    """Circulating supply as basis points of total supply."""
    return ratio_bps(snapshot.circulating_supply, TOTAL_SUPPLY)


# =============================================================================
# Creation
# =============================================================================

def creation_preview(request: PledgeCreationRequest, cfg: Optional[EngineCFG] = None) -> CreationPreview:
    """Economics of a pledge about to be created.

    Example:
        funding goal 10 units, founder share 51%:
            public_shares = 490,000 shares
            ico_price     = 10 / 490,000 ~ 0.0000204 units per share
    """
    cfg = cfg or EngineCFG()
    if request.funding_goal < cfg.min_funding_goal:
        return CreationPreview(
            rejection=PreviewRejection(
                reason=RejectionReason.BELOW_MINIMUM,
                message=f"Funding goal must be at least {cfg.min_funding_goal} wei",
            )
        )

    public = mul_div(TOTAL_SUPPLY, request.public_share_bps, BPS_DENOMINATOR)
    return CreationPreview(
        founder_shares=TOTAL_SUPPLY - public,
        public_shares=public,
        ico_price=mul_div(request.funding_goal, WAD, public),
        listing_fee=cfg.listing_fee,
    )
