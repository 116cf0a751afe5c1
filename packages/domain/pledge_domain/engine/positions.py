"""Position engine.

Values a holder's balances against a snapshot and previews the actions a
holder can submit (redeem, contribute, buy treasury stock).

    ownership_bps    = share_balance * 10000 / circulating_supply
    redeemable_value = share_balance * vault_balance / circulating_supply

Both truncate, so summed over every holder (whose balances add up to the
circulating supply) redeemable values never exceed the vault.

Previews model the ledger's effect; they never execute it. A preview returns
the resulting snapshot as a new instance and leaves its input untouched.
"""

from typing import Optional

from ..errors import InvariantViolationError
from ..fixed_point import WAD, mul_div, ratio_bps, require_non_negative
from ..logging import get_engine_logger
from ..schemas import (
    TOTAL_SUPPLY,
    ContributionPreview,
    EngineCFG,
    FounderShareTrend,
    HolderBalance,
    HolderPosition,
    PledgeSnapshot,
    PreviewRejection,
    RedemptionPreview,
    RejectionReason,
    TreasuryPurchasePreview,
    normalize_address,
)
from .phase import can_contribute, can_refund, needs_finalization
from .pricing import (
    buffered_treasury_cost,
    floor_price,
    ico_price,
    is_degenerate,
    public_shares,
    remaining_capacity,
    treasury_buy_cost,
)

logger = get_engine_logger(__name__)


def _reject(reason: RejectionReason, message: str, **context) -> PreviewRejection:
    logger.debug("preview_rejected", reason=reason.value, **context)
    return PreviewRejection(reason=reason, message=message)


# =============================================================================
# Valuation
# =============================================================================

def ownership_bps(share_balance: int, snapshot: PledgeSnapshot) -> int:
    """Share of circulating supply in basis points. 0 if nothing circulates."""
    require_non_negative(share_balance, "share_balance")
    return ratio_bps(share_balance, snapshot.circulating_supply)


def redeemable_value(share_balance: int, snapshot: PledgeSnapshot) -> int:
    """Pro-rata vault value of share_balance. 0 if nothing circulates."""
    require_non_negative(share_balance, "share_balance")
    return mul_div(share_balance, snapshot.vault_balance, snapshot.circulating_supply)


def build_position(balance: HolderBalance, snapshot: PledgeSnapshot) -> HolderPosition:
    """Value a holder's raw ledger balances against the snapshot of the same pledge.

    Raises:
        InvariantViolationError: If the balance belongs to a different pledge
    """
    if normalize_address(balance.pledge) != normalize_address(snapshot.address):
        logger.debug("pledge_mismatch", pledge=snapshot.address, balance_pledge=balance.pledge)
        raise InvariantViolationError(
            f"Balance for pledge {balance.pledge} valued against snapshot of {snapshot.address}",
            field="pledge",
            value=balance.pledge,
        )

    return HolderPosition(
        pledge=snapshot.address,
        holder=balance.holder,
        name=snapshot.name,
        ticker=snapshot.ticker,
        phase=snapshot.phase,
        share_balance=balance.share_balance,
        contribution=balance.contribution,
        pending_rewards=balance.pending_rewards,
        circulating_supply=snapshot.circulating_supply,
        ownership_bps=ownership_bps(balance.share_balance, snapshot),
        redeemable_value=redeemable_value(balance.share_balance, snapshot),
    )


def refundable_amount(balance: HolderBalance, snapshot: PledgeSnapshot, now: int) -> int:
    """Contribution refundable to the holder once funding has failed.

    Counts pledges still stored as Funding whose failure only awaits
    finalization, so the refund can be shown alongside the finalize action.
    """
    if can_refund(snapshot) or needs_finalization(snapshot, now):
        return balance.contribution
    return 0


# =============================================================================
# Previews
# =============================================================================

def simulate_redemption(
    snapshot: PledgeSnapshot,
    shares: int,
    share_balance: Optional[int] = None,
) -> RedemptionPreview:
    """Preview redeeming `shares` at floor price.

    Redeeming n shares pays n * floor_price / WAD and moves the n shares into
    the treasury, so circulating supply drops by n and the vault by the payout.

    Args:
        snapshot: Current pledge snapshot
        shares: Shares to redeem
        share_balance: Holder's stated balance, if the caller wants it checked.
            Without it, n > balance is left to the ledger.

    Returns:
        RedemptionPreview with payout and resulting snapshot, or a rejection
    """
    if shares <= 0:
        return RedemptionPreview(
            shares=shares,
            rejection=_reject(
                RejectionReason.NON_POSITIVE_AMOUNT,
                "Shares to redeem must be greater than zero",
                pledge=snapshot.address,
                shares=shares,
            ),
        )
    if share_balance is not None and shares > share_balance:
        return RedemptionPreview(
            shares=shares,
            rejection=_reject(
                RejectionReason.EXCEEDS_BALANCE,
                f"Cannot redeem {shares} shares with a balance of {share_balance}",
                pledge=snapshot.address,
                shares=shares,
            ),
        )
    if shares > snapshot.circulating_supply:
        return RedemptionPreview(
            shares=shares,
            rejection=_reject(
                RejectionReason.EXCEEDS_CIRCULATING_SUPPLY,
                f"Cannot redeem {shares} shares; only {snapshot.circulating_supply} circulate",
                pledge=snapshot.address,
                shares=shares,
            ),
        )

    price = floor_price(snapshot)
    payout = mul_div(shares, price, WAD)
    resulting = snapshot.model_copy(
        update={
            "treasury_shares": snapshot.treasury_shares + shares,
            "vault_balance": snapshot.vault_balance - payout,
        }
    )
    return RedemptionPreview(shares=shares, payout=payout, floor_price=price, resulting=resulting)


def simulate_contribution(
    snapshot: PledgeSnapshot,
    amount: int,
    now: int,
    cfg: Optional[EngineCFG] = None,
) -> ContributionPreview:
    """Preview contributing `amount` during funding.

    Estimated shares are amount * public_shares / funding_goal, i.e. amount at
    the ICO price without rounding the price first.
    """
    cfg = cfg or EngineCFG()
    if amount <= 0:
        return ContributionPreview(
            amount=amount,
            rejection=_reject(
                RejectionReason.NON_POSITIVE_AMOUNT,
                "Contribution must be greater than zero",
                pledge=snapshot.address,
                amount=amount,
            ),
        )
    if not can_contribute(snapshot, now):
        return ContributionPreview(
            amount=amount,
            rejection=_reject(
                RejectionReason.PHASE_CLOSED,
                "Pledge is not accepting contributions",
                pledge=snapshot.address,
                phase=snapshot.phase.label,
            ),
        )
    if amount < cfg.min_contribution:
        return ContributionPreview(
            amount=amount,
            rejection=_reject(
                RejectionReason.BELOW_MINIMUM,
                f"Minimum contribution is {cfg.min_contribution} wei",
                pledge=snapshot.address,
                amount=amount,
            ),
        )
    capacity = remaining_capacity(snapshot)
    if amount > capacity:
        return ContributionPreview(
            amount=amount,
            rejection=_reject(
                RejectionReason.EXCEEDS_REMAINING_CAPACITY,
                f"Only {capacity} wei remain before the funding goal",
                pledge=snapshot.address,
                amount=amount,
            ),
        )

    resulting = snapshot.model_copy(
        update={
            "total_raised": snapshot.total_raised + amount,
            "vault_balance": snapshot.vault_balance + amount,
        }
    )
    return ContributionPreview(
        amount=amount,
        estimated_shares=mul_div(amount, public_shares(snapshot), snapshot.funding_goal),
        ico_price=ico_price(snapshot),
        reaches_goal=resulting.total_raised >= snapshot.funding_goal,
        resulting=resulting,
    )


def simulate_treasury_purchase(
    snapshot: PledgeSnapshot,
    shares: int,
    cfg: Optional[EngineCFG] = None,
) -> TreasuryPurchasePreview:
    """Preview buying `shares` treasury shares at floor price.

    cost is canonical and unbuffered; cost_with_buffer adds the configured
    slippage buffer the caller should send. When no shares circulate the floor
    price is 0, the cost is 0 and the preview is flagged degenerate.
    """
    cfg = cfg or EngineCFG()
    if shares <= 0:
        return TreasuryPurchasePreview(
            shares=shares,
            rejection=_reject(
                RejectionReason.NON_POSITIVE_AMOUNT,
                "Shares to buy must be greater than zero",
                pledge=snapshot.address,
                shares=shares,
            ),
        )
    if shares > snapshot.treasury_shares:
        return TreasuryPurchasePreview(
            shares=shares,
            rejection=_reject(
                RejectionReason.EXCEEDS_TREASURY_SHARES,
                f"Only {snapshot.treasury_shares} treasury shares are available",
                pledge=snapshot.address,
                shares=shares,
            ),
        )

    cost = treasury_buy_cost(snapshot, shares)
    resulting = snapshot.model_copy(
        update={
            "treasury_shares": snapshot.treasury_shares - shares,
            "vault_balance": snapshot.vault_balance + cost,
        }
    )
    return TreasuryPurchasePreview(
        shares=shares,
        cost=cost,
        cost_with_buffer=buffered_treasury_cost(snapshot, shares, cfg),
        degenerate=is_degenerate(snapshot),
        resulting=resulting,
    )


# =============================================================================
# Founder share tracking
# =============================================================================

def founder_ownership_bps(founder_balance: int) -> int:
    """Founder's balance as basis points of total supply."""
    require_non_negative(founder_balance, "founder_balance")
    return ratio_bps(founder_balance, TOTAL_SUPPLY)


def founder_share_trend(
    current_balance: int,
    previous_balance: Optional[int] = None,
) -> FounderShareTrend:
    """Compare the founder's current holding with a previous observation.

    With no previous observation the trend is neutral.
    """
    current = founder_ownership_bps(current_balance)
    previous = current if previous_balance is None else founder_ownership_bps(previous_balance)
    change = current - previous
    if change > 0:
        trend = "up"
    elif change < 0:
        trend = "down"
    else:
        trend = "neutral"
    return FounderShareTrend(
        current_bps=current,
        previous_bps=previous,
        change_bps=change,
        trend=trend,
    )
