"""Pledge economics engine.

Pure functions over snapshots. Nothing here reads the ledger, the clock or
any shared state; time is always an explicit `now` argument.

Modules:
- phase: phase state machine and action predicates
- pricing: share allocation, ICO and floor prices, funding metrics
- positions: holder valuation and action previews
- yields: harvest split and dividend distribution
- aggregation: platform stats, leaderboards, filtering and portfolios
"""

from .phase import (
    TimeRemaining,
    validate_transition,
    goal_reached,
    is_deadline_passed,
    pending_transition,
    needs_finalization,
    effective_phase,
    seconds_remaining,
    time_remaining,
    can_contribute,
    can_finalize,
    can_refund,
    can_redeem,
    can_claim_rewards,
    can_buy_treasury,
    can_deposit_dividend,
)
from .pricing import (
    founder_shares,
    public_shares,
    public_shares_sold,
    public_shares_remaining,
    ico_price,
    floor_price,
    is_degenerate,
    treasury_buy_cost,
    buffered_treasury_cost,
    remaining_capacity,
    funding_progress_bps,
    funding_progress_percent,
    circulating_bps,
    creation_preview,
)
from .positions import (
    ownership_bps,
    redeemable_value,
    build_position,
    refundable_amount,
    simulate_redemption,
    simulate_contribution,
    simulate_treasury_purchase,
    founder_ownership_bps,
    founder_share_trend,
)
from .yields import (
    harvest_split,
    can_harvest,
    harvest_holder_share,
    dividend_share,
    distribute_dividend,
    simulate_yield_display,
)
from .aggregation import (
    PlatformStats,
    Leaderboards,
    platform_stats,
    ranking_value,
    rank_pledges,
    leaderboards,
    filter_pledges,
    sort_pledges,
    build_portfolio,
    sort_positions,
    pending_reward_positions,
    aggregate_portfolio,
)

__all__ = [
    # Phase
    "TimeRemaining",
    "validate_transition",
    "goal_reached",
    "is_deadline_passed",
    "pending_transition",
    "needs_finalization",
    "effective_phase",
    "seconds_remaining",
    "time_remaining",
    "can_contribute",
    "can_finalize",
    "can_refund",
    "can_redeem",
    "can_claim_rewards",
    "can_buy_treasury",
    "can_deposit_dividend",
    # Pricing
    "founder_shares",
    "public_shares",
    "public_shares_sold",
    "public_shares_remaining",
    "ico_price",
    "floor_price",
    "is_degenerate",
    "treasury_buy_cost",
    "buffered_treasury_cost",
    "remaining_capacity",
    "funding_progress_bps",
    "funding_progress_percent",
    "circulating_bps",
    "creation_preview",
    # Positions
    "ownership_bps",
    "redeemable_value",
    "build_position",
    "refundable_amount",
    "simulate_redemption",
    "simulate_contribution",
    "simulate_treasury_purchase",
    "founder_ownership_bps",
    "founder_share_trend",
    # Yields
    "harvest_split",
    "can_harvest",
    "harvest_holder_share",
    "dividend_share",
    "distribute_dividend",
    "simulate_yield_display",
    # Aggregation
    "PlatformStats",
    "Leaderboards",
    "platform_stats",
    "ranking_value",
    "rank_pledges",
    "leaderboards",
    "filter_pledges",
    "sort_pledges",
    "build_portfolio",
    "sort_positions",
    "pending_reward_positions",
    "aggregate_portfolio",
]
