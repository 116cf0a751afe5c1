"""Pledge metrics block.

One row per pledge snapshot with every derived metric a pledge page shows:
prices, funding progress, supply split and phase state. Fixed-point columns
hold exact Python ints (object dtype, they exceed int64); the *_units columns
are float conversions for display and plotting only.
"""

from typing import List

from .base import Block, BlockContext, exact_frame
from ..engine.phase import can_contribute, effective_phase, needs_finalization, seconds_remaining
from ..engine.pricing import (
    circulating_bps,
    floor_price,
    funding_progress_bps,
    ico_price,
    is_degenerate,
    remaining_capacity,
)
from ..engine.yields import can_harvest
from ..fixed_point import to_units
from ..schemas import EngineCFG, PledgeSnapshot

METRIC_COLUMNS = [
    "address",
    "name",
    "ticker",
    "phase",
    "effective_phase",
    "needs_finalization",
    "can_contribute",
    "funding_goal",
    "total_raised",
    "remaining_capacity",
    "funding_progress_bps",
    "seconds_remaining",
    "vault_balance",
    "treasury_shares",
    "circulating_supply",
    "circulating_bps",
    "ico_price",
    "floor_price",
    "floor_price_units",
    "degenerate",
    "accrued_yield",
    "can_harvest",
]

EXACT_COLUMNS = [
    "funding_goal",
    "total_raised",
    "remaining_capacity",
    "vault_balance",
    "treasury_shares",
    "circulating_supply",
    "ico_price",
    "floor_price",
    "accrued_yield",
]


class PledgeMetricsBlock(Block):
    """Derives per-pledge metrics.

    Inputs (from context):
        - pledge_snapshots: Sequence of PledgeSnapshot
        - as_of: Evaluation time (unix seconds) for phase and deadline metrics
        - engine_cfg (optional): EngineCFG, protocol defaults when absent

    Outputs (to context):
        - pledge_metrics: DataFrame with METRIC_COLUMNS, in input order
    """

    def __init__(
        self,
        snapshots_key: str = "pledge_snapshots",
        as_of_key: str = "as_of",
        config_key: str = "engine_cfg",
    ):
        self.snapshots_key = snapshots_key
        self.as_of_key = as_of_key
        self.config_key = config_key

    def inputs(self) -> List[str]:
        return [self.snapshots_key, self.as_of_key]

    def outputs(self) -> List[str]:
        return ["pledge_metrics"]

    def execute(self, context: BlockContext) -> None:
        snapshots: List[PledgeSnapshot] = context.get(self.snapshots_key)
        now: int = context.get(self.as_of_key)
        cfg = context.get(self.config_key) if context.has(self.config_key) else EngineCFG()

        rows = [self._metrics_row(snapshot, now, cfg) for snapshot in snapshots]
        context.set("pledge_metrics", exact_frame(rows, METRIC_COLUMNS, EXACT_COLUMNS))

    def _metrics_row(self, snapshot: PledgeSnapshot, now: int, cfg: EngineCFG) -> dict:
        price = floor_price(snapshot)
        return {
            "address": snapshot.address,
            "name": snapshot.name,
            "ticker": snapshot.ticker,
            "phase": snapshot.phase.label,
            "effective_phase": effective_phase(snapshot, now).label,
            "needs_finalization": needs_finalization(snapshot, now),
            "can_contribute": can_contribute(snapshot, now),
            "funding_goal": snapshot.funding_goal,
            "total_raised": snapshot.total_raised,
            "remaining_capacity": remaining_capacity(snapshot),
            "funding_progress_bps": funding_progress_bps(snapshot),
            "seconds_remaining": seconds_remaining(snapshot, now),
            "vault_balance": snapshot.vault_balance,
            "treasury_shares": snapshot.treasury_shares,
            "circulating_supply": snapshot.circulating_supply,
            "circulating_bps": circulating_bps(snapshot),
            "ico_price": ico_price(snapshot),
            "floor_price": price,
            "floor_price_units": float(to_units(price)),
            "degenerate": is_degenerate(snapshot),
            "accrued_yield": snapshot.accrued_yield,
            "can_harvest": can_harvest(snapshot, cfg),
        }
