"""Portfolio block.

Values one holder's balances against the matching pledge snapshots and sums
them into a portfolio summary.
"""

from typing import List, Optional

from .base import Block, BlockContext, exact_frame
from ..engine.aggregation import aggregate_portfolio, build_portfolio, sort_positions
from ..errors import InvariantViolationError
from ..schemas import HolderBalance, PledgeSnapshot, normalize_address
from ..source import pair_holdings

POSITION_COLUMNS = [
    "pledge",
    "name",
    "ticker",
    "phase",
    "share_balance",
    "ownership_bps",
    "redeemable_value",
    "contribution",
    "pending_rewards",
    "profit",
]
EXACT_COLUMNS = ["share_balance", "redeemable_value", "contribution", "pending_rewards", "profit"]


class PortfolioBlock(Block):
    """Builds a holder's positions and portfolio summary.

    Inputs (from context):
        - pledge_snapshots: Snapshots of (at least) every pledge held
        - holder_balances: HolderBalance records of a single holder (may be empty)
        - holder: Optional holder address, used when no balances name one

    Outputs (to context):
        - portfolio_positions: One row per non-empty position, sorted by
          redeemable value descending (ties by pledge address)
        - portfolio_summary: Single-row DataFrame with holder totals and
          per-phase counts ("count_<phase>") and values ("value_<phase>")

    A holder with no balances gets an empty positions frame and a zero
    summary row.

    Example:
        context.set("pledge_snapshots", snapshots)
        context.set("holder_balances", balances)
        PortfolioBlock().execute(context)

        context.get("portfolio_summary")["total_value"].iloc[0]
    """

    def __init__(
        self,
        snapshots_key: str = "pledge_snapshots",
        balances_key: str = "holder_balances",
        include_empty: bool = False,
        holder: Optional[str] = None,
        holder_key: str = "holder",
    ):
        self.snapshots_key = snapshots_key
        self.balances_key = balances_key
        self.include_empty = include_empty
        self.holder = holder
        self.holder_key = holder_key

    def inputs(self) -> List[str]:
        return [self.snapshots_key, self.balances_key]

    def outputs(self) -> List[str]:
        return ["portfolio_positions", "portfolio_summary"]

    def execute(self, context: BlockContext) -> None:
        snapshots: List[PledgeSnapshot] = context.get(self.snapshots_key)
        balances: List[HolderBalance] = list(context.get(self.balances_key))
        holder = self._holder(context, balances)

        positions = build_portfolio(pair_holdings(snapshots, balances), include_empty=self.include_empty)
        positions = sort_positions(positions, by="value")

        rows = [
            {
                "pledge": p.pledge,
                "name": p.name,
                "ticker": p.ticker,
                "phase": p.phase.label,
                "share_balance": p.share_balance,
                "ownership_bps": p.ownership_bps,
                "redeemable_value": p.redeemable_value,
                "contribution": p.contribution,
                "pending_rewards": p.pending_rewards,
                "profit": p.profit,
            }
            for p in positions
        ]
        context.set("portfolio_positions", exact_frame(rows, POSITION_COLUMNS, EXACT_COLUMNS))

        aggregate = aggregate_portfolio(holder, positions)
        summary = {
            "holder": aggregate.holder,
            "positions": aggregate.positions,
            "total_value": aggregate.total_value,
            "total_shares": aggregate.total_shares,
            "total_pending_rewards": aggregate.total_pending_rewards,
            "total_contribution": aggregate.total_contribution,
            "total_profit": aggregate.total_profit,
        }
        for label, count in aggregate.count_by_phase.items():
            summary[f"count_{label.lower()}"] = count
        for label, value in aggregate.value_by_phase.items():
            summary[f"value_{label.lower()}"] = value
        exact = [key for key in summary if key.startswith(("total_", "value_"))]
        context.set("portfolio_summary", exact_frame([summary], list(summary), exact))

    def _holder(self, context: BlockContext, balances: List[HolderBalance]) -> Optional[str]:
        holder = self.holder
        if holder is None and context.has(self.holder_key):
            holder = context.get(self.holder_key)

        holders = {normalize_address(b.holder) for b in balances}
        if holder is not None:
            holders.add(normalize_address(holder))
        if len(holders) > 1:
            raise InvariantViolationError(
                f"Portfolio balances belong to {len(holders)} different holders",
                field="holder",
                value=sorted(holders),
            )
        if holder is not None:
            return holder
        return balances[0].holder if balances else None
