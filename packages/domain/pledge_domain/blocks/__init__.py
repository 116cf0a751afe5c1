"""Computation blocks for pledge analytics.

Turns engine results into pandas DataFrames for tabular consumers.

Architecture:
    Snapshots (schemas) → Engine (pure functions) → Blocks → DataFrames

Available blocks:
- PledgeMetricsBlock: per-pledge prices, funding progress and phase state
- LeaderboardBlock: platform leaderboards and platform totals
- PortfolioBlock: one holder's positions and portfolio summary

Usage:
    from pledge_domain.blocks import BlockContext, BlockExecutor, LeaderboardBlock

    context = BlockContext()
    context.set("pledge_snapshots", snapshots)
    context.set("as_of", now)
    BlockExecutor([LeaderboardBlock()]).execute(context)

    context.get("leaderboard_by_vault").head(10)
"""

from .base import Block, BlockContext, BlockExecutor, CircularDependencyError
from .pledge_metrics import PledgeMetricsBlock
from .leaderboard import LeaderboardBlock
from .portfolio import PortfolioBlock

__all__ = [
    "Block",
    "BlockContext",
    "BlockExecutor",
    "CircularDependencyError",
    "PledgeMetricsBlock",
    "LeaderboardBlock",
    "PortfolioBlock",
]
