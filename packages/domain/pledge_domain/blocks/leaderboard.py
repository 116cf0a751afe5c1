"""Leaderboard block.

Renders the platform leaderboards and platform totals as DataFrames. Every
board lists the full ranked sequence with a 1-based rank column; cutting it
to a top N is left to the consumer (df.head(n)).
"""

from dataclasses import asdict
from typing import List

import pandas as pd

from .base import Block, BlockContext, exact_frame
from ..engine.aggregation import leaderboards, platform_stats, ranking_value
from ..engine.pricing import circulating_bps, funding_progress_bps
from ..schemas import PledgeSnapshot

BOARD_COLUMNS = [
    "rank",
    "address",
    "name",
    "ticker",
    "vault_balance",
    "total_raised",
    "funding_goal",
    "funding_progress_bps",
    "circulating_bps",
]


def _board(snapshots: List[PledgeSnapshot]) -> pd.DataFrame:
    rows = [
        {
            "rank": rank,
            "address": s.address,
            "name": s.name,
            "ticker": s.ticker,
            "vault_balance": s.vault_balance,
            "total_raised": s.total_raised,
            "funding_goal": s.funding_goal,
            "funding_progress_bps": funding_progress_bps(s),
            "circulating_bps": circulating_bps(s),
        }
        for rank, s in enumerate(snapshots, start=1)
    ]
    return exact_frame(rows, BOARD_COLUMNS, ["vault_balance", "total_raised", "funding_goal"])


class LeaderboardBlock(Block):
    """Computes platform leaderboards and totals.

    Inputs (from context):
        - pledge_snapshots: Sequence of PledgeSnapshot
        - as_of: Evaluation time (unix seconds), used for the hot-funding board

    Outputs (to context):
        - leaderboard_by_vault: Active pledges by vault balance
        - leaderboard_by_raised: Pledges that have not failed, by total raised
        - leaderboard_hot_funding: Effectively-Funding pledges by progress to goal
        - leaderboard_by_circulation: Active pledges by circulating share of supply
        - platform_stats: Single-row DataFrame of platform totals

    Ranks follow engine.aggregation (exact ratios, ties by address); the bps
    columns are display values and may tie where ranks do not.
    """

    def __init__(self, snapshots_key: str = "pledge_snapshots", as_of_key: str = "as_of"):
        self.snapshots_key = snapshots_key
        self.as_of_key = as_of_key

    def inputs(self) -> List[str]:
        return [self.snapshots_key, self.as_of_key]

    def outputs(self) -> List[str]:
        return [
            "leaderboard_by_vault",
            "leaderboard_by_raised",
            "leaderboard_hot_funding",
            "leaderboard_by_circulation",
            "platform_stats",
        ]

    def execute(self, context: BlockContext) -> None:
        snapshots: List[PledgeSnapshot] = list(context.get(self.snapshots_key))
        now: int = context.get(self.as_of_key)

        boards = leaderboards(snapshots, now)
        context.set("leaderboard_by_vault", _board(boards.by_vault_balance))
        context.set("leaderboard_by_raised", _board(boards.by_total_raised))
        context.set("leaderboard_hot_funding", _board(boards.hot_funding))
        context.set("leaderboard_by_circulation", _board(boards.by_circulation))

        stats = asdict(platform_stats(snapshots))
        if boards.hot_funding:
            stats["top_funding_progress"] = float(ranking_value(boards.hot_funding[0], "funding_progress"))
        else:
            stats["top_funding_progress"] = 0.0
        context.set("platform_stats", exact_frame([stats], list(stats), ["total_raised", "total_vault_value"]))
