"""Aggregation and ranking over collections of snapshots and positions.

All functions are pure and order-preserving: inputs are never reordered in
place, and every sort is stable and total (ties broken by address, ascending)
so the same batch always produces the same sequence. Rankings return the full
sorted sequence; truncating to a "top N" is the display layer's choice.

Ranking compares exact ratios (Fractions), never display-rounded percentages.

Snapshots in a batch may have been read at slightly different times. Each one
is evaluated on its own; no cross-snapshot consistency is assumed.
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import Callable, Dict, Iterable, List, Literal, Optional, Sequence, Tuple

from ..fixed_point import exact_ratio
from ..schemas import (
    TOTAL_SUPPLY,
    HolderBalance,
    HolderPosition,
    PledgePhase,
    PledgeSnapshot,
    PortfolioAggregate,
    normalize_address,
)
from .phase import effective_phase
from .positions import build_position

RankingKey = Literal["vault_balance", "total_raised", "funding_progress", "circulating"]
StatusFilter = Literal["all", "funding", "active", "failed"]
PledgeOrder = Literal["newest", "oldest", "most_funded", "ending_soon"]
PositionOrder = Literal["value", "ownership", "name"]

_STATUS_PHASES: Dict[str, PledgePhase] = {
    "funding": PledgePhase.FUNDING,
    "active": PledgePhase.ACTIVE,
    "failed": PledgePhase.FAILED,
}


# =============================================================================
# Platform statistics
# =============================================================================

@dataclass(frozen=True)
class PlatformStats:
    """Totals across every pledge on the platform."""

    total_pledges: int
    funding_pledges: int
    active_pledges: int
    failed_pledges: int
    total_raised: int
    total_vault_value: int


def platform_stats(snapshots: Iterable[PledgeSnapshot]) -> PlatformStats:
    """Platform totals.

    total_vault_value counts Active pledges only: Funding vaults hold
    refundable contributions and Failed vaults are being refunded.
    """
    counts = {phase: 0 for phase in PledgePhase}
    total = 0
    total_raised = 0
    total_vault_value = 0
    for snapshot in snapshots:
        total += 1
        counts[snapshot.phase] += 1
        total_raised += snapshot.total_raised
        if snapshot.phase == PledgePhase.ACTIVE:
            total_vault_value += snapshot.vault_balance

    return PlatformStats(
        total_pledges=total,
        funding_pledges=counts[PledgePhase.FUNDING],
        active_pledges=counts[PledgePhase.ACTIVE],
        failed_pledges=counts[PledgePhase.FAILED],
        total_raised=total_raised,
        total_vault_value=total_vault_value,
    )


# =============================================================================
# Ranking
# =============================================================================

def ranking_value(snapshot: PledgeSnapshot, key: RankingKey) -> Fraction:
    """Exact value a snapshot is ranked by."""
    if key == "vault_balance":
        return Fraction(snapshot.vault_balance)
    if key == "total_raised":
        return Fraction(snapshot.total_raised)
    if key == "funding_progress":
        return exact_ratio(snapshot.total_raised, snapshot.funding_goal)
    if key == "circulating":
        return exact_ratio(snapshot.circulating_supply, TOTAL_SUPPLY)
    raise ValueError(f"Unknown ranking key: {key!r}")


def _descending(value: Callable[[PledgeSnapshot], Fraction]):
    return lambda s: (-value(s), normalize_address(s.address))


def rank_pledges(snapshots: Iterable[PledgeSnapshot], key: RankingKey) -> List[PledgeSnapshot]:
    """Every snapshot, highest first by `key`, ties by address ascending."""
    if key not in ("vault_balance", "total_raised", "funding_progress", "circulating"):
        raise ValueError(f"Unknown ranking key: {key!r}")
    return sorted(snapshots, key=_descending(lambda s: ranking_value(s, key)))


@dataclass(frozen=True)
class Leaderboards:
    """Full ranked sequences for the four platform leaderboards."""

    by_vault_balance: List[PledgeSnapshot]
    by_total_raised: List[PledgeSnapshot]
    hot_funding: List[PledgeSnapshot]
    by_circulation: List[PledgeSnapshot]


def leaderboards(snapshots: Sequence[PledgeSnapshot], now: int) -> Leaderboards:
    """Compute the platform leaderboards.

    - Most valuable (vault balance) and most decentralized (circulating share):
      Active pledges
    - Most raised: every pledge that has not failed
    - Hot funding (progress toward goal): pledges still effectively Funding,
      i.e. excluding stale Funding pledges whose deadline already failed them
    """
    active = [s for s in snapshots if s.phase == PledgePhase.ACTIVE]
    not_failed = [s for s in snapshots if s.phase != PledgePhase.FAILED]
    funding = [s for s in snapshots if effective_phase(s, now) == PledgePhase.FUNDING]

    return Leaderboards(
        by_vault_balance=rank_pledges(active, "vault_balance"),
        by_total_raised=rank_pledges(not_failed, "total_raised"),
        hot_funding=rank_pledges(funding, "funding_progress"),
        by_circulation=rank_pledges(active, "circulating"),
    )


# =============================================================================
# Filtering and sorting
# =============================================================================

def filter_pledges(
    snapshots: Iterable[PledgeSnapshot],
    status: StatusFilter = "all",
    search: str = "",
    now: Optional[int] = None,
) -> List[PledgeSnapshot]:
    """Filter by phase and a case-insensitive search over name, ticker and address.

    When `now` is given the status filter uses the effective phase, so a
    Funding pledge whose deadline failed it is listed under "failed".
    """
    if status != "all" and status not in _STATUS_PHASES:
        raise ValueError(f"Unknown status filter: {status!r}")

    query = search.strip().lower()
    result = []
    for snapshot in snapshots:
        if status != "all":
            phase = effective_phase(snapshot, now) if now is not None else snapshot.phase
            if phase != _STATUS_PHASES[status]:
                continue
        if query and not (
            query in snapshot.name.lower()
            or query in snapshot.ticker.lower()
            or query in snapshot.address.lower()
        ):
            continue
        result.append(snapshot)
    return result


def sort_pledges(snapshots: Iterable[PledgeSnapshot], order: PledgeOrder = "newest") -> List[PledgeSnapshot]:
    """Sort for listing pages. Ties by address ascending."""
    if order == "newest":
        key = lambda s: (-s.created_at, normalize_address(s.address))
    elif order == "oldest":
        key = lambda s: (s.created_at, normalize_address(s.address))
    elif order == "most_funded":
        key = lambda s: (-s.total_raised, normalize_address(s.address))
    elif order == "ending_soon":
        key = lambda s: (s.deadline, normalize_address(s.address))
    else:
        raise ValueError(f"Unknown pledge order: {order!r}")
    return sorted(snapshots, key=key)


# =============================================================================
# Portfolio
# =============================================================================

def build_portfolio(
    holdings: Iterable[Tuple[PledgeSnapshot, HolderBalance]],
    include_empty: bool = False,
) -> List[HolderPosition]:
    """Value each (snapshot, balance) pair; positions with no shares are skipped by default."""
    positions = []
    for snapshot, balance in holdings:
        if balance.share_balance == 0 and not include_empty:
            continue
        positions.append(build_position(balance, snapshot))
    return positions


def sort_positions(positions: Iterable[HolderPosition], by: PositionOrder = "value") -> List[HolderPosition]:
    """Sort holdings by redeemable value, ownership (exact ratio) or name. Ties by pledge address."""
    if by == "value":
        key = lambda p: (-p.redeemable_value, normalize_address(p.pledge))
    elif by == "ownership":
        key = lambda p: (-exact_ratio(p.share_balance, p.circulating_supply), normalize_address(p.pledge))
    elif by == "name":
        key = lambda p: (p.name.casefold(), normalize_address(p.pledge))
    else:
        raise ValueError(f"Unknown position order: {by!r}")
    return sorted(positions, key=key)


def pending_reward_positions(positions: Iterable[HolderPosition]) -> List[HolderPosition]:
    """Positions with unclaimed rewards, in input order."""
    return [p for p in positions if p.pending_rewards > 0]


def aggregate_portfolio(holder: Optional[str], positions: Iterable[HolderPosition]) -> PortfolioAggregate:
    """Pointwise sums of a holder's positions."""
    count = 0
    total_value = 0
    total_shares = 0
    total_pending = 0
    total_contribution = 0
    count_by_phase = {phase.label: 0 for phase in PledgePhase}
    value_by_phase = {phase.label: 0 for phase in PledgePhase}

    for position in positions:
        label = PledgePhase(position.phase).label
        count += 1
        total_value += position.redeemable_value
        total_shares += position.share_balance
        total_pending += position.pending_rewards
        total_contribution += position.contribution
        count_by_phase[label] += 1
        value_by_phase[label] += position.redeemable_value

    return PortfolioAggregate(
        holder=holder,
        positions=count,
        total_value=total_value,
        total_shares=total_shares,
        total_pending_rewards=total_pending,
        total_contribution=total_contribution,
        count_by_phase=count_by_phase,
        value_by_phase=value_by_phase,
    )
