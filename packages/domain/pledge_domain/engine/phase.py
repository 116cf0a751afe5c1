"""Phase state machine.

    Funding --(total_raised >= funding_goal)--------------> Active
    Funding --(now >= deadline and total_raised < goal)---> Failed

Active and Failed are terminal. Redemptions, harvests and refunds happen
inside a terminal phase without changing it.

The authoritative transition is applied by the ledger when someone calls its
finalize operation, so a snapshot's stored phase can lag reality. This module
therefore distinguishes the stored phase (snapshot.phase, never changed here)
from the transition the ledger is about to apply (pending_transition), and
every action predicate consults both.

Time is always an explicit `now` argument (unix seconds); nothing here reads
the clock.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from ..errors import InvalidPhaseTransitionError
from ..logging import get_engine_logger
from ..schemas import PledgePhase, PledgeSnapshot

logger = get_engine_logger(__name__)

_ALLOWED_TRANSITIONS: Dict[PledgePhase, FrozenSet[PledgePhase]] = {
    PledgePhase.FUNDING: frozenset({PledgePhase.ACTIVE, PledgePhase.FAILED}),
    PledgePhase.ACTIVE: frozenset(),
    PledgePhase.FAILED: frozenset(),
}

_SECONDS_PER_DAY = 86_400
_SECONDS_PER_HOUR = 3_600
_SECONDS_PER_MINUTE = 60


# =============================================================================
# Transitions
# =============================================================================

def validate_transition(from_phase: PledgePhase, to_phase: PledgePhase) -> None:
    """Check that from_phase -> to_phase is an edge of the phase machine.

    Raises:
        InvalidPhaseTransitionError: For any transition other than
            Funding -> Active or Funding -> Failed
    """
    from_phase = PledgePhase(from_phase)
    to_phase = PledgePhase(to_phase)
    if to_phase not in _ALLOWED_TRANSITIONS[from_phase]:
        raise InvalidPhaseTransitionError(
            f"Cannot transition pledge from {from_phase.label} to {to_phase.label}",
            from_phase=from_phase,
            to_phase=to_phase,
        )


def goal_reached(snapshot: PledgeSnapshot) -> bool:
    return snapshot.total_raised >= snapshot.funding_goal


def is_deadline_passed(snapshot: PledgeSnapshot, now: int) -> bool:
    return now >= snapshot.deadline


def pending_transition(snapshot: PledgeSnapshot, now: int) -> Optional[PledgePhase]:
    """Phase the ledger will move this pledge to once finalized, if any.

    Returns:
        PledgePhase.ACTIVE if the stored phase is Funding and the goal is met,
        PledgePhase.FAILED if Funding, the deadline has passed and the goal is unmet,
        None otherwise (including for terminal phases)
    """
    if snapshot.phase != PledgePhase.FUNDING:
        return None
    if goal_reached(snapshot):
        return PledgePhase.ACTIVE
    if is_deadline_passed(snapshot, now):
        return PledgePhase.FAILED
    return None


def needs_finalization(snapshot: PledgeSnapshot, now: int) -> bool:
    """True when the pledge is stored as Funding but has already failed.

    The stored phase keeps reporting Funding until someone finalizes it on the
    ledger; until then, funding UI must not be presented as actionable.
    """
    pending = pending_transition(snapshot, now)
    if pending == PledgePhase.FAILED:
        logger.debug(
            "pledge_needs_finalization",
            pledge=snapshot.address,
            deadline=snapshot.deadline,
            now=now,
        )
        return True
    return False


def effective_phase(snapshot: PledgeSnapshot, now: int) -> PledgePhase:
    """Stored phase with any pending transition applied."""
    pending = pending_transition(snapshot, now)
    return pending if pending is not None else PledgePhase(snapshot.phase)


# =============================================================================
# Deadline
# =============================================================================

@dataclass(frozen=True)
class TimeRemaining:
    """Time left in the funding window, broken into whole units."""

    days: int
    hours: int
    minutes: int
    ended: bool

    @property
    def total_seconds(self) -> int:
        return (
            self.days * _SECONDS_PER_DAY
            + self.hours * _SECONDS_PER_HOUR
            + self.minutes * _SECONDS_PER_MINUTE
        )


def seconds_remaining(snapshot: PledgeSnapshot, now: int) -> int:
    """Seconds until the deadline, 0 once it has passed."""
    return max(snapshot.deadline - now, 0)


def time_remaining(snapshot: PledgeSnapshot, now: int) -> TimeRemaining:
    remaining = seconds_remaining(snapshot, now)
    days, remaining = divmod(remaining, _SECONDS_PER_DAY)
    hours, remaining = divmod(remaining, _SECONDS_PER_HOUR)
    minutes = remaining // _SECONDS_PER_MINUTE
    return TimeRemaining(
        days=days,
        hours=hours,
        minutes=minutes,
        ended=is_deadline_passed(snapshot, now),
    )


# =============================================================================
# Action predicates
# =============================================================================

def can_contribute(snapshot: PledgeSnapshot, now: int) -> bool:
    """Contributions are open only while Funding with no transition pending."""
    return snapshot.phase == PledgePhase.FUNDING and pending_transition(snapshot, now) is None


def can_finalize(snapshot: PledgeSnapshot, now: int) -> bool:
    """Anyone may finalize a pledge whose funding has failed but is still stored as Funding."""
    return needs_finalization(snapshot, now)


def can_refund(snapshot: PledgeSnapshot) -> bool:
    """Refunds are paid once the ledger has recorded the pledge as Failed."""
    return snapshot.phase == PledgePhase.FAILED


def can_redeem(snapshot: PledgeSnapshot) -> bool:
    return snapshot.phase == PledgePhase.ACTIVE and snapshot.circulating_supply > 0


def can_claim_rewards(snapshot: PledgeSnapshot) -> bool:
    return snapshot.phase == PledgePhase.ACTIVE


def can_buy_treasury(snapshot: PledgeSnapshot) -> bool:
    return snapshot.phase == PledgePhase.ACTIVE and snapshot.treasury_shares > 0


def can_deposit_dividend(snapshot: PledgeSnapshot) -> bool:
    return snapshot.phase == PledgePhase.ACTIVE
