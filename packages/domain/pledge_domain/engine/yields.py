"""Yield and dividend accounting.

Harvest:
    Accrued yield is split between circulating-share holders and the protocol
    (80/20 by default). The protocol share is computed by subtraction so the
    two parts always sum to the harvested amount exactly.

Dividends:
    A founder deposit is shared pro rata by circulating-share ownership AT THE
    TIME OF THE DEPOSIT. The deposit record carries that snapshot and it is the
    only snapshot used; a later snapshot with a different circulating supply
    would silently mispay holders.

Simulated yield:
    The animated ticker value is cosmetic. It is a separate type and every
    accounting function here refuses it.
"""

from typing import Dict, Iterable, Optional

from ..errors import InvariantViolationError, SimulatedValueError
from ..fixed_point import PERCENT_DENOMINATOR, mul_div, require_non_negative
from ..logging import get_engine_logger
from ..schemas import (
    DividendDeposit,
    EngineCFG,
    HarvestEvent,
    HarvestSplit,
    HolderBalance,
    PledgePhase,
    PledgeSnapshot,
    SimulatedYield,
    normalize_address,
)

logger = get_engine_logger(__name__)


def _require_real_amount(value, name: str) -> int:
    """Reject cosmetic values and negative amounts before they reach accounting."""
    if isinstance(value, SimulatedYield):
        logger.warning("simulated_value_rejected", field=name)
        raise SimulatedValueError(
            f"{name} is a simulated display value and cannot be used for accounting",
            context={"real_value": value.real_value, "display_value": value.display_value},
        )
    return require_non_negative(value, name)


# =============================================================================
# Harvest
# =============================================================================

def harvest_split(accrued_yield: int, cfg: Optional[EngineCFG] = None) -> HarvestSplit:
    """Split harvested yield between holders and the protocol.

    Example:
        accrued_yield = 10**15 (0.001 units):
            holder_share   = 8 * 10**14
            protocol_share = 2 * 10**14
    """
    cfg = cfg or EngineCFG()
    amount = _require_real_amount(accrued_yield, "accrued_yield")
    holder_share = mul_div(amount, cfg.holder_yield_pct, PERCENT_DENOMINATOR)
    return HarvestSplit(holder_share=holder_share, protocol_share=amount - holder_share)


def can_harvest(snapshot: PledgeSnapshot, cfg: Optional[EngineCFG] = None) -> bool:
    """Whether the harvest action should be offered.

    Below the threshold the accrued yield is still reported normally; only the
    action is suppressed.
    """
    cfg = cfg or EngineCFG()
    return (
        snapshot.phase == PledgePhase.ACTIVE
        and snapshot.accrued_yield >= cfg.harvest_threshold
    )


def harvest_holder_share(
    event: HarvestEvent,
    share_balance: int,
    cfg: Optional[EngineCFG] = None,
) -> int:
    """A holder's slice of the holders' part of a harvest, by ownership at harvest time."""
    require_non_negative(share_balance, "share_balance")
    split = harvest_split(event.accrued_yield, cfg)
    return mul_div(split.holder_share, share_balance, event.snapshot.circulating_supply)


# =============================================================================
# Dividends
# =============================================================================

def dividend_share(deposit: DividendDeposit, share_balance: int) -> int:
    """A holder's share of a dividend deposit.

    Uses the unrounded form of ownership_bps: the exact ratio
    share_balance / circulating_supply of the deposit's own snapshot, with no
    truncation to basis points. Only the resulting amount is truncated, so
    holders below one basis point still receive their share.
    """
    require_non_negative(share_balance, "share_balance")
    return mul_div(deposit.amount, share_balance, deposit.snapshot.circulating_supply)


def distribute_dividend(
    deposit: DividendDeposit,
    balances: Iterable[HolderBalance],
) -> Dict[str, int]:
    """Per-holder amounts for a dividend deposit.

    Args:
        deposit: Deposit with the snapshot at deposit time
        balances: Holder balances as of the deposit

    Returns:
        Mapping of lower-cased holder address to amount, in input order.
        Records of the same holder in different checksum casings are merged. The amounts sum to
        at most deposit.amount; the remainder is truncation dust.

    Raises:
        InvariantViolationError: If a balance belongs to another pledge, or the
            balances add up to more than the circulating supply at deposit time
    """
    pledge = normalize_address(deposit.snapshot.address)
    circulating = deposit.snapshot.circulating_supply
    allocations: Dict[str, int] = {}
    total_shares = 0

    for balance in balances:
        if normalize_address(balance.pledge) != pledge:
            logger.debug("pledge_mismatch", pledge=deposit.snapshot.address, balance_pledge=balance.pledge)
            raise InvariantViolationError(
                f"Balance for pledge {balance.pledge} included in dividend of {deposit.snapshot.address}",
                field="pledge",
                value=balance.pledge,
            )
        total_shares += balance.share_balance
        holder = normalize_address(balance.holder)
        allocations[holder] = allocations.get(holder, 0) + dividend_share(deposit, balance.share_balance)

    if total_shares > circulating:
        logger.debug("dividend_balances_exceed_supply", pledge=deposit.snapshot.address, total_shares=total_shares)
        raise InvariantViolationError(
            f"Holder balances ({total_shares}) exceed circulating supply ({circulating}) at deposit time",
            field="share_balance",
            value=total_shares,
            context={"pledge": deposit.snapshot.address},
        )

    logger.debug(
        "dividend_distributed",
        pledge=deposit.snapshot.address,
        amount=deposit.amount,
        holders=len(allocations),
        dust=deposit.amount - sum(allocations.values()),
    )
    return allocations


# =============================================================================
# Cosmetic yield ticker
# =============================================================================

def simulate_yield_display(
    real_accrued: int,
    elapsed_seconds: int,
    cfg: Optional[EngineCFG] = None,
) -> SimulatedYield:
    """Display value for an animated yield ticker between ledger refreshes.

    The returned record keeps the real ledger value separate from the
    fabricated display value. Passing it to harvest_split or any other
    accounting function raises SimulatedValueError.
    """
    cfg = cfg or EngineCFG()
    real = _require_real_amount(real_accrued, "real_accrued")
    require_non_negative(elapsed_seconds, "elapsed_seconds")
    return SimulatedYield(
        real_value=real,
        display_value=real + elapsed_seconds * cfg.simulated_yield_rate,
        elapsed_seconds=elapsed_seconds,
    )
