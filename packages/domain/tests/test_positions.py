"""Tests for the position engine.

Tests cover:
- Ownership and redeemable value against a snapshot
- Redemption, contribution and treasury purchase previews
- Typed rejections for invalid preview input
- Founder share tracking
"""

import pytest

from pledge_domain.engine.positions import (
    build_position,
    founder_ownership_bps,
    founder_share_trend,
    ownership_bps,
    redeemable_value,
    refundable_amount,
    simulate_contribution,
    simulate_redemption,
    simulate_treasury_purchase,
)
from pledge_domain.errors import InvariantViolationError
from pledge_domain.fixed_point import WAD
from pledge_domain.schemas import (
    TOTAL_SUPPLY,
    EngineCFG,
    HolderBalance,
    PledgePhase,
    PledgeSnapshot,
    RejectionReason,
)

PLEDGE = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
OTHER_PLEDGE = "0xe7f1725e7734ce288f8367e1bb143e90bb3f0512"
HOLDER = "0x70997970c51812dc3a010c7d01b50e0d17dc79c8"
DEADLINE = 1_750_000_000


def make_snapshot(**overrides) -> PledgeSnapshot:
    fields = dict(
        address=PLEDGE,
        name="Solar Co-op",
        ticker="SUN",
        funding_goal=10 * WAD,
        deadline=DEADLINE,
        founder_share_bps=5100,
    )
    fields.update(overrides)
    return PledgeSnapshot(**fields)


@pytest.fixture
def active():
    """Active pledge: 12 units in the vault, 600,000 shares circulating."""
    return make_snapshot(
        phase=PledgePhase.ACTIVE,
        total_raised=10 * WAD,
        vault_balance=12 * WAD,
        treasury_shares=400_000 * WAD,
    )


# =============================================================================
# Valuation
# =============================================================================

class TestValuation:

    def test_ownership_and_value(self, active):
        """Test ownership and redeemable value of a balance."""
        assert ownership_bps(60_000 * WAD, active) == 1_000
        assert redeemable_value(60_000 * WAD, active) == 12 * WAD // 10

    def test_zero_circulation_values_to_zero(self):
        """Test zero circulation values every balance at zero."""
        snapshot = make_snapshot(phase=PledgePhase.ACTIVE, vault_balance=WAD, treasury_shares=TOTAL_SUPPLY)
        assert ownership_bps(WAD, snapshot) == 0
        assert redeemable_value(WAD, snapshot) == 0

    def test_negative_balance_raises(self, active):
        """Test a negative balance raises."""
        with pytest.raises(InvariantViolationError):
            redeemable_value(-1, active)

    def test_build_position(self, active):
        """Test building a full position."""
        balance = HolderBalance(
            pledge=PLEDGE,
            holder=HOLDER,
            share_balance=60_000 * WAD,
            contribution=WAD,
            pending_rewards=10**15,
        )
        position = build_position(balance, active)
        assert position.ownership_bps == 1_000
        assert position.redeemable_value == 12 * WAD // 10
        assert position.circulating_supply == 600_000 * WAD
        assert position.phase == PledgePhase.ACTIVE
        assert position.profit == 12 * WAD // 10 + 10**15 - WAD

    def test_build_position_matches_checksum_casing(self, active):
        """Test balances match snapshots regardless of checksum casing."""
        balance = HolderBalance(pledge=PLEDGE.upper().replace("0X", "0x"), holder=HOLDER)
        assert build_position(balance, active).share_balance == 0

    def test_build_position_rejects_other_pledge(self, active):
        """Test a balance of another pledge is rejected."""
        balance = HolderBalance(pledge=OTHER_PLEDGE, holder=HOLDER, share_balance=WAD)
        with pytest.raises(InvariantViolationError):
            build_position(balance, active)


class TestRefundableAmount:

    def test_failed_pledge_refunds_contribution(self):
        """Test a Failed pledge refunds the contribution."""
        snapshot = make_snapshot(phase=PledgePhase.FAILED, total_raised=4 * WAD, vault_balance=4 * WAD)
        balance = HolderBalance(pledge=PLEDGE, holder=HOLDER, contribution=WAD)
        assert refundable_amount(balance, snapshot, DEADLINE + 1) == WAD

    def test_unfinalized_failure_refunds_contribution(self):
        """Test a failure not yet finalized still refunds."""
        snapshot = make_snapshot(total_raised=4 * WAD, vault_balance=4 * WAD)
        balance = HolderBalance(pledge=PLEDGE, holder=HOLDER, contribution=WAD)
        assert refundable_amount(balance, snapshot, DEADLINE + 1) == WAD

    def test_open_funding_refunds_nothing(self):
        """Test open funding refunds nothing."""
        snapshot = make_snapshot(total_raised=4 * WAD, vault_balance=4 * WAD)
        balance = HolderBalance(pledge=PLEDGE, holder=HOLDER, contribution=WAD)
        assert refundable_amount(balance, snapshot, DEADLINE - 1) == 0


# =============================================================================
# Redemption preview
# =============================================================================

class TestSimulateRedemption:

    def test_example_redemption(self, active):
        """Test the worked redemption example."""
        preview = simulate_redemption(active, 1_000 * WAD)
        assert preview.ok
        assert preview.floor_price == 2 * 10**13
        assert preview.payout == 2 * 10**16
        assert preview.resulting.circulating_supply == 599_000 * WAD
        assert preview.resulting.vault_balance == 11_980_000_000_000_000_000

    def test_input_snapshot_unchanged(self, active):
        """Test previews leave the input snapshot unchanged."""
        simulate_redemption(active, 1_000 * WAD)
        assert active.vault_balance == 12 * WAD
        assert active.treasury_shares == 400_000 * WAD

    @pytest.mark.parametrize("shares", [0, -WAD])
    def test_non_positive_rejected(self, active, shares):
        """Test a non-positive redemption is rejected."""
        preview = simulate_redemption(active, shares)
        assert not preview.ok
        assert preview.rejection.reason == RejectionReason.NON_POSITIVE_AMOUNT
        assert preview.resulting is None
        assert preview.payout == 0

    def test_exceeds_balance_rejected(self, active):
        """Test redeeming more than the balance is rejected."""
        preview = simulate_redemption(active, 10 * WAD, share_balance=5 * WAD)
        assert preview.rejection.reason == RejectionReason.EXCEEDS_BALANCE

    def test_exceeds_circulating_rejected(self, active):
        """Test redeeming more than circulates is rejected."""
        preview = simulate_redemption(active, 600_001 * WAD)
        assert preview.rejection.reason == RejectionReason.EXCEEDS_CIRCULATING_SUPPLY

    def test_redeem_everything(self, active):
        """Test redeeming every circulating share."""
        preview = simulate_redemption(active, 600_000 * WAD)
        assert preview.payout == 12 * WAD
        assert preview.resulting.circulating_supply == 0
        assert preview.resulting.vault_balance == 0


# =============================================================================
# Contribution preview
# =============================================================================

class TestSimulateContribution:

    def test_contribution(self):
        """Test a contribution preview."""
        snapshot = make_snapshot(total_raised=4 * WAD, vault_balance=4 * WAD)
        preview = simulate_contribution(snapshot, WAD, DEADLINE - 100)
        assert preview.ok
        assert preview.estimated_shares == 49_000 * WAD
        assert preview.ico_price == 20_408_163_265_306
        assert not preview.reaches_goal
        assert preview.resulting.total_raised == 5 * WAD
        assert preview.resulting.vault_balance == 5 * WAD

    def test_contribution_reaching_goal(self):
        """Test a contribution that reaches the goal."""
        snapshot = make_snapshot(total_raised=4 * WAD, vault_balance=4 * WAD)
        preview = simulate_contribution(snapshot, 6 * WAD, DEADLINE - 100)
        assert preview.reaches_goal
        # Stored phase is unchanged; the ledger applies the transition
        assert preview.resulting.phase == PledgePhase.FUNDING

    def test_non_positive_rejected(self):
        """Test a non-positive contribution is rejected."""
        preview = simulate_contribution(make_snapshot(), 0, DEADLINE - 100)
        assert preview.rejection.reason == RejectionReason.NON_POSITIVE_AMOUNT

    def test_after_deadline_rejected(self):
        """Test contributing after the deadline is rejected."""
        preview = simulate_contribution(make_snapshot(), WAD, DEADLINE + 1)
        assert preview.rejection.reason == RejectionReason.PHASE_CLOSED

    def test_active_pledge_rejected(self, active):
        """Test contributing to an Active pledge is rejected."""
        preview = simulate_contribution(active, WAD, DEADLINE - 100)
        assert preview.rejection.reason == RejectionReason.PHASE_CLOSED

    def test_below_minimum_rejected(self):
        """Test a contribution below the minimum is rejected."""
        preview = simulate_contribution(make_snapshot(), 10**13, DEADLINE - 100)
        assert preview.rejection.reason == RejectionReason.BELOW_MINIMUM

    def test_minimum_from_config(self):
        """Test the minimum contribution comes from config."""
        cfg = EngineCFG(min_contribution=0)
        preview = simulate_contribution(make_snapshot(), 10**13, DEADLINE - 100, cfg)
        assert preview.ok

    def test_exceeding_capacity_rejected(self):
        """Test a contribution above remaining capacity is rejected."""
        snapshot = make_snapshot(total_raised=9 * WAD, vault_balance=9 * WAD)
        preview = simulate_contribution(snapshot, 2 * WAD, DEADLINE - 100)
        assert preview.rejection.reason == RejectionReason.EXCEEDS_REMAINING_CAPACITY


# =============================================================================
# Treasury purchase preview
# =============================================================================

class TestSimulateTreasuryPurchase:

    def test_purchase(self, active):
        """Test a treasury purchase preview."""
        preview = simulate_treasury_purchase(active, 1_000 * WAD)
        assert preview.ok
        assert preview.cost == 2 * 10**16
        assert preview.cost_with_buffer == 2 * 10**16 + 2 * 10**14
        assert not preview.degenerate
        assert preview.resulting.treasury_shares == 399_000 * WAD
        assert preview.resulting.vault_balance == 12 * WAD + 2 * 10**16

    def test_non_positive_rejected(self, active):
        """Test a non-positive purchase is rejected."""
        preview = simulate_treasury_purchase(active, 0)
        assert preview.rejection.reason == RejectionReason.NON_POSITIVE_AMOUNT

    def test_exceeds_treasury_rejected(self, active):
        """Test buying more than the treasury holds is rejected."""
        preview = simulate_treasury_purchase(active, 400_001 * WAD)
        assert preview.rejection.reason == RejectionReason.EXCEEDS_TREASURY_SHARES

    def test_degenerate_purchase_costs_nothing(self):
        """Test a degenerate pledge sells at zero cost."""
        snapshot = make_snapshot(phase=PledgePhase.ACTIVE, vault_balance=WAD, treasury_shares=TOTAL_SUPPLY)
        preview = simulate_treasury_purchase(snapshot, 1_000 * WAD)
        assert preview.ok
        assert preview.degenerate
        assert preview.cost == 0
        assert preview.cost_with_buffer == 0
        assert preview.resulting.circulating_supply == 1_000 * WAD


# =============================================================================
# Founder share tracking
# =============================================================================

class TestFounderShare:

    def test_founder_ownership(self):
        """Test founder ownership in bps."""
        assert founder_ownership_bps(510_000 * WAD) == 5_100

    def test_trend_down_after_selling(self):
        """Test the trend turns down after the founder sells."""
        trend = founder_share_trend(500_000 * WAD, 510_000 * WAD)
        assert trend.current_bps == 5_000
        assert trend.previous_bps == 5_100
        assert trend.change_bps == -100
        assert trend.trend == "down"

    def test_trend_up(self):
        """Test the trend turns up after the founder buys."""
        assert founder_share_trend(520_000 * WAD, 510_000 * WAD).trend == "up"

    def test_trend_neutral_without_history(self):
        """Test the trend is neutral without history."""
        trend = founder_share_trend(510_000 * WAD)
        assert trend.change_bps == 0
        assert trend.trend == "neutral"
