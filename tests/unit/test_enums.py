"""Tests for bid status transitions and enum values."""
import pytest

from src.ra_common.enums import (
    REJECTION_STATUSES,
    BidStatus,
    GameType,
    PeriodStatus,
)


class TestBidStatus:
    @pytest.mark.parametrize("status", [BidStatus.ACTIVE, BidStatus.OUTBID])
    def test_open_statuses(self, status: BidStatus) -> None:
        assert status.is_open

    @pytest.mark.parametrize(
        "status",
        [
            BidStatus.WON,
            BidStatus.LOST,
            BidStatus.CANCELLED_DUPLICATE,
            BidStatus.CANCELLED_TEAM_FULL,
            BidStatus.CANCELLED_OVER_BUDGET,
        ],
    )
    def test_terminal_statuses_are_not_open(self, status: BidStatus) -> None:
        assert not status.is_open

    def test_rejections_are_the_three_cancellations(self) -> None:
        assert REJECTION_STATUSES == {
            BidStatus.CANCELLED_DUPLICATE,
            BidStatus.CANCELLED_TEAM_FULL,
            BidStatus.CANCELLED_OVER_BUDGET,
        }
        assert not BidStatus.LOST.is_rejection

    def test_open_to_terminal_allowed(self) -> None:
        assert BidStatus.OUTBID.settle_to(BidStatus.WON) is BidStatus.WON
        assert BidStatus.ACTIVE.settle_to(BidStatus.CANCELLED_TEAM_FULL) is (
            BidStatus.CANCELLED_TEAM_FULL
        )

    def test_terminal_cannot_move_again(self) -> None:
        with pytest.raises(ValueError, match="already settled"):
            BidStatus.WON.settle_to(BidStatus.LOST)

    def test_open_target_rejected(self) -> None:
        with pytest.raises(ValueError, match="not a terminal"):
            BidStatus.ACTIVE.settle_to(BidStatus.OUTBID)


class TestValues:
    def test_db_strings(self) -> None:
        assert GameType.WORLDTOUR_MANAGER.value == "worldtour-manager"
        assert BidStatus.CANCELLED_OVER_BUDGET.value == "cancelled_over_budget"
        assert PeriodStatus.FINALIZED.value == "finalized"
