"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class GameType(str, Enum):
    AUCTIONEER = "auctioneer"
    WORLDTOUR_MANAGER = "worldtour-manager"
    MARGINAL_GAINS = "marginal-gains"


class BidStatus(str, Enum):
    ACTIVE = "active"
    OUTBID = "outbid"
    WON = "won"
    LOST = "lost"
    CANCELLED_DUPLICATE = "cancelled_duplicate"
    CANCELLED_TEAM_FULL = "cancelled_team_full"
    CANCELLED_OVER_BUDGET = "cancelled_over_budget"

    @property
    def is_open(self) -> bool:
        return self in _OPEN_BID_STATUSES

    @property
    def is_rejection(self) -> bool:
        return self in REJECTION_STATUSES

    def settle_to(self, target: "BidStatus") -> "BidStatus":
        """The only legal bid move: open -> terminal, exactly once.

        Raises ValueError for anything else; callers wrap it in a domain error.
        """
        if not self.is_open:
            raise ValueError(f"bid already settled as {self.value}")
        if target.is_open:
            raise ValueError(f"{target.value} is not a terminal status")
        return target


_OPEN_BID_STATUSES = frozenset({BidStatus.ACTIVE, BidStatus.OUTBID})

REJECTION_STATUSES = frozenset(
    {
        BidStatus.CANCELLED_DUPLICATE,
        BidStatus.CANCELLED_TEAM_FULL,
        BidStatus.CANCELLED_OVER_BUDGET,
    }
)


class PeriodStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    CLOSED = "closed"
    FINALIZED = "finalized"


class AuctionStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    FINALIZED = "finalized"


class AcquisitionType(str, Enum):
    AUCTION = "auction"
    SELECTION = "selection"


class ActivityAction(str, Enum):
    AUCTION_FINALIZED = "AUCTION_FINALIZED"
    BIDS_REJECTED = "BIDS_REJECTED"
    AUCTION_PERIOD_REOPENED = "AUCTION_PERIOD_REOPENED"
    AUCTION_SCHEDULE_UPDATED = "AUCTION_SCHEDULE_UPDATED"


class GameStatus(str, Enum):
    """Only the values the schedule sweep moves between; other lifecycle states pass through."""

    REGISTRATION = "registration"
    BIDDING = "bidding"
