"""Bid domain model: pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime

from src.ra_common.enums import BidStatus
from src.ra_common.errors import InvalidBidTransitionError


@dataclass
class Bid:
    id: str
    game_id: str
    participant_id: str
    resource_id: str
    amount: int
    placed_at: datetime
    status: str = BidStatus.ACTIVE.value

    @property
    def is_open(self) -> bool:
        return BidStatus(self.status).is_open

    def settle(self, target: BidStatus) -> None:
        """Move an open bid to its terminal status; any other move raises."""
        try:
            self.status = BidStatus(self.status).settle_to(target).value
        except ValueError:
            raise InvalidBidTransitionError(self.id, self.status, target.value) from None
