"""Domain models for ra_finalize: resolution output and the run report."""

from dataclasses import dataclass, field

from src.ra_bidding.domain.models import Bid
from src.ra_common.enums import BidStatus


@dataclass(frozen=True)
class BidDecision:
    """Outcome the resolver picked for one open bid.

    roster_size / spent are the participant's running totals at the moment a
    rejection was decided (selection games only).
    """

    bid: Bid
    outcome: BidStatus
    roster_size: int | None = None
    spent: int | None = None


@dataclass
class ParticipantOutcome:
    participant_id: str
    decisions: list[BidDecision] = field(default_factory=list)

    @property
    def wins(self) -> list[Bid]:
        return [d.bid for d in self.decisions if d.outcome is BidStatus.WON]

    @property
    def losses(self) -> list[Bid]:
        return [d.bid for d in self.decisions if d.outcome is BidStatus.LOST]

    @property
    def rejections(self) -> list[BidDecision]:
        return [d for d in self.decisions if d.outcome.is_rejection]


@dataclass
class Resolution:
    outcomes: dict[str, ParticipantOutcome]
    total_bids: int
    total_resources: int

    def participant_ids(self) -> list[str]:
        """Lexicographic order keeps batch runs reproducible and resumable."""
        return sorted(self.outcomes)


@dataclass
class FinalizationResult:
    game_id: str
    period_name: str | None
    success: bool = True
    message: str = "Auction finalized successfully"
    total_bids: int = 0
    total_resources: int = 0
    winners_assigned: int = 0
    losers: int = 0
    cancelled: int = 0
    total_participants: int = 0
    processed_participants: int = 0
    repaired_participants: int = 0
    resume_after_participant_id: str | None = None
    errors: list[str] = field(default_factory=list)

    def summary(self) -> dict[str, object]:
        return {
            "periodName": self.period_name,
            "totalBids": self.total_bids,
            "totalRiders": self.total_resources,
            "winnersAssigned": self.winners_assigned,
            "losersRefunded": self.losers,
            "cancelled": self.cancelled,
            "totalParticipants": self.total_participants,
            "processedParticipants": self.processed_participants,
            "repairedParticipants": self.repaired_participants,
            "resumeAfterParticipantId": self.resume_after_participant_id,
            "errors": list(self.errors),
        }


@dataclass
class FinalizationStatus:
    """Read-only progress view of a period's finalization."""

    game_id: str
    period_name: str | None
    period_status: str | None
    auction_status: str
    completed: bool
    open_bids: int = 0
    pending_participant_ids: list[str] = field(default_factory=list)
    settled_participant_ids: list[str] = field(default_factory=list)
    resume_after_participant_id: str | None = None
