"""Domain models for ra_roster: pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.ra_common.datetime_utils import to_iso


@dataclass(frozen=True)
class TeamEntry:
    """One resource in a participant's serialized roster snapshot."""

    resource_id: str
    price_paid: int
    acquired_at: datetime

    def to_json(self) -> dict[str, Any]:
        return {
            "riderNameId": self.resource_id,
            "pricePaid": self.price_paid,
            "acquiredAt": to_iso(self.acquired_at),
        }


@dataclass
class Participant:
    id: str
    game_id: str
    user_id: str
    spent_budget: int = 0
    team: list[TeamEntry] = field(default_factory=list)
    roster_size: int = 0
    roster_complete: bool = False


@dataclass
class ResourceOwnership:
    id: str
    game_id: str
    participant_id: str
    resource_id: str
    price_paid: int
    acquired_at: datetime
    acquisition_type: str
    active: bool = True
    benched: bool = False
    points_scored: int = 0
    stages_participated: int = 0
