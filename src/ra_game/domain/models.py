"""Domain models for ra_game: pure dataclasses plus the rules variants.

The game type decides which rules variant applies. Each variant carries only
the limits that matter for it, so the resolver never checks for a missing
budget at runtime.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from src.ra_common.datetime_utils import as_utc, to_iso
from src.ra_common.enums import AuctionStatus, GameType, PeriodStatus
from src.ra_common.errors import UnsupportedGameFormatError


@dataclass(frozen=True)
class SingleWinnerAuctionRules:
    """One winner per resource; highest amount wins, earliest bid breaks ties."""

    max_resources: int
    max_budget: int


@dataclass(frozen=True)
class MultiWinnerSelectionRules:
    """Many owners per resource; each participant bounded by roster and budget."""

    max_resources: int
    max_budget: int  # 0 -> no budget cap

    @property
    def has_budget_cap(self) -> bool:
        return self.max_budget > 0


GameRules = SingleWinnerAuctionRules | MultiWinnerSelectionRules


def rules_for(game_type: str, max_resources: int, max_budget: int | None) -> GameRules:
    """Map a stored game type onto its rules variant."""
    try:
        kind = GameType(game_type)
    except ValueError:
        raise UnsupportedGameFormatError(game_type) from None
    if kind is GameType.AUCTIONEER:
        return SingleWinnerAuctionRules(
            max_resources=max_resources, max_budget=max_budget or 0
        )
    return MultiWinnerSelectionRules(
        max_resources=max_resources, max_budget=max_budget or 0
    )


@dataclass(frozen=True)
class Period:
    name: str
    start_at: datetime
    end_at: datetime
    status: str = PeriodStatus.PENDING.value
    finalize_at: datetime | None = None
    # Keys we don't model (labels, UI hints) round-trip untouched.
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_finalized(self) -> bool:
        return self.status == PeriodStatus.FINALIZED.value

    def contains(self, moment: datetime) -> bool:
        """Inclusive on both ends."""
        return self.start_at <= moment <= self.end_at

    def with_status(self, status: PeriodStatus) -> "Period":
        return replace(self, status=status.value)

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> "Period":
        known = {"name", "startDate", "endDate", "finalizeDate", "status"}
        finalize_at = raw.get("finalizeDate")
        return cls(
            name=raw["name"],
            start_at=as_utc(raw["startDate"]),
            end_at=as_utc(raw["endDate"]),
            status=raw.get("status") or PeriodStatus.PENDING.value,
            finalize_at=as_utc(finalize_at) if finalize_at else None,
            extra={k: v for k, v in raw.items() if k not in known},
        )

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.extra)
        data.update(
            {
                "name": self.name,
                "startDate": to_iso(self.start_at),
                "endDate": to_iso(self.end_at),
                "status": self.status,
            }
        )
        if self.finalize_at is not None:
            data["finalizeDate"] = to_iso(self.finalize_at)
        return data


@dataclass
class Game:
    id: str
    name: str
    game_type: str
    max_resources: int
    max_budget: int | None
    periods: list[Period]
    auction_status: str
    status: str
    version: int
    finalized_at: datetime | None = None

    @property
    def rules(self) -> GameRules:
        return rules_for(self.game_type, self.max_resources, self.max_budget)

    @property
    def is_selection_based(self) -> bool:
        return isinstance(self.rules, MultiWinnerSelectionRules)

    def find_period(self, name: str) -> Period | None:
        return next((p for p in self.periods if p.name == name), None)
