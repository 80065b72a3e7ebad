"""Period / auction status transitions on the game's shared period list.

The period list is one JSONB array shared by every writer (finalize runs,
the schedule sweep, admin reopen). Every change goes through
apply_schedule_change:

  1. re-read the game right before writing
  2. compute the new list from that fresh copy
  3. verify no period was dropped or renamed (CriticalIntegrityError otherwise)
  4. conditional UPDATE keyed on games.version; on a lost race, start over
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.ra_common.enums import ActivityAction, AuctionStatus, PeriodStatus
from src.ra_common.errors import (
    ConcurrentUpdateError,
    CriticalIntegrityError,
    GameNotFoundError,
)
from src.ra_game.domain.models import Game, Period
from src.ra_game.domain.repository import ActivityLogProtocol, GameRepositoryProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleUpdate:
    periods: list[Period]
    auction_status: str
    game_status: str | None = None  # None leaves games.status as it is


ScheduleChange = Callable[[Game], ScheduleUpdate]


def verify_period_integrity(original: list[Period], updated: list[Period]) -> None:
    if len(updated) < len(original):
        msg = (
            f"Attempted to delete auction periods! "
            f"Original: {len(original)}, Updated: {len(updated)}"
        )
        logger.error(msg)
        raise CriticalIntegrityError(msg)
    updated_names = {p.name for p in updated}
    missing = [p.name for p in original if p.name not in updated_names]
    if missing:
        msg = f"Missing periods after update: {', '.join(missing)}"
        logger.error(msg)
        raise CriticalIntegrityError(msg)


def verify_names_still_present(current: list[Period], expected_names: Iterable[str]) -> None:
    """Guard against someone else having truncated the list since the run started."""
    present = {p.name for p in current}
    missing = sorted(set(expected_names) - present)
    if missing:
        msg = f"Periods disappeared since the run started: {', '.join(missing)}"
        logger.error(msg)
        raise CriticalIntegrityError(msg)


def with_period_status(
    periods: list[Period], period_name: str, status: PeriodStatus
) -> list[Period]:
    return [p.with_status(status) if p.name == period_name else p for p in periods]


def auction_status_after(periods: list[Period], current: str) -> str:
    if all(p.is_finalized for p in periods):
        return AuctionStatus.FINALIZED.value
    return current


def finalize_change(period_name: str | None) -> ScheduleChange:
    def change(game: Game) -> ScheduleUpdate:
        if period_name is None:
            periods = list(game.periods)
        else:
            if game.find_period(period_name) is None:
                raise CriticalIntegrityError(
                    f"Period {period_name} vanished from game {game.id} during finalization"
                )
            periods = with_period_status(game.periods, period_name, PeriodStatus.FINALIZED)
        return ScheduleUpdate(periods, auction_status_after(periods, game.auction_status))

    return change


async def apply_schedule_change(
    db: AsyncSession,
    games: GameRepositoryProtocol,
    game_id: str,
    change: ScheduleChange,
    max_attempts: int,
    expected_names: Iterable[str] = (),
    finalized_at: datetime | None = None,
) -> Game:
    """Returns the game as written. Raises before writing if integrity fails."""
    expected = list(expected_names)
    for attempt in range(1, max_attempts + 1):
        game = await games.get_game(db, game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        verify_names_still_present(game.periods, expected)

        update = change(game)
        updated = update.periods
        logger.debug(
            "Game %s periods: %d -> %d (attempt %d)",
            game_id,
            len(game.periods),
            len(updated),
            attempt,
        )
        verify_period_integrity(game.periods, updated)

        written = await games.update_schedule(
            db,
            game_id,
            game.version,
            updated,
            update.auction_status,
            finalized_at,
            game_status=update.game_status,
        )
        if written:
            game.periods = updated
            game.auction_status = update.auction_status
            if update.game_status is not None:
                game.status = update.game_status
            game.version += 1
            if finalized_at is not None:
                game.finalized_at = finalized_at
            return game
        logger.warning(
            "Game %s version %d changed underneath us, retrying", game_id, game.version
        )
    raise ConcurrentUpdateError(game_id, max_attempts)


async def finalize_period_status(
    db: AsyncSession,
    games: GameRepositoryProtocol,
    activity: ActivityLogProtocol,
    game_id: str,
    period_name: str | None,
    expected_names: Iterable[str],
    summary: dict[str, object],
    max_attempts: int,
    now: datetime,
) -> Game:
    """Mark the period finalized (and the auction, once every period is), then audit."""
    game = await apply_schedule_change(
        db,
        games,
        game_id,
        finalize_change(period_name),
        max_attempts,
        expected_names=expected_names,
        finalized_at=now,
    )
    if game.auction_status == AuctionStatus.FINALIZED.value:
        logger.info("All auction periods finalized, game %s auction finalized", game_id)
    await activity.append(
        db,
        ActivityAction.AUCTION_FINALIZED.value,
        game_id,
        {"gameName": game.name, "results": summary},
    )
    return game
