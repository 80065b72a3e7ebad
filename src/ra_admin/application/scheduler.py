# src/ra_admin/application/scheduler.py
"""Period schedule sweep, meant to be hit by an external cron every minute.

For every game with auction periods:
  - pending -> active once start_at has passed (and end_at has not); the
    first period going active also moves the game from registration to bidding
  - active  -> closed once end_at has passed and finalize_at is still ahead
  - finalize_at reached on an active or closed period -> run
    FinalizationService.finalize; if some participants were not processed, run
    it once more. The retry passes no cursor: participants the first pass
    settled have no open bids left, so only the failed ones are picked up.

One game failing never stops the sweep, except for CriticalIntegrityError,
which always propagates.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ra_common.enums import ActivityAction, GameStatus, PeriodStatus
from src.ra_common.errors import CriticalIntegrityError
from src.ra_finalize.application.service import FinalizationService
from src.ra_finalize.domain.period_update import ScheduleUpdate, apply_schedule_change
from src.ra_game.domain.models import Game, Period
from src.ra_game.domain.repository import ActivityLogProtocol, GameRepositoryProtocol
from src.ra_game.infrastructure.activity_log import ActivityLog
from src.ra_game.infrastructure.persistence import GameRepository

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    games_checked: int = 0
    status_updates: int = 0
    finalizations_triggered: int = 0
    finalization_retries: int = 0
    finalizations: list[dict[str, object]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def advance_period(period: Period, now: datetime) -> Period:
    finalize_reached = period.finalize_at is not None and now >= period.finalize_at
    if period.status == PeriodStatus.PENDING.value and period.start_at <= now < period.end_at:
        return period.with_status(PeriodStatus.ACTIVE)
    if (
        period.status == PeriodStatus.ACTIVE.value
        and now >= period.end_at
        and not finalize_reached
    ):
        return period.with_status(PeriodStatus.CLOSED)
    return period


def advance_schedule(periods: list[Period], now: datetime) -> list[Period]:
    return [advance_period(p, now) for p in periods]


def due_for_finalization(periods: list[Period], now: datetime) -> list[Period]:
    runnable = (PeriodStatus.ACTIVE.value, PeriodStatus.CLOSED.value)
    return [
        p
        for p in periods
        if p.finalize_at is not None and now >= p.finalize_at and p.status in runnable
    ]


def game_status_after(game: Game, periods: list[Period]) -> str | None:
    """Registration ends when a period first goes active; None means no change."""
    if game.status != GameStatus.REGISTRATION.value:
        return None
    before = {p.name: p.status for p in game.periods}
    went_active = any(
        p.status == PeriodStatus.ACTIVE.value
        and before.get(p.name) == PeriodStatus.PENDING.value
        for p in periods
    )
    return GameStatus.BIDDING.value if went_active else None


class ScheduleSweeper:
    def __init__(
        self,
        finalizer: FinalizationService | None = None,
        games: GameRepositoryProtocol | None = None,
        activity: ActivityLogProtocol | None = None,
    ) -> None:
        self._finalizer = finalizer or FinalizationService()
        self._games: GameRepositoryProtocol = games or GameRepository()
        self._activity: ActivityLogProtocol = activity or ActivityLog(actor="cron-job")

    async def sweep(self, db: AsyncSession, now: datetime) -> SweepReport:
        report = SweepReport()
        games = await self._games.list_games_with_periods(db)
        report.games_checked = len(games)
        logger.info("Schedule sweep at %s: %d game(s) with periods", now.isoformat(), len(games))

        for game in games:
            try:
                await self._sweep_game(db, game, now, report)
            except CriticalIntegrityError:
                raise
            except Exception as e:
                logger.exception("Schedule sweep failed for game %s", game.id)
                report.errors.append(f"game {game.id}: {e}")
        return report

    async def _sweep_game(
        self, db: AsyncSession, game: Game, now: datetime, report: SweepReport
    ) -> None:
        if advance_schedule(game.periods, now) != game.periods:
            changed = await self._write_transitions(db, game, now)
            report.status_updates += changed

        for period in due_for_finalization(game.periods, now):
            logger.info("Period %s of game %s reached its finalize time", period.name, game.id)
            result = await self._finalizer.finalize(db, game.id, period.name)
            report.finalizations_triggered += 1
            report.finalizations.append({"gameId": game.id, **result.summary()})
            if result.processed_participants < result.total_participants:
                logger.warning(
                    "Game %s period %s: %d/%d participants processed, retrying once",
                    game.id,
                    period.name,
                    result.processed_participants,
                    result.total_participants,
                )
                retry = await self._finalizer.finalize(db, game.id, period.name)
                report.finalization_retries += 1
                report.finalizations.append(
                    {"gameId": game.id, "retry": True, **retry.summary()}
                )

    async def _write_transitions(self, db: AsyncSession, game: Game, now: datetime) -> int:
        def advance(fresh: Game) -> ScheduleUpdate:
            periods = advance_schedule(fresh.periods, now)
            return ScheduleUpdate(
                periods, fresh.auction_status, game_status=game_status_after(fresh, periods)
            )

        status_before = game.status
        try:
            written = await apply_schedule_change(
                db,
                self._games,
                game.id,
                advance,
                settings.FINALIZE_PERIOD_UPDATE_ATTEMPTS,
                expected_names=[p.name for p in game.periods],
            )
            before = {p.name: p.status for p in game.periods}
            transitions = [
                {"periodName": p.name, "from": before.get(p.name), "to": p.status}
                for p in written.periods
                if before.get(p.name) != p.status
            ]
            details: dict[str, object] = {"transitions": transitions}
            if written.status != status_before:
                details["gameStatus"] = {"from": status_before, "to": written.status}
            await self._activity.append(
                db,
                ActivityAction.AUCTION_SCHEDULE_UPDATED.value,
                game.id,
                details,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        for t in transitions:
            logger.info(
                "Game %s period %s: %s -> %s", game.id, t["periodName"], t["from"], t["to"]
            )
        if written.status != status_before:
            logger.info("Game %s: %s -> %s", game.id, status_before, written.status)
        game.periods = written.periods
        game.status = written.status
        return len(transitions)
