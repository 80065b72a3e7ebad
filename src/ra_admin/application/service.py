# src/ra_admin/application/service.py
"""Admin application service: period maintenance outside a finalize run."""
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ra_common.enums import ActivityAction, AuctionStatus, PeriodStatus
from src.ra_common.errors import GameNotFoundError, PeriodNotFoundError
from src.ra_finalize.domain.period_update import (
    ScheduleUpdate,
    apply_schedule_change,
    with_period_status,
)
from src.ra_game.domain.models import Game
from src.ra_game.domain.repository import ActivityLogProtocol, GameRepositoryProtocol
from src.ra_game.infrastructure.activity_log import ActivityLog
from src.ra_game.infrastructure.persistence import GameRepository

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self,
        games: GameRepositoryProtocol | None = None,
        activity: ActivityLogProtocol | None = None,
    ) -> None:
        self._games: GameRepositoryProtocol = games or GameRepository()
        self._activity: ActivityLogProtocol = activity or ActivityLog(actor="admin")

    async def reopen_period(
        self, db: AsyncSession, game_id: str, period_name: str
    ) -> dict[str, Any]:
        """Put a period back to 'closed' so the next finalize run picks it up.

        Bid statuses are left alone: a settled bid never goes back to open.
        """
        game = await self._games.get_game(db, game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        period = game.find_period(period_name)
        if period is None:
            raise PeriodNotFoundError(period_name)
        previous_status = period.status

        def reopen(fresh: Game) -> ScheduleUpdate:
            if fresh.find_period(period_name) is None:
                raise PeriodNotFoundError(period_name)
            periods = with_period_status(fresh.periods, period_name, PeriodStatus.CLOSED)
            return ScheduleUpdate(periods, AuctionStatus.ACTIVE.value)

        try:
            await apply_schedule_change(
                db,
                self._games,
                game_id,
                reopen,
                settings.FINALIZE_PERIOD_UPDATE_ATTEMPTS,
                expected_names=[p.name for p in game.periods],
            )
            await self._activity.append(
                db,
                ActivityAction.AUCTION_PERIOD_REOPENED.value,
                game_id,
                {
                    "gameName": game.name,
                    "periodName": period_name,
                    "previousStatus": previous_status,
                },
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Game %s period %s reopened (%s -> closed)", game_id, period_name, previous_status
        )
        return {
            "game_id": game_id,
            "period_name": period_name,
            "previous_status": previous_status,
            "status": PeriodStatus.CLOSED.value,
            "auction_status": AuctionStatus.ACTIVE.value,
        }
