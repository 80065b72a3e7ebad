# src/ra_finalize/application/service.py
"""FinalizationService: turns a game's open bids into a settled allocation.

Run shape:
    filter -> resolve -> per participant (sorted): settle bids, materialize
    ownerships for all won bids, reconcile team, audit rejections ->
    repair winners still missing ownership rows -> period/auction status update.

Each participant is one savepoint + commit, and the game lock is renewed
before each one. A failing participant is rolled back, reported in `errors`,
and the batch carries on; `resume_after_participant_id` always names the last
participant that committed, so a run killed by an external timeout can be
continued with the logged cursor.
"""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ra_bidding.domain.models import Bid
from src.ra_bidding.domain.repository import BidRepositoryProtocol
from src.ra_bidding.infrastructure.persistence import BidRepository
from src.ra_common.datetime_utils import utc_now
from src.ra_common.enums import AcquisitionType, ActivityAction, AuctionStatus, BidStatus
from src.ra_common.errors import (
    BidAlreadySettledError,
    GameNotFoundError,
    ParticipantNotFoundError,
)
from src.ra_common.locks import GameLockHandle, game_lock
from src.ra_common.redis_client import get_redis
from src.ra_finalize.domain.materializer import materialize_roster
from src.ra_finalize.domain.models import (
    FinalizationResult,
    FinalizationStatus,
    ParticipantOutcome,
    Resolution,
)
from src.ra_finalize.domain.period_filter import filter_open_bids, select_period
from src.ra_finalize.domain.period_update import finalize_period_status
from src.ra_finalize.domain.reconciler import reconcile_team_state
from src.ra_finalize.domain.resolver import resolve_winners
from src.ra_game.domain.models import Game, MultiWinnerSelectionRules
from src.ra_game.domain.repository import ActivityLogProtocol, GameRepositoryProtocol
from src.ra_game.infrastructure.activity_log import ActivityLog
from src.ra_game.infrastructure.persistence import GameRepository
from src.ra_roster.domain.models import Participant
from src.ra_roster.domain.repository import (
    OwnershipRepositoryProtocol,
    ParticipantRepositoryProtocol,
)
from src.ra_roster.infrastructure.persistence import (
    OwnershipRepository,
    ParticipantRepository,
)

logger = logging.getLogger(__name__)

GameLock = Callable[[str], AbstractAsyncContextManager[GameLockHandle]]


@asynccontextmanager
async def redis_game_lock(game_id: str) -> AsyncIterator[GameLockHandle]:
    redis = await get_redis()
    async with game_lock(redis, game_id, settings.FINALIZE_LOCK_TTL_SECONDS) as held:
        yield held


class FinalizationService:
    def __init__(
        self,
        games: GameRepositoryProtocol | None = None,
        bids: BidRepositoryProtocol | None = None,
        participants: ParticipantRepositoryProtocol | None = None,
        ownerships: OwnershipRepositoryProtocol | None = None,
        activity: ActivityLogProtocol | None = None,
        lock: GameLock | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._games: GameRepositoryProtocol = games or GameRepository()
        self._bids: BidRepositoryProtocol = bids or BidRepository()
        self._participants: ParticipantRepositoryProtocol = (
            participants or ParticipantRepository()
        )
        self._ownerships: OwnershipRepositoryProtocol = ownerships or OwnershipRepository()
        self._activity: ActivityLogProtocol = activity or ActivityLog()
        self._lock: GameLock = lock or redis_game_lock
        self._clock = clock

    async def finalize(
        self,
        db: AsyncSession,
        game_id: str,
        period_name: str | None = None,
        resume_after_participant_id: str | None = None,
    ) -> FinalizationResult:
        """Raises ConfigurationError / CriticalIntegrityError; everything else is reported."""
        logger.info(
            "Finalize requested: game=%s period=%s resume_after=%s",
            game_id,
            period_name or "ALL",
            resume_after_participant_id,
        )
        async with self._lock(game_id) as held:
            return await self._finalize_locked(
                db, game_id, period_name, resume_after_participant_id, held
            )

    async def get_status(
        self, db: AsyncSession, game_id: str, period_name: str | None = None
    ) -> FinalizationStatus:
        """Who still has open bids in the period. Never writes.

        Without a name, the first period that is not finalized is reported.
        """
        game = await self._games.get_game(db, game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        if period_name is not None:
            period = select_period(game, period_name)
        else:
            period = next((p for p in game.periods if not p.is_finalized), None)

        if game.periods and period is None:
            return FinalizationStatus(
                game_id=game_id,
                period_name=None,
                period_status=None,
                auction_status=game.auction_status,
                completed=True,
            )

        in_period = [
            bid
            for bid in await self._bids.list_by_game(db, game_id)
            if period is None or period.contains(bid.placed_at)
        ]
        pending = sorted({b.participant_id for b in in_period if b.is_open})
        settled = sorted(
            {b.participant_id for b in in_period if not b.is_open} - set(pending)
        )
        cursor = None
        if pending:
            before_first = [pid for pid in settled if pid < pending[0]]
            cursor = before_first[-1] if before_first else None
        elif settled:
            cursor = settled[-1]

        return FinalizationStatus(
            game_id=game_id,
            period_name=period.name if period else None,
            period_status=period.status if period else None,
            auction_status=game.auction_status,
            completed=(
                period.is_finalized
                if period
                else game.auction_status == AuctionStatus.FINALIZED.value
            )
            and not pending,
            open_bids=sum(1 for b in in_period if b.is_open),
            pending_participant_ids=pending,
            settled_participant_ids=settled,
            resume_after_participant_id=cursor,
        )

    async def _finalize_locked(
        self,
        db: AsyncSession,
        game_id: str,
        period_name: str | None,
        resume_after: str | None,
        held: GameLockHandle,
    ) -> FinalizationResult:
        # Filtering
        game = await self._games.get_game(db, game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        rules = game.rules
        period = select_period(game, period_name)
        period_names = [p.name for p in game.periods]

        all_bids = await self._bids.list_by_game(db, game_id)
        open_bids = filter_open_bids(all_bids, period)
        logger.info(
            "Game %s: %d bids total, %d open in period %s",
            game_id,
            len(all_bids),
            len(open_bids),
            period_name or "ALL",
        )

        result = FinalizationResult(game_id=game_id, period_name=period_name)
        attempted: set[str] = set()
        if not open_bids:
            result.message = "No open bids; period finalized with zero winners"
            result.resume_after_participant_id = resume_after
            logger.info("Game %s period %s: zero-win finalization", game_id, period_name)
        else:
            # Resolving
            existing_wins = await self._bids.list_won_by_game(db, game_id)
            resolution = resolve_winners(rules, open_bids, existing_wins)
            result.total_bids = resolution.total_bids
            result.total_resources = resolution.total_resources
            # Reconciling
            attempted = await self._run_batch(db, game, resolution, resume_after, result, held)

        await self._repair_missing_ownerships(db, game, attempted, result, held)

        # UpdatingPeriodStatus
        try:
            await finalize_period_status(
                db,
                self._games,
                self._activity,
                game_id,
                period_name,
                period_names,
                result.summary(),
                settings.FINALIZE_PERIOD_UPDATE_ATTEMPTS,
                self._clock(),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if result.errors:
            result.message = f"Auction finalized with {len(result.errors)} error(s)"
        logger.info(
            "Game %s finalized: won=%d lost=%d cancelled=%d participants=%d/%d errors=%d",
            game_id,
            result.winners_assigned,
            result.losers,
            result.cancelled,
            result.processed_participants,
            result.total_participants,
            len(result.errors),
        )
        return result

    async def _run_batch(
        self,
        db: AsyncSession,
        game: Game,
        resolution: Resolution,
        resume_after: str | None,
        result: FinalizationResult,
        held: GameLockHandle,
    ) -> set[str]:
        """Settle every participant after the cursor. Returns the winners attempted."""
        participant_ids = resolution.participant_ids()
        result.total_participants = len(participant_ids)
        result.resume_after_participant_id = resume_after
        if resume_after is not None:
            participant_ids = [pid for pid in participant_ids if pid > resume_after]
            logger.info(
                "Resuming after %s: %d participant(s) left", resume_after, len(participant_ids)
            )

        attempted: set[str] = set()
        for participant_id in participant_ids:
            await held.renew()
            outcome = resolution.outcomes[participant_id]
            if outcome.wins:
                attempted.add(participant_id)
            try:
                async with db.begin_nested():
                    item_errors = await self._settle_participant(db, game, outcome)
                await db.commit()
            except Exception as e:
                logger.exception("Failed to finalize participant %s", participant_id)
                result.errors.append(f"participant {participant_id}: {e}")
                continue

            result.errors.extend(item_errors)
            result.winners_assigned += len(outcome.wins)
            result.losers += len(outcome.losses)
            result.cancelled += len(outcome.rejections)
            result.processed_participants += 1
            result.resume_after_participant_id = participant_id
            logger.info(
                "Participant %s settled (won=%d lost=%d cancelled=%d) cursor=%s",
                participant_id,
                len(outcome.wins),
                len(outcome.losses),
                len(outcome.rejections),
                participant_id,
            )
        return attempted

    async def _repair_missing_ownerships(
        self,
        db: AsyncSession,
        game: Game,
        skip: set[str],
        result: FinalizationResult,
        held: GameLockHandle,
    ) -> None:
        """Retry ownership rows that an earlier run failed to write.

        Winners handled by this run's batch are skipped: their rows were just
        attempted and any failure is already in `errors`.
        """
        missing = await self._ownerships.list_participants_missing_ownerships(db, game.id)
        for participant_id in missing:
            if participant_id in skip:
                continue
            await held.renew()
            try:
                async with db.begin_nested():
                    participant = await self._participants.get_participant(
                        db, game.id, participant_id
                    )
                    if participant is None:
                        raise ParticipantNotFoundError(game.id, participant_id)
                    item_errors = await self._rebuild_participant(db, game, participant)
                await db.commit()
            except Exception as e:
                logger.exception("Failed to repair ownerships of participant %s", participant_id)
                result.errors.append(f"participant {participant_id}: {e}")
                continue
            result.errors.extend(item_errors)
            if not item_errors:
                result.repaired_participants += 1
            logger.info("Participant %s: missing ownership rows rewritten", participant_id)

    async def _settle_participant(
        self, db: AsyncSession, game: Game, outcome: ParticipantOutcome
    ) -> list[str]:
        """One unit of work. Returns non-fatal ownership errors; raises on anything else."""
        participant = None
        if outcome.wins:
            participant = await self._participants.get_participant(
                db, game.id, outcome.participant_id
            )
            if participant is None:
                raise ParticipantNotFoundError(game.id, outcome.participant_id)

        for decision in outcome.decisions:
            await self._settle_bid(db, decision.bid, decision.outcome)

        errors: list[str] = []
        if participant is not None:
            errors = await self._rebuild_participant(db, game, participant)

        if outcome.rejections:
            await self._audit_rejections(db, game, outcome)
        return errors

    async def _rebuild_participant(
        self, db: AsyncSession, game: Game, participant: Participant
    ) -> list[str]:
        """Back every won bid with an active ownership row, then rewrite team state."""
        won = await self._bids.list_won_by_participant(db, game.id, participant.id)
        acquisition = (
            AcquisitionType.SELECTION if game.is_selection_based else AcquisitionType.AUCTION
        )
        _, errors = await materialize_roster(
            db, game.id, participant.id, won, acquisition, self._clock(), self._ownerships
        )
        await reconcile_team_state(
            db,
            participant,
            game.max_resources,
            self._bids,
            self._participants,
            self._ownerships,
        )
        return errors

    async def _settle_bid(self, db: AsyncSession, bid: Bid, target: BidStatus) -> None:
        bid.settle(target)
        if not await self._bids.settle(db, bid):
            raise BidAlreadySettledError(bid.id)

    async def _audit_rejections(
        self, db: AsyncSession, game: Game, outcome: ParticipantOutcome
    ) -> None:
        rules = game.rules
        max_budget = rules.max_budget if isinstance(rules, MultiWinnerSelectionRules) else None
        rejected = [
            {
                "bidId": d.bid.id,
                "riderNameId": d.bid.resource_id,
                "amount": d.bid.amount,
                "reason": d.outcome.value,
                "rosterSize": d.roster_size,
                "spentBudget": d.spent,
            }
            for d in outcome.rejections
        ]
        logger.info(
            "Participant %s: %d bid(s) rejected (%s)",
            outcome.participant_id,
            len(rejected),
            ", ".join(sorted({d.outcome.value for d in outcome.rejections})),
        )
        await self._activity.append(
            db,
            ActivityAction.BIDS_REJECTED.value,
            game.id,
            {
                "participantId": outcome.participant_id,
                "maxRiders": game.max_resources,
                "maxBudget": max_budget,
                "rejectedBids": rejected,
            },
        )
