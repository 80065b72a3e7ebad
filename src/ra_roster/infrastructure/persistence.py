# src/ra_roster/infrastructure/persistence.py
"""Participant and ownership repositories: raw SQL persistence."""
import json
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ra_roster.domain.models import Participant, ResourceOwnership

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

# team is not selected: it is a derived cache that finalization always
# rebuilds from resource_ownerships, and old rows may hold unparseable values.
_GET_PARTICIPANT_SQL = text("""
    SELECT id, game_id, user_id, spent_budget, roster_size, roster_complete
    FROM game_participants
    WHERE game_id = :game_id AND id = :participant_id
""")

_SAVE_TEAM_STATE_SQL = text("""
    UPDATE game_participants
    SET team = CAST(:team AS JSONB),
        spent_budget = :spent_budget,
        roster_size = :roster_size,
        roster_complete = :roster_complete
    WHERE id = :id
""")

_OWNERSHIP_COLUMNS = """
    id, game_id, participant_id, resource_id, price_paid, acquired_at,
    acquisition_type, active, benched, points_scored, stages_participated
"""

_LIST_ACTIVE_OWNERSHIPS_SQL = text(f"""
    SELECT {_OWNERSHIP_COLUMNS}
    FROM resource_ownerships
    WHERE game_id = :game_id AND participant_id = :participant_id AND active
    ORDER BY acquired_at ASC, id ASC
""")

_GET_OWNERSHIP_SQL = text(f"""
    SELECT {_OWNERSHIP_COLUMNS}
    FROM resource_ownerships
    WHERE game_id = :game_id
      AND participant_id = :participant_id
      AND resource_id = :resource_id
""")

_REACTIVATE_OWNERSHIP_SQL = text("""
    UPDATE resource_ownerships
    SET active = TRUE, price_paid = :price_paid, acquired_at = :acquired_at
    WHERE id = :id AND NOT active
""")

# Winners whose won bids are not all backed by an active ownership row.
_MISSING_OWNERSHIP_PARTICIPANTS_SQL = text("""
    SELECT DISTINCT b.participant_id
    FROM bids b
    WHERE b.game_id = :game_id
      AND b.status = 'won'
      AND NOT EXISTS (
          SELECT 1 FROM resource_ownerships o
          WHERE o.game_id = b.game_id
            AND o.participant_id = b.participant_id
            AND o.resource_id = b.resource_id
            AND o.active
      )
    ORDER BY b.participant_id
""")

# ON CONFLICT keeps creation idempotent even if two writers pass the get() check.
_INSERT_OWNERSHIP_SQL = text("""
    INSERT INTO resource_ownerships (
        id, game_id, participant_id, resource_id, price_paid, acquired_at,
        acquisition_type, active, benched, points_scored, stages_participated
    )
    VALUES (
        :id, :game_id, :participant_id, :resource_id, :price_paid, :acquired_at,
        :acquisition_type, :active, :benched, :points_scored, :stages_participated
    )
    ON CONFLICT (game_id, participant_id, resource_id) DO NOTHING
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_participant(row: Any) -> Participant:
    return Participant(
        id=row.id,
        game_id=row.game_id,
        user_id=row.user_id,
        spent_budget=row.spent_budget,
        roster_size=row.roster_size,
        roster_complete=row.roster_complete,
    )


def _row_to_ownership(row: Any) -> ResourceOwnership:
    return ResourceOwnership(
        id=row.id,
        game_id=row.game_id,
        participant_id=row.participant_id,
        resource_id=row.resource_id,
        price_paid=row.price_paid,
        acquired_at=row.acquired_at,
        acquisition_type=row.acquisition_type,
        active=row.active,
        benched=row.benched,
        points_scored=row.points_scored,
        stages_participated=row.stages_participated,
    )


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class ParticipantRepository:
    async def get_participant(
        self, db: AsyncSession, game_id: str, participant_id: str
    ) -> Participant | None:
        result = await db.execute(
            _GET_PARTICIPANT_SQL,
            {"game_id": game_id, "participant_id": participant_id},
        )
        row = result.fetchone()
        return _row_to_participant(row) if row else None

    async def save_team_state(self, db: AsyncSession, participant: Participant) -> None:
        await db.execute(
            _SAVE_TEAM_STATE_SQL,
            {
                "id": participant.id,
                "team": json.dumps([entry.to_json() for entry in participant.team]),
                "spent_budget": participant.spent_budget,
                "roster_size": participant.roster_size,
                "roster_complete": participant.roster_complete,
            },
        )


class OwnershipRepository:
    async def list_active(
        self, db: AsyncSession, game_id: str, participant_id: str
    ) -> list[ResourceOwnership]:
        result = await db.execute(
            _LIST_ACTIVE_OWNERSHIPS_SQL,
            {"game_id": game_id, "participant_id": participant_id},
        )
        return [_row_to_ownership(row) for row in result.fetchall()]

    async def get(
        self, db: AsyncSession, game_id: str, participant_id: str, resource_id: str
    ) -> ResourceOwnership | None:
        result = await db.execute(
            _GET_OWNERSHIP_SQL,
            {
                "game_id": game_id,
                "participant_id": participant_id,
                "resource_id": resource_id,
            },
        )
        row = result.fetchone()
        return _row_to_ownership(row) if row else None

    async def reactivate(
        self, db: AsyncSession, ownership_id: str, price_paid: int, acquired_at: datetime
    ) -> None:
        await db.execute(
            _REACTIVATE_OWNERSHIP_SQL,
            {"id": ownership_id, "price_paid": price_paid, "acquired_at": acquired_at},
        )

    async def list_participants_missing_ownerships(
        self, db: AsyncSession, game_id: str
    ) -> list[str]:
        result = await db.execute(_MISSING_OWNERSHIP_PARTICIPANTS_SQL, {"game_id": game_id})
        return [row.participant_id for row in result.fetchall()]

    async def create(self, db: AsyncSession, ownership: ResourceOwnership) -> None:
        await db.execute(
            _INSERT_OWNERSHIP_SQL,
            {
                "id": ownership.id,
                "game_id": ownership.game_id,
                "participant_id": ownership.participant_id,
                "resource_id": ownership.resource_id,
                "price_paid": ownership.price_paid,
                "acquired_at": ownership.acquired_at,
                "acquisition_type": ownership.acquisition_type,
                "active": ownership.active,
                "benched": ownership.benched,
                "points_scored": ownership.points_scored,
                "stages_participated": ownership.stages_participated,
            },
        )
