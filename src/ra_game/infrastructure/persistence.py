"""GameRepository: concrete implementation of GameRepositoryProtocol.

All queries use raw text() SQL (no ORM).
auction_periods is a JSONB array; asyncpg hands it back as a JSON string.
"""

import json
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ra_game.domain.models import Game, Period

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GAME_COLUMNS = """
    id, name, game_type, max_resources, max_budget,
    auction_periods, auction_status, status, version, finalized_at
"""

_GET_GAME_SQL = text(f"""
    SELECT {_GAME_COLUMNS}
    FROM games
    WHERE id = :game_id
""")

_LIST_GAMES_WITH_PERIODS_SQL = text(f"""
    SELECT {_GAME_COLUMNS}
    FROM games
    WHERE jsonb_array_length(auction_periods) > 0
    ORDER BY id
""")

_UPDATE_SCHEDULE_SQL = text("""
    UPDATE games
    SET auction_periods = CAST(:periods AS JSONB),
        auction_status = :auction_status,
        status = COALESCE(CAST(:game_status AS VARCHAR), status),
        finalized_at = COALESCE(CAST(:finalized_at AS TIMESTAMPTZ), finalized_at),
        version = version + 1
    WHERE id = :game_id AND version = :expected_version
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _load_periods(raw: Any) -> list[Period]:
    if raw is None:
        return []
    items = json.loads(raw) if isinstance(raw, str) else raw
    return [Period.from_json(item) for item in items]


def _row_to_game(row: Any) -> Game:
    return Game(
        id=row.id,
        name=row.name,
        game_type=row.game_type,
        max_resources=row.max_resources,
        max_budget=row.max_budget,
        periods=_load_periods(row.auction_periods),
        auction_status=row.auction_status,
        status=row.status,
        version=row.version,
        finalized_at=row.finalized_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class GameRepository:
    async def get_game(self, db: AsyncSession, game_id: str) -> Game | None:
        result = await db.execute(_GET_GAME_SQL, {"game_id": game_id})
        row = result.fetchone()
        return _row_to_game(row) if row else None

    async def list_games_with_periods(self, db: AsyncSession) -> list[Game]:
        result = await db.execute(_LIST_GAMES_WITH_PERIODS_SQL)
        return [_row_to_game(row) for row in result.fetchall()]

    async def update_schedule(
        self,
        db: AsyncSession,
        game_id: str,
        expected_version: int,
        periods: list[Period],
        auction_status: str,
        finalized_at: datetime | None,
        game_status: str | None = None,
    ) -> bool:
        result = await db.execute(
            _UPDATE_SCHEDULE_SQL,
            {
                "game_id": game_id,
                "expected_version": expected_version,
                "periods": json.dumps([p.to_json() for p in periods]),
                "auction_status": auction_status,
                "finalized_at": finalized_at,
                "game_status": game_status,
            },
        )
        return result.rowcount == 1
