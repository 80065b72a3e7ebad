# src/ra_bidding/infrastructure/persistence.py
"""BidRepository: raw SQL persistence implementation."""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ra_bidding.domain.models import Bid

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, game_id, participant_id, resource_id, amount, placed_at, status
"""

_LIST_BY_GAME_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM bids WHERE game_id = :game_id
    ORDER BY placed_at ASC, id ASC
""")

_LIST_WON_BY_GAME_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM bids WHERE game_id = :game_id AND status = 'won'
    ORDER BY placed_at ASC, id ASC
""")

_LIST_WON_BY_PARTICIPANT_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM bids
    WHERE game_id = :game_id AND participant_id = :participant_id AND status = 'won'
    ORDER BY placed_at ASC, id ASC
""")

_SUM_WON_SQL = text("""
    SELECT COALESCE(SUM(amount), 0)
    FROM bids
    WHERE game_id = :game_id AND participant_id = :participant_id AND status = 'won'
""")

# Open -> terminal only; a row settled by someone else matches nothing.
_SETTLE_BID_SQL = text("""
    UPDATE bids
    SET status = :status, settled_at = NOW()
    WHERE id = :id AND status IN ('active', 'outbid')
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_bid(row: Any) -> Bid:
    return Bid(
        id=row.id,
        game_id=row.game_id,
        participant_id=row.participant_id,
        resource_id=row.resource_id,
        amount=row.amount,
        placed_at=row.placed_at,
        status=row.status,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class BidRepository:
    """Concrete implementation of BidRepositoryProtocol using raw SQL."""

    async def list_by_game(self, db: AsyncSession, game_id: str) -> list[Bid]:
        result = await db.execute(_LIST_BY_GAME_SQL, {"game_id": game_id})
        return [_row_to_bid(row) for row in result.fetchall()]

    async def list_won_by_game(self, db: AsyncSession, game_id: str) -> list[Bid]:
        result = await db.execute(_LIST_WON_BY_GAME_SQL, {"game_id": game_id})
        return [_row_to_bid(row) for row in result.fetchall()]

    async def list_won_by_participant(
        self, db: AsyncSession, game_id: str, participant_id: str
    ) -> list[Bid]:
        result = await db.execute(
            _LIST_WON_BY_PARTICIPANT_SQL,
            {"game_id": game_id, "participant_id": participant_id},
        )
        return [_row_to_bid(row) for row in result.fetchall()]

    async def sum_won_amount(
        self, db: AsyncSession, game_id: str, participant_id: str
    ) -> int:
        result = await db.execute(
            _SUM_WON_SQL, {"game_id": game_id, "participant_id": participant_id}
        )
        return int(result.scalar_one())

    async def settle(self, db: AsyncSession, bid: Bid) -> bool:
        result = await db.execute(_SETTLE_BID_SQL, {"id": bid.id, "status": bid.status})
        return result.rowcount == 1
