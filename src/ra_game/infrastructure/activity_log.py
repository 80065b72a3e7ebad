"""DB helper for activity_logs (append-only audit trail).

Called from the finalization and admin services within the caller's transaction.
"""
import json

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ra_common.datetime_utils import utc_now

_INSERT_ACTIVITY_SQL = text("""
    INSERT INTO activity_logs (action, game_id, details, actor, created_at)
    VALUES (:action, :game_id, CAST(:details AS JSONB), :actor, :created_at)
""")


class ActivityLog:
    def __init__(self, actor: str = "finalizer") -> None:
        self._actor = actor

    async def append(
        self,
        db: AsyncSession,
        action: str,
        game_id: str,
        details: dict[str, object],
    ) -> None:
        """Insert one row into activity_logs."""
        await db.execute(
            _INSERT_ACTIVITY_SQL,
            {
                "action": action,
                "game_id": game_id,
                "details": json.dumps(details, default=str),
                "actor": self._actor,
                "created_at": utc_now(),
            },
        )
