# src/ra_game/domain/repository.py
"""Repository Protocol: dependency inversion for testability.

Unit tests inject a mock (or the in-memory store) that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ra_game.domain.models import Game, Period


class GameRepositoryProtocol(Protocol):
    async def get_game(self, db: AsyncSession, game_id: str) -> Game | None: ...

    async def list_games_with_periods(self, db: AsyncSession) -> list[Game]: ...

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
        """Conditional write keyed on version. False when another writer got there first.

        game_status None leaves games.status untouched.
        """
        ...


class ActivityLogProtocol(Protocol):
    async def append(
        self,
        db: AsyncSession,
        action: str,
        game_id: str,
        details: dict[str, object],
    ) -> None: ...
