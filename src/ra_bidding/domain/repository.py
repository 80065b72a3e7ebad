# src/ra_bidding/domain/repository.py
"""BidRepository Protocol: interface contract for persistence layer."""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ra_bidding.domain.models import Bid


class BidRepositoryProtocol(Protocol):
    async def list_by_game(self, db: AsyncSession, game_id: str) -> list[Bid]: ...

    async def list_won_by_game(self, db: AsyncSession, game_id: str) -> list[Bid]: ...

    async def list_won_by_participant(
        self, db: AsyncSession, game_id: str, participant_id: str
    ) -> list[Bid]: ...

    async def sum_won_amount(
        self, db: AsyncSession, game_id: str, participant_id: str
    ) -> int: ...

    async def settle(self, db: AsyncSession, bid: Bid) -> bool:
        """Persist bid.status only if the stored row is still open."""
        ...
