# src/ra_roster/domain/repository.py
"""Roster repository Protocols: participants and resource ownerships."""
from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ra_roster.domain.models import Participant, ResourceOwnership


class ParticipantRepositoryProtocol(Protocol):
    async def get_participant(
        self, db: AsyncSession, game_id: str, participant_id: str
    ) -> Participant | None: ...

    async def save_team_state(self, db: AsyncSession, participant: Participant) -> None:
        """Overwrite team, spent_budget, roster_size and roster_complete in one write."""
        ...


class OwnershipRepositoryProtocol(Protocol):
    async def list_active(
        self, db: AsyncSession, game_id: str, participant_id: str
    ) -> list[ResourceOwnership]: ...

    async def get(
        self, db: AsyncSession, game_id: str, participant_id: str, resource_id: str
    ) -> ResourceOwnership | None:
        """The row for the triple, active or not."""
        ...

    async def reactivate(
        self, db: AsyncSession, ownership_id: str, price_paid: int, acquired_at: datetime
    ) -> None: ...

    async def list_participants_missing_ownerships(
        self, db: AsyncSession, game_id: str
    ) -> list[str]:
        """Participants with a won bid that has no active ownership row, sorted."""
        ...

    async def create(self, db: AsyncSession, ownership: ResourceOwnership) -> None: ...
