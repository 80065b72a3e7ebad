"""Rebuild a winner's team state from authoritative records.

The cached `team` array on the participant row is never read back: earlier
runs (or hand edits) may have corrupted it. Team membership comes from active
ownership rows, spend from the full set of won bids. Running the same pass
twice therefore converges to the same state.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.ra_bidding.domain.repository import BidRepositoryProtocol
from src.ra_roster.domain.models import Participant, ResourceOwnership, TeamEntry
from src.ra_roster.domain.repository import (
    OwnershipRepositoryProtocol,
    ParticipantRepositoryProtocol,
)

logger = logging.getLogger(__name__)


def rebuild_team(ownerships: list[ResourceOwnership]) -> list[TeamEntry]:
    return [
        TeamEntry(
            resource_id=o.resource_id, price_paid=o.price_paid, acquired_at=o.acquired_at
        )
        for o in ownerships
        if o.active
    ]


async def reconcile_team_state(
    db: AsyncSession,
    participant: Participant,
    max_resources: int,
    bids: BidRepositoryProtocol,
    participants: ParticipantRepositoryProtocol,
    ownerships: OwnershipRepositoryProtocol,
) -> Participant:
    """Overwrite team, spend and roster flags with one participant write.

    Call after this run's won bids are persisted and their ownership rows
    materialized: roster_size is the count of active ownership rows, so a win
    whose row could not be written stays out until a later pass creates it.
    """
    active = await ownerships.list_active(db, participant.game_id, participant.id)
    team = rebuild_team(active)
    spent = await bids.sum_won_amount(db, participant.game_id, participant.id)

    if spent != participant.spent_budget or len(team) != participant.roster_size:
        logger.info(
            "Participant %s: spent %d -> %d, roster %d -> %d",
            participant.id,
            participant.spent_budget,
            spent,
            participant.roster_size,
            len(team),
        )

    participant.team = team
    participant.spent_budget = spent
    participant.roster_size = len(team)
    participant.roster_complete = len(team) >= max_resources
    await participants.save_team_state(db, participant)
    return participant
