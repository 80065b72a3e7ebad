"""Make sure every won bid is backed by one active ownership row.

Called with all of a participant's won bids, not just this run's, so a row
whose insert failed in an earlier run is created on the next pass. An
inactive row for a won resource is switched back on rather than skipped.
"""

import logging
import uuid
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.ra_bidding.domain.models import Bid
from src.ra_common.enums import AcquisitionType
from src.ra_roster.domain.models import ResourceOwnership
from src.ra_roster.domain.repository import OwnershipRepositoryProtocol

logger = logging.getLogger(__name__)


async def materialize_roster(
    db: AsyncSession,
    game_id: str,
    participant_id: str,
    wins: list[Bid],
    acquisition_type: AcquisitionType,
    now: datetime,
    ownerships: OwnershipRepositoryProtocol,
) -> tuple[int, list[str]]:
    """Returns (rows created or reactivated, errors). A failing item never stops the rest."""
    written = 0
    errors: list[str] = []
    for bid in wins:
        try:
            existing = await ownerships.get(db, game_id, participant_id, bid.resource_id)
            if existing is not None and existing.active:
                continue
            # Own savepoint: a failed write must not abort the participant's unit.
            async with db.begin_nested():
                if existing is not None:
                    logger.info(
                        "Reactivating ownership %s/%s", participant_id, bid.resource_id
                    )
                    await ownerships.reactivate(db, existing.id, bid.amount, now)
                else:
                    await ownerships.create(
                        db,
                        ResourceOwnership(
                            id=f"own_{uuid.uuid4().hex}",
                            game_id=game_id,
                            participant_id=participant_id,
                            resource_id=bid.resource_id,
                            price_paid=bid.amount,
                            acquired_at=now,
                            acquisition_type=acquisition_type.value,
                        ),
                    )
            written += 1
        except Exception as e:
            logger.exception(
                "Failed to write ownership %s/%s", participant_id, bid.resource_id
            )
            errors.append(
                f"participant {participant_id}: ownership for {bid.resource_id} failed: {e}"
            )
    return written, errors
