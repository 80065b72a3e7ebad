"""Pydantic schemas for the finalization admin API."""

from pydantic import BaseModel, Field

from src.ra_finalize.domain.models import FinalizationResult, FinalizationStatus


class FinalizeRequest(BaseModel):
    period_name: str | None = Field(None, min_length=1, max_length=128)
    resume_after_participant_id: str | None = Field(None, min_length=1, max_length=64)


class FinalizeResponse(BaseModel):
    game_id: str
    period_name: str | None
    success: bool
    message: str
    total_bids: int
    total_resources: int
    winners_assigned: int
    losers: int
    cancelled: int
    total_participants: int
    processed_participants: int
    repaired_participants: int
    resume_after_participant_id: str | None
    errors: list[str]

    @classmethod
    def from_result(cls, result: FinalizationResult) -> "FinalizeResponse":
        return cls(
            game_id=result.game_id,
            period_name=result.period_name,
            success=result.success,
            message=result.message,
            total_bids=result.total_bids,
            total_resources=result.total_resources,
            winners_assigned=result.winners_assigned,
            losers=result.losers,
            cancelled=result.cancelled,
            total_participants=result.total_participants,
            processed_participants=result.processed_participants,
            repaired_participants=result.repaired_participants,
            resume_after_participant_id=result.resume_after_participant_id,
            errors=list(result.errors),
        )


class FinalizeStatusResponse(BaseModel):
    game_id: str
    period_name: str | None
    period_status: str | None
    auction_status: str
    completed: bool
    open_bids: int
    pending_participants: int
    pending_participant_ids: list[str]
    settled_participant_ids: list[str]
    resume_after_participant_id: str | None

    @classmethod
    def from_status(cls, status: FinalizationStatus) -> "FinalizeStatusResponse":
        return cls(
            game_id=status.game_id,
            period_name=status.period_name,
            period_status=status.period_status,
            auction_status=status.auction_status,
            completed=status.completed,
            open_bids=status.open_bids,
            pending_participants=len(status.pending_participant_ids),
            pending_participant_ids=status.pending_participant_ids,
            settled_participant_ids=status.settled_participant_ids,
            resume_after_participant_id=status.resume_after_participant_id,
        )
