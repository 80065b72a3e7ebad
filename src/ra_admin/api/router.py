# src/ra_admin/api/router.py
"""Admin / cron REST endpoints.

POST /admin/games/{game_id}/finalize                      run (or resume) a finalization
GET  /admin/games/{game_id}/finalize-status               progress of a period
POST /admin/games/{game_id}/periods/{period_name}/reopen  let a period be finalized again
POST /admin/cron/auction-schedules                        period transitions + due finalizations
"""
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ra_admin.api.dependencies import require_admin_token
from src.ra_admin.application.scheduler import ScheduleSweeper
from src.ra_admin.application.service import AdminService
from src.ra_common.database import get_db_session
from src.ra_common.datetime_utils import utc_now
from src.ra_common.response import ApiResponse, success_response
from src.ra_finalize.application.schemas import (
    FinalizeRequest,
    FinalizeResponse,
    FinalizeStatusResponse,
)
from src.ra_finalize.application.service import FinalizationService

router = APIRouter(
    prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin_token)]
)

_finalizer = FinalizationService()
_admin = AdminService()
_sweeper = ScheduleSweeper(finalizer=_finalizer)


def _respond(request: Request, data: object) -> ApiResponse:
    return success_response(data, getattr(request.state, "request_id", None))


@router.post("/games/{game_id}/finalize")
async def finalize_game(
    game_id: str,
    body: FinalizeRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _finalizer.finalize(
        db, game_id, body.period_name, body.resume_after_participant_id
    )
    return _respond(request, FinalizeResponse.from_result(result).model_dump())


@router.get("/games/{game_id}/finalize-status")
async def finalize_status(
    game_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    period_name: str | None = Query(None, min_length=1),
) -> ApiResponse:
    status = await _finalizer.get_status(db, game_id, period_name)
    return _respond(request, FinalizeStatusResponse.from_status(status).model_dump())


@router.post("/games/{game_id}/periods/{period_name}/reopen")
async def reopen_period(
    game_id: str,
    period_name: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _admin.reopen_period(db, game_id, period_name)
    return _respond(request, result)


@router.post("/cron/auction-schedules")
async def sweep_auction_schedules(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    report = await _sweeper.sweep(db, utc_now())
    return _respond(request, asdict(report))
