"""HTTP-level tests for the admin/cron router (services patched out)."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.main import app
from src.ra_admin.application.scheduler import SweepReport
from src.ra_common.database import get_db_session
from src.ra_common.errors import CriticalIntegrityError, FinalizationInProgressError
from src.ra_finalize.domain.models import FinalizationResult, FinalizationStatus


BASE = "/api/v1/admin"
ADMIN_HEADERS = {"Authorization": "Bearer test-admin-token"}


@pytest.fixture(autouse=True)
def fake_db():
    db = MagicMock()

    async def _session():
        yield db

    app.dependency_overrides[get_db_session] = _session
    yield db
    app.dependency_overrides.pop(get_db_session, None)


class TestAuth:
    async def test_missing_token(self, client) -> None:
        resp = await client.post(f"{BASE}/games/g1/finalize", json={})
        assert resp.status_code == 401
        assert resp.json()["code"] == 9003

    async def test_wrong_token(self, client) -> None:
        resp = await client.post(
            f"{BASE}/cron/auction-schedules", headers={"Authorization": "Bearer nope"}
        )
        assert resp.status_code == 401


class TestFinalizeEndpoint:
    async def test_returns_summary(self, client, fake_db) -> None:
        result = FinalizationResult(
            game_id="g1", period_name="Week1", total_bids=4, winners_assigned=2,
            losers=2, total_participants=2, processed_participants=2,
            resume_after_participant_id="p2",
        )
        with patch("src.ra_admin.api.router._finalizer") as finalizer:
            finalizer.finalize = AsyncMock(return_value=result)
            resp = await client.post(
                f"{BASE}/games/g1/finalize",
                json={"period_name": "Week1"},
                headers=ADMIN_HEADERS,
            )

        assert resp.status_code == 200
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["winners_assigned"] == 2
        assert body["data"]["resume_after_participant_id"] == "p2"
        finalizer.finalize.assert_awaited_once_with(fake_db, "g1", "Week1", None)

    async def test_resume_cursor_passed_through(self, client, fake_db) -> None:
        with patch("src.ra_admin.api.router._finalizer") as finalizer:
            finalizer.finalize = AsyncMock(return_value=FinalizationResult("g1", None))
            await client.post(
                f"{BASE}/games/g1/finalize",
                json={"resume_after_participant_id": "p7"},
                headers=ADMIN_HEADERS,
            )
        finalizer.finalize.assert_awaited_once_with(fake_db, "g1", None, "p7")

    async def test_in_progress_is_409(self, client) -> None:
        with patch("src.ra_admin.api.router._finalizer") as finalizer:
            finalizer.finalize = AsyncMock(side_effect=FinalizationInProgressError("g1"))
            resp = await client.post(
                f"{BASE}/games/g1/finalize", json={}, headers=ADMIN_HEADERS
            )
        assert resp.status_code == 409
        assert resp.json()["code"] == 7003
        assert resp.json()["data"] is None

    async def test_critical_is_500_with_prefix(self, client) -> None:
        with patch("src.ra_admin.api.router._finalizer") as finalizer:
            finalizer.finalize = AsyncMock(side_effect=CriticalIntegrityError("lost periods"))
            resp = await client.post(
                f"{BASE}/games/g1/finalize", json={}, headers=ADMIN_HEADERS
            )
        assert resp.status_code == 500
        assert resp.json()["message"].startswith("CRITICAL:")

    async def test_blank_period_name_rejected(self, client) -> None:
        resp = await client.post(
            f"{BASE}/games/g1/finalize", json={"period_name": ""}, headers=ADMIN_HEADERS
        )
        assert resp.status_code == 422


class TestOtherEndpoints:
    async def test_status(self, client) -> None:
        status = FinalizationStatus(
            game_id="g1", period_name="Week1", period_status="closed",
            auction_status="active", completed=False, open_bids=3,
            pending_participant_ids=["p2", "p3"], settled_participant_ids=["p1"],
            resume_after_participant_id="p1",
        )
        with patch("src.ra_admin.api.router._finalizer") as finalizer:
            finalizer.get_status = AsyncMock(return_value=status)
            resp = await client.get(
                f"{BASE}/games/g1/finalize-status",
                params={"period_name": "Week1"},
                headers=ADMIN_HEADERS,
            )
        data = resp.json()["data"]
        assert data["pending_participants"] == 2
        assert data["resume_after_participant_id"] == "p1"

    async def test_reopen(self, client) -> None:
        with patch("src.ra_admin.api.router._admin") as admin:
            admin.reopen_period = AsyncMock(return_value={"status": "closed"})
            resp = await client.post(
                f"{BASE}/games/g1/periods/Week1/reopen", headers=ADMIN_HEADERS
            )
        assert resp.json()["data"] == {"status": "closed"}

    async def test_cron_sweep(self, client) -> None:
        with patch("src.ra_admin.api.router._sweeper") as sweeper:
            sweeper.sweep = AsyncMock(return_value=SweepReport(games_checked=4))
            resp = await client.post(f"{BASE}/cron/auction-schedules", headers=ADMIN_HEADERS)
        assert resp.json()["data"]["games_checked"] == 4


async def test_health(client) -> None:
    resp = await client.get("/health")
    assert resp.json()["status"] == "ok"


async def test_request_id_header_matches_envelope(client) -> None:
    resp = await client.post("/api/v1/admin/cron/auction-schedules")
    assert resp.headers["X-Request-ID"] == resp.json()["request_id"]
