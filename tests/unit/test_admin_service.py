"""Tests for reopening a finalized period."""
import pytest

from src.ra_common.errors import GameNotFoundError, PeriodNotFoundError
from src.ra_admin.application.service import AdminService
from tests.unit.fakes import (
    FakeActivityLog,
    FakeGameRepository,
    FakeSession,
    InMemoryStore,
    make_bid,
    make_game,
    make_period,
)


def _store() -> InMemoryStore:
    store = InMemoryStore()
    store.add_game(
        make_game(
            periods=[
                make_period("Week1", status="finalized"),
                make_period("Week2", 10_080, 20_160, status="finalized"),
            ],
            auction_status="finalized",
        )
    )
    return store


def _service(store: InMemoryStore) -> AdminService:
    return AdminService(games=FakeGameRepository(store), activity=FakeActivityLog(store))


class TestReopenPeriod:
    async def test_period_closed_and_auction_active(self) -> None:
        store = _store()
        db = FakeSession(store)

        result = await _service(store).reopen_period(db, "g1", "Week2")

        game = store.games["g1"]
        assert [p.status for p in game.periods] == ["finalized", "closed"]
        assert game.auction_status == "active"
        assert result["previous_status"] == "finalized"
        assert db.commits == 1

    async def test_audit(self) -> None:
        store = _store()
        await _service(store).reopen_period(FakeSession(store), "g1", "Week1")

        action, _, details = store.activity[0]
        assert action == "AUCTION_PERIOD_REOPENED"
        assert details == {
            "gameName": "Spring Classics",
            "periodName": "Week1",
            "previousStatus": "finalized",
        }

    async def test_settled_bids_stay_settled(self) -> None:
        store = _store()
        store.add_bids(make_bid("b1", "p1", "r1", 10, 1, status="won"))
        await _service(store).reopen_period(FakeSession(store), "g1", "Week1")
        assert store.bid_status("b1") == "won"

    async def test_unknown_period(self) -> None:
        store = _store()
        with pytest.raises(PeriodNotFoundError):
            await _service(store).reopen_period(FakeSession(store), "g1", "Week7")
        assert store.activity == []

    async def test_unknown_game(self) -> None:
        store = InMemoryStore()
        with pytest.raises(GameNotFoundError):
            await _service(store).reopen_period(FakeSession(store), "g9", "Week1")
