"""Tests for rebuilding a participant's team state from authoritative records."""
from dataclasses import replace

from src.ra_finalize.domain.reconciler import rebuild_team, reconcile_team_state
from src.ra_roster.domain.models import ResourceOwnership, TeamEntry
from tests.unit.fakes import (
    FakeBidRepository,
    FakeOwnershipRepository,
    FakeParticipantRepository,
    FakeSession,
    InMemoryStore,
    at,
    make_bid,
)


def _ownership(resource_id: str, price: int, participant_id: str = "p1") -> ResourceOwnership:
    return ResourceOwnership(
        id=f"own_{resource_id}",
        game_id="g1",
        participant_id=participant_id,
        resource_id=resource_id,
        price_paid=price,
        acquired_at=at(0),
        acquisition_type="auction",
    )


def _reconcile_kwargs(store: InMemoryStore, participants=None) -> dict:
    return dict(
        bids=FakeBidRepository(store),
        participants=participants or FakeParticipantRepository(store),
        ownerships=FakeOwnershipRepository(store),
    )


class TestRebuildTeam:
    def test_one_entry_per_active_ownership(self) -> None:
        team = rebuild_team([_ownership("r1", 100), _ownership("r2", 200)])
        assert team == [TeamEntry("r1", 100, at(0)), TeamEntry("r2", 200, at(0))]

    def test_inactive_rows_left_out(self) -> None:
        team = rebuild_team([_ownership("r1", 100), replace(_ownership("r2", 200), active=False)])
        assert [e.resource_id for e in team] == ["r1"]


class TestReconcileTeamState:
    async def test_overwrites_corrupt_cache(self) -> None:
        store = InMemoryStore()
        participant = store.add_participant(
            "p1", spent_budget=9999, roster_size=7, team=[TeamEntry("ghost", 1, at(0))]
        )
        store.add_ownership(_ownership("r1", 100))
        store.add_ownership(_ownership("r2", 250))
        store.add_bids(
            make_bid("b1", "p1", "r1", 100, 1, status="won"),
            make_bid("b2", "p1", "r2", 250, 2, status="won"),
        )
        repo = FakeParticipantRepository(store)

        result = await reconcile_team_state(
            FakeSession(store), participant, 2, **_reconcile_kwargs(store, repo)
        )

        assert result.spent_budget == 350
        assert result.roster_size == 2
        assert result.roster_complete is True
        assert [e.resource_id for e in result.team] == ["r1", "r2"]
        assert repo.saves == 1
        assert store.participants["p1"].spent_budget == 350

    async def test_win_without_ownership_row_not_counted(self) -> None:
        store = InMemoryStore()
        participant = store.add_participant("p1")
        store.add_ownership(_ownership("r1", 100))
        store.add_bids(
            make_bid("b1", "p1", "r1", 100, 1, status="won"),
            make_bid("b2", "p1", "r2", 200, 2, status="won"),
        )

        result = await reconcile_team_state(
            FakeSession(store), participant, 5, **_reconcile_kwargs(store)
        )

        # Spend follows won bids; roster follows ownership rows.
        assert result.spent_budget == 300
        assert result.roster_size == 1
        assert [e.resource_id for e in result.team] == ["r1"]

    async def test_running_twice_converges(self) -> None:
        store = InMemoryStore()
        store.add_participant("p1")
        store.add_ownership(_ownership("r1", 100))
        store.add_bids(make_bid("b1", "p1", "r1", 100, 1, status="won"))
        kwargs = _reconcile_kwargs(store)
        db = FakeSession(store)

        first = await reconcile_team_state(db, store.participants["p1"], 5, **kwargs)
        second = await reconcile_team_state(db, store.participants["p1"], 5, **kwargs)

        assert (first.spent_budget, first.roster_size) == (second.spent_budget, second.roster_size)
        assert second.roster_complete is False
