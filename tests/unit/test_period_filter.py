"""Tests for period selection and open-bid filtering."""
import pytest

from src.ra_common.errors import PeriodNotFoundError
from src.ra_finalize.domain.period_filter import filter_open_bids, select_period
from tests.unit.fakes import make_bid, make_game, make_period


class TestSelectPeriod:
    def test_none_means_all(self) -> None:
        assert select_period(make_game(), None) is None

    def test_known_name(self) -> None:
        game = make_game(periods=[make_period("Week1"), make_period("Week2", 100, 200)])
        assert select_period(game, "Week2").start_at == game.periods[1].start_at

    def test_unknown_name_is_fatal(self) -> None:
        with pytest.raises(PeriodNotFoundError):
            select_period(make_game(), "Week9")


class TestFilterOpenBids:
    def test_keeps_only_open_bids(self) -> None:
        bids = [
            make_bid("b1", "p1", "r1", 10, 1),
            make_bid("b2", "p1", "r2", 10, 2, status="outbid"),
            make_bid("b3", "p1", "r3", 10, 3, status="won"),
            make_bid("b4", "p1", "r4", 10, 4, status="cancelled_team_full"),
        ]
        assert [b.id for b in filter_open_bids(bids, None)] == ["b1", "b2"]

    def test_window_is_inclusive(self) -> None:
        period = make_period(start=10, end=20)
        bids = [
            make_bid("early", "p1", "r1", 10, 9),
            make_bid("start", "p1", "r1", 10, 10),
            make_bid("end", "p1", "r1", 10, 20),
            make_bid("late", "p1", "r1", 10, 21),
        ]
        assert [b.id for b in filter_open_bids(bids, period)] == ["start", "end"]

    def test_empty(self) -> None:
        assert filter_open_bids([], make_period()) == []
