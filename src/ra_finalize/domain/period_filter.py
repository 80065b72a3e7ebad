"""Restrict a game's bids to the open bids of one auction period."""

from src.ra_bidding.domain.models import Bid
from src.ra_common.errors import PeriodNotFoundError
from src.ra_game.domain.models import Game, Period


def select_period(game: Game, period_name: str | None) -> Period | None:
    """None means 'all open bids'. An unknown name is fatal for the run."""
    if period_name is None:
        return None
    period = game.find_period(period_name)
    if period is None:
        raise PeriodNotFoundError(period_name)
    return period


def filter_open_bids(bids: list[Bid], period: Period | None) -> list[Bid]:
    return [
        bid
        for bid in bids
        if bid.is_open and (period is None or period.contains(bid.placed_at))
    ]
