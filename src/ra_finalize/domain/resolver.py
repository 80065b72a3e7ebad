"""Decide won / lost / cancelled for every open bid in a finalization run.

Auction games: price-time priority per resource, one winner.
Selection games: each participant's bids are walked in submission order
against their roster and budget limits, seeded from bids they already won.
"""
from collections import defaultdict

from src.ra_bidding.domain.models import Bid
from src.ra_common.enums import BidStatus
from src.ra_finalize.domain.models import BidDecision, ParticipantOutcome, Resolution
from src.ra_game.domain.models import (
    GameRules,
    MultiWinnerSelectionRules,
    SingleWinnerAuctionRules,
)


def resolve_winners(
    rules: GameRules, bids: list[Bid], existing_wins: list[Bid]
) -> Resolution:
    """existing_wins must be read fresh from the store for this run."""
    by_resource: dict[str, list[Bid]] = defaultdict(list)
    for bid in bids:
        by_resource[bid.resource_id].append(bid)

    outcomes: dict[str, ParticipantOutcome] = {}
    if isinstance(rules, SingleWinnerAuctionRules):
        decisions = _resolve_auction(by_resource, existing_wins)
    elif isinstance(rules, MultiWinnerSelectionRules):
        decisions = _resolve_selection(rules, bids, existing_wins)
    else:  # pragma: no cover - GameRules is closed
        raise TypeError(f"unknown rules variant: {rules!r}")

    for decision in decisions:
        pid = decision.bid.participant_id
        outcomes.setdefault(pid, ParticipantOutcome(participant_id=pid)).decisions.append(
            decision
        )
    return Resolution(
        outcomes=outcomes, total_bids=len(bids), total_resources=len(by_resource)
    )


def _auction_priority(bid: Bid) -> tuple[int, object, str]:
    # amount desc, placed_at asc, id asc
    return (-bid.amount, bid.placed_at, bid.id)


def _resolve_auction(
    by_resource: dict[str, list[Bid]], existing_wins: list[Bid]
) -> list[BidDecision]:
    already_sold = {bid.resource_id for bid in existing_wins}
    decisions: list[BidDecision] = []
    for resource_id in sorted(by_resource):
        ranked = sorted(by_resource[resource_id], key=_auction_priority)
        if resource_id in already_sold:
            # Sold by an earlier (possibly interrupted) run: nobody else can win it.
            decisions.extend(BidDecision(bid, BidStatus.LOST) for bid in ranked)
            continue
        winner, *losers = ranked
        decisions.append(BidDecision(winner, BidStatus.WON))
        decisions.extend(BidDecision(bid, BidStatus.LOST) for bid in losers)
    return decisions


def _resolve_selection(
    rules: MultiWinnerSelectionRules, bids: list[Bid], existing_wins: list[Bid]
) -> list[BidDecision]:
    by_participant: dict[str, list[Bid]] = defaultdict(list)
    for bid in bids:
        by_participant[bid.participant_id].append(bid)

    owned: dict[str, set[str]] = defaultdict(set)
    spent: dict[str, int] = defaultdict(int)
    for bid in existing_wins:
        owned[bid.participant_id].add(bid.resource_id)
        spent[bid.participant_id] += bid.amount

    decisions: list[BidDecision] = []
    for participant_id in sorted(by_participant):
        current_ids = set(owned[participant_id])
        current_spent = spent[participant_id]
        for bid in sorted(by_participant[participant_id], key=lambda b: (b.placed_at, b.id)):
            # Fixed check order: duplicate -> team full -> over budget.
            if bid.resource_id in current_ids:
                outcome = BidStatus.CANCELLED_DUPLICATE
            elif len(current_ids) >= rules.max_resources:
                outcome = BidStatus.CANCELLED_TEAM_FULL
            elif rules.has_budget_cap and current_spent + bid.amount > rules.max_budget:
                outcome = BidStatus.CANCELLED_OVER_BUDGET
            else:
                current_ids.add(bid.resource_id)
                current_spent += bid.amount
                decisions.append(BidDecision(bid, BidStatus.WON))
                continue
            decisions.append(
                BidDecision(
                    bid, outcome, roster_size=len(current_ids), spent=current_spent
                )
            )
    return decisions
