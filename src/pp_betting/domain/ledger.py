"""BetLedger rules — which wagers the current Bidding round accepts.

Checks run in a fixed order; the first failure wins:
  1. the bet targets the current Bidding round (stale or early ids rejected)
  2. gross amount >= minimum bet
  3. now is strictly before the round's open_time
  4. the player has no bet on this round yet (one bet per round, no top-up)
"""

from dataclasses import dataclass

from src.pp_betting.domain.models import Bet
from src.pp_clearing.domain.fee import FeeCharge, charge_fee
from src.pp_common.enums import Direction
from src.pp_common.errors import (
    BetBelowMinimumError,
    BettingClosedError,
    DuplicateBetError,
    NoBiddingRoundError,
    PageLimitExceededError,
    WrongRoundError,
)
from src.pp_market.domain.models import BiddingRound, MarketConfig

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 30


@dataclass(frozen=True)
class BetPlacement:
    bet: Bet
    round: BiddingRound  # pool totals after this bet
    charge: FeeCharge


def check_bet_window(
    bidding: BiddingRound | None,
    round_id: int,
    gross_amount: int,
    minimum_bet: int,
    now: int,
) -> BiddingRound:
    """Validate checks 1-3 and return the Bidding round being bet on."""
    if bidding is None:
        raise NoBiddingRoundError()
    if round_id != bidding.id:
        raise WrongRoundError(round_id, bidding.id)
    if gross_amount < minimum_bet:
        raise BetBelowMinimumError(gross_amount, minimum_bet)
    # Closed at open_time itself: a bet in the promotion instant must not land
    if now >= bidding.open_time:
        raise BettingClosedError(round_id, now - bidding.open_time)
    return bidding


def check_not_duplicate(existing: Bet | None) -> None:
    if existing is not None:
        raise DuplicateBetError(existing.round_id, existing.direction.value, existing.amount)


def place_bet(
    bidding: BiddingRound | None,
    existing: Bet | None,
    player_id: str,
    round_id: int,
    gross_amount: int,
    direction: Direction,
    config: MarketConfig,
    now: int,
) -> BetPlacement:
    """Validate a wager and compute the bet record and new pool totals.

    `existing` is the player's current bet on `round_id`, if any. Nothing is
    written here; the caller persists the placement.
    """
    bet_round = check_bet_window(bidding, round_id, gross_amount, config.minimum_bet, now)
    check_not_duplicate(existing)

    charge = charge_fee(gross_amount, config.fee_bps)
    bet = Bet(
        player_id=player_id,
        round_id=round_id,
        amount=charge.net,
        direction=direction,
    )
    return BetPlacement(
        bet=bet,
        round=bet_round.add_stake(direction, charge.net),
        charge=charge,
    )


def resolve_page_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_PAGE_LIMIT
    if not 1 <= limit <= MAX_PAGE_LIMIT:
        raise PageLimitExceededError(limit, MAX_PAGE_LIMIT)
    return limit
