"""Domain models for pp_market — pure dataclasses, no SQLAlchemy dependency.

A round is always in exactly one phase. Each phase is its own type so that
fields that do not exist yet (open_price while bidding, close_price while live)
cannot be read by accident.
"""

from dataclasses import dataclass, replace

from src.pp_common.enums import Direction


@dataclass(frozen=True)
class MarketConfig:
    """Mutable market parameters (replaced as a whole by update_config)."""

    round_seconds: int
    minimum_bet: int
    fee_bps: int


@dataclass(frozen=True)
class BiddingRound:
    id: int
    bid_time: int
    open_time: int
    close_time: int
    bull_amount: int = 0
    bear_amount: int = 0

    def add_stake(self, direction: Direction, amount: int) -> "BiddingRound":
        if direction is Direction.BULL:
            return replace(self, bull_amount=self.bull_amount + amount)
        return replace(self, bear_amount=self.bear_amount + amount)


@dataclass(frozen=True)
class LiveRound:
    id: int
    bid_time: int
    open_time: int
    close_time: int
    open_price: int
    bull_amount: int
    bear_amount: int


@dataclass(frozen=True)
class FinishedRound:
    id: int
    bid_time: int
    open_time: int
    close_time: int
    open_price: int
    close_price: int
    winner: Direction | None  # None = push, everybody refunded
    bull_amount: int
    bear_amount: int

    @property
    def total_amount(self) -> int:
        return self.bull_amount + self.bear_amount


Round = BiddingRound | LiveRound | FinishedRound


@dataclass(frozen=True)
class RoundSlots:
    """The scheduler's working set: at most one Bidding and one Live round."""

    bidding: BiddingRound | None
    live: LiveRound | None
    next_round_id: int


@dataclass(frozen=True)
class MarketState:
    """Snapshot of the singleton market_state row plus the open round slots."""

    config: MarketConfig
    is_paused: bool
    next_round_id: int
    accumulated_fee: int
    total_volume: int
    bidding: BiddingRound | None
    live: LiveRound | None

    @property
    def slots(self) -> RoundSlots:
        return RoundSlots(
            bidding=self.bidding, live=self.live, next_round_id=self.next_round_id
        )

    @property
    def claimable_before(self) -> int:
        """Rounds with an id strictly below this value are Finished.

        The Bidding round is next_round_id - 1 and the Live round (if any) is
        next_round_id - 2, so only ids below that are settled.
        """
        return self.next_round_id - 2
