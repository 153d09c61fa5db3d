"""Domain models for pp_betting — pure dataclasses, no business logic."""

from dataclasses import dataclass

from src.pp_common.enums import Direction


@dataclass(frozen=True)
class Bet:
    """One wager, keyed by (round_id, player_id). amount is net of fee."""

    player_id: str
    round_id: int
    amount: int
    direction: Direction


@dataclass(frozen=True)
class Position:
    """A player's stake in the current Live and Bidding (next) rounds."""

    live_bull_amount: int = 0
    live_bear_amount: int = 0
    next_bull_amount: int = 0
    next_bear_amount: int = 0
