"""Pydantic schemas for pp_market API responses.

Rounds are rendered flat: fields a phase does not have yet (open_price while
bidding, close_price/winner while live) are null.
"""

from pydantic import BaseModel, Field

from src.pp_common.enums import RoundPhase
from src.pp_market.domain.models import (
    BiddingRound,
    FinishedRound,
    LiveRound,
    MarketConfig,
    Round,
)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ConfigRequest(BaseModel):
    """PUT /admin/config body. Range checks live in the domain (config_rules)."""

    round_seconds: int = Field(..., description="Length of the Bidding and Live windows")
    minimum_bet: int = Field(..., description="Smallest gross wager accepted")
    fee_bps: int = Field(..., description="Fee in basis points (100 = 1%)")

    def to_domain(self) -> MarketConfig:
        return MarketConfig(
            round_seconds=self.round_seconds,
            minimum_bet=self.minimum_bet,
            fee_bps=self.fee_bps,
        )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ConfigResponse(BaseModel):
    round_seconds: int
    minimum_bet: int
    fee_bps: int
    is_paused: bool
    accumulated_fee: int

    @classmethod
    def from_domain(
        cls, config: MarketConfig, is_paused: bool, accumulated_fee: int
    ) -> "ConfigResponse":
        return cls(
            round_seconds=config.round_seconds,
            minimum_bet=config.minimum_bet,
            fee_bps=config.fee_bps,
            is_paused=is_paused,
            accumulated_fee=accumulated_fee,
        )


class RoundOut(BaseModel):
    id: int
    phase: RoundPhase
    bid_time: int
    open_time: int
    close_time: int
    open_price: int | None = None
    close_price: int | None = None
    winner: str | None = None  # BULL / BEAR / null (push or not finished)
    bull_amount: int
    bear_amount: int

    @classmethod
    def from_domain(cls, round_: Round) -> "RoundOut":
        out = cls(
            id=round_.id,
            phase=RoundPhase.BIDDING,
            bid_time=round_.bid_time,
            open_time=round_.open_time,
            close_time=round_.close_time,
            bull_amount=round_.bull_amount,
            bear_amount=round_.bear_amount,
        )
        if isinstance(round_, LiveRound):
            out.phase = RoundPhase.LIVE
            out.open_price = round_.open_price
        elif isinstance(round_, FinishedRound):
            out.phase = RoundPhase.FINISHED
            out.open_price = round_.open_price
            out.close_price = round_.close_price
            out.winner = round_.winner.value if round_.winner else None
        return out


def _round_or_none(round_: BiddingRound | LiveRound | FinishedRound | None) -> RoundOut | None:
    return RoundOut.from_domain(round_) if round_ is not None else None


class StatusResponse(BaseModel):
    bidding_round: RoundOut | None
    live_round: RoundOut | None
    last_finished_round: RoundOut | None
    total_volume: int
    accumulated_fee: int
    current_time: int
    is_paused: bool

    @classmethod
    def build(
        cls,
        bidding: BiddingRound | None,
        live: LiveRound | None,
        finished: FinishedRound | None,
        total_volume: int,
        accumulated_fee: int,
        current_time: int,
        is_paused: bool,
    ) -> "StatusResponse":
        return cls(
            bidding_round=_round_or_none(bidding),
            live_round=_round_or_none(live),
            last_finished_round=_round_or_none(finished),
            total_volume=total_volume,
            accumulated_fee=accumulated_fee,
            current_time=current_time,
            is_paused=is_paused,
        )


class AdvanceResponse(BaseModel):
    changed: bool
    finished_round: RoundOut | None
    live_round: RoundOut | None
    bidding_round: RoundOut | None
    events: list[str]
