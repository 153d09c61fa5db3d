"""Pydantic schemas for pp_betting API."""

from pydantic import BaseModel, Field

from src.pp_account.domain.constants import MAX_AMOUNT
from src.pp_betting.domain.ledger import BetPlacement
from src.pp_betting.domain.models import Bet, Position
from src.pp_clearing.domain.settlement import Claim
from src.pp_common.enums import Direction

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PlaceBetRequest(BaseModel):
    round_id: int = Field(
        ..., ge=0, le=MAX_AMOUNT, description="Must be the current Bidding round"
    )
    direction: Direction
    amount: int = Field(..., gt=0, le=MAX_AMOUNT, description="Gross wager, fee included")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BetOut(BaseModel):
    round_id: int
    player_id: str
    direction: Direction
    amount: int  # net of fee

    @classmethod
    def from_domain(cls, bet: Bet) -> "BetOut":
        return cls(
            round_id=bet.round_id,
            player_id=bet.player_id,
            direction=bet.direction,
            amount=bet.amount,
        )


class PlaceBetResponse(BaseModel):
    bet: BetOut
    gross: int
    fee: int
    bull_amount: int
    bear_amount: int

    @classmethod
    def from_domain(cls, placement: BetPlacement) -> "PlaceBetResponse":
        return cls(
            bet=BetOut.from_domain(placement.bet),
            gross=placement.charge.gross,
            fee=placement.charge.fee,
            bull_amount=placement.round.bull_amount,
            bear_amount=placement.round.bear_amount,
        )


class BetListResponse(BaseModel):
    items: list[BetOut]
    next_start_after: int | None
    has_more: bool


class PositionResponse(BaseModel):
    live_round_id: int | None
    live_bull_amount: int
    live_bear_amount: int
    next_round_id: int | None
    next_bull_amount: int
    next_bear_amount: int

    @classmethod
    def from_domain(
        cls, position: Position, live_round_id: int | None, next_round_id: int | None
    ) -> "PositionResponse":
        return cls(
            live_round_id=live_round_id,
            live_bull_amount=position.live_bull_amount,
            live_bear_amount=position.live_bear_amount,
            next_round_id=next_round_id,
            next_bull_amount=position.next_bull_amount,
            next_bear_amount=position.next_bear_amount,
        )


class PendingRewardResponse(BaseModel):
    pending_reward: int


class ClaimedRound(BaseModel):
    round_id: int
    payout: int


class CollectResponse(BaseModel):
    amount: int
    rounds: list[ClaimedRound]

    @classmethod
    def from_domain(cls, claim: Claim) -> "CollectResponse":
        return cls(
            amount=claim.total,
            rounds=[
                ClaimedRound(round_id=s.bet.round_id, payout=s.payout) for s in claim.settled
            ],
        )
