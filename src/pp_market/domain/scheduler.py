"""RoundScheduler — the Bidding → Live → Finished state machine.

`advance` is a pure coroutine over RoundSlots: it reads the price feed when a
round opens or closes and returns the new slots plus the events describing
what changed. It never writes; PredictionEngine persists the outcome.

Steps run in a fixed order on every call:
  1. close the Live round once its close_time is reached
  2. promote the Bidding round once its open_time is reached and no Live remains
  3. create a new Bidding round whenever the Bidding slot is empty

This order keeps at most one Live round at a time and chains Bidding windows
back to back: each new round opens exactly when the current Live round closes.
A call with nothing due changes nothing, so redundant triggers are harmless.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from src.pp_common.enums import Direction, MarketEventType
from src.pp_market.domain.models import (
    BiddingRound,
    FinishedRound,
    LiveRound,
    RoundSlots,
)

PriceFetcher = Callable[[], Awaitable[int]]


@dataclass(frozen=True)
class RoundEvent:
    event_type: MarketEventType
    round_id: int
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AdvanceOutcome:
    slots: RoundSlots
    finished: FinishedRound | None = None
    promoted: LiveRound | None = None
    created: BiddingRound | None = None
    events: tuple[RoundEvent, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.events)


def decide_winner(open_price: int, close_price: int) -> Direction | None:
    """Flat price is a push: no winner, every bettor is refunded."""
    if close_price > open_price:
        return Direction.BULL
    if close_price < open_price:
        return Direction.BEAR
    return None


def close_live_round(live: LiveRound, close_price: int) -> FinishedRound:
    return FinishedRound(
        id=live.id,
        bid_time=live.bid_time,
        open_time=live.open_time,
        close_time=live.close_time,
        open_price=live.open_price,
        close_price=close_price,
        winner=decide_winner(live.open_price, close_price),
        bull_amount=live.bull_amount,
        bear_amount=live.bear_amount,
    )


def open_bidding_round(
    bidding: BiddingRound, open_price: int, now: int, round_seconds: int
) -> LiveRound:
    return LiveRound(
        id=bidding.id,
        bid_time=bidding.bid_time,
        open_time=now,
        close_time=now + round_seconds,
        open_price=open_price,
        bull_amount=bidding.bull_amount,
        bear_amount=bidding.bear_amount,
    )


def new_bidding_round(
    round_id: int, live: LiveRound | None, now: int, round_seconds: int
) -> BiddingRound:
    open_time = live.close_time if live is not None else now + round_seconds
    return BiddingRound(
        id=round_id,
        bid_time=now,
        open_time=open_time,
        close_time=open_time + round_seconds,
    )


async def advance(
    slots: RoundSlots,
    now: int,
    round_seconds: int,
    fetch_price: PriceFetcher,
) -> AdvanceOutcome:
    bidding = slots.bidding
    live = slots.live
    next_round_id = slots.next_round_id
    finished: FinishedRound | None = None
    promoted: LiveRound | None = None
    created: BiddingRound | None = None
    events: list[RoundEvent] = []

    # 1. Close the live round if it is finished
    if live is not None and now >= live.close_time:
        finished = close_live_round(live, await fetch_price())
        live = None
        events.append(RoundEvent(
            MarketEventType.ROUND_CLOSED,
            finished.id,
            {
                "close_price": finished.close_price,
                "winner": finished.winner.value if finished.winner else "everybody",
            },
        ))

    # 2. Promote the bidding round; never two live rounds at the same time
    if bidding is not None and live is None and now >= bidding.open_time:
        promoted = open_bidding_round(bidding, await fetch_price(), now, round_seconds)
        live = promoted
        bidding = None
        events.append(RoundEvent(
            MarketEventType.ROUND_OPENED,
            promoted.id,
            {
                "open_price": promoted.open_price,
                "bull_amount": promoted.bull_amount,
                "bear_amount": promoted.bear_amount,
            },
        ))

    # 3. Open the next round for betting
    if bidding is None:
        created = new_bidding_round(next_round_id, live, now, round_seconds)
        bidding = created
        next_round_id += 1
        events.append(RoundEvent(
            MarketEventType.ROUND_CREATED,
            created.id,
            {"open_time": created.open_time, "close_time": created.close_time},
        ))

    return AdvanceOutcome(
        slots=RoundSlots(bidding=bidding, live=live, next_round_id=next_round_id),
        finished=finished,
        promoted=promoted,
        created=created,
        events=tuple(events),
    )
