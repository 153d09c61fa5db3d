"""In-memory collaborators for engine and service tests.

The fakes keep the same observable semantics as the SQL repositories
(keyset ordering, one bet per (round, player), finished rounds immutable)
so domain flows can be exercised end to end without PostgreSQL.
"""

from collections.abc import Iterable
from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

from src.pp_betting.domain.models import Bet
from src.pp_common.errors import InsufficientBalanceError, PriceFeedUnavailableError
from src.pp_market.domain.models import (
    BiddingRound,
    FinishedRound,
    LiveRound,
    MarketConfig,
    MarketState,
    Round,
)


class InMemoryMarketRepo:
    def __init__(self, config: MarketConfig | None = None) -> None:
        self.state: MarketState | None = MarketState(
            config=config or MarketConfig(round_seconds=300, minimum_bet=10, fee_bps=100),
            is_paused=False,
            next_round_id=0,
            accumulated_fee=0,
            total_volume=0,
            bidding=None,
            live=None,
        )
        self.finished: dict[int, FinishedRound] = {}
        self.writes = 0

    async def load_state(self, db, for_update: bool = False) -> MarketState | None:
        return self.state

    async def save_counters(self, db, next_round_id, accumulated_fee, total_volume) -> None:
        self.writes += 1
        self.state = replace(
            self.state,
            next_round_id=next_round_id,
            accumulated_fee=accumulated_fee,
            total_volume=total_volume,
        )

    async def save_config(self, db, config: MarketConfig) -> None:
        self.writes += 1
        self.state = replace(self.state, config=config)

    async def save_paused(self, db, is_paused: bool) -> None:
        self.writes += 1
        self.state = replace(self.state, is_paused=is_paused)

    async def save_round(self, db, round_: Round) -> None:
        self.writes += 1
        state = self.state
        if isinstance(round_, FinishedRound):
            self.finished[round_.id] = round_
            if state.live is not None and state.live.id == round_.id:
                state = replace(state, live=None)
        elif isinstance(round_, LiveRound):
            state = replace(state, live=round_)
            if state.bidding is not None and state.bidding.id == round_.id:
                state = replace(state, bidding=None)
        elif isinstance(round_, BiddingRound):
            state = replace(state, bidding=round_)
        self.state = state

    async def get_finished_round(self, db, round_id: int) -> FinishedRound | None:
        return self.finished.get(round_id)

    async def get_finished_rounds(self, db, round_ids: Iterable[int]) -> dict[int, FinishedRound]:
        return {i: self.finished[i] for i in round_ids if i in self.finished}

    async def get_latest_finished_round(self, db) -> FinishedRound | None:
        return self.finished[max(self.finished)] if self.finished else None


class InMemoryBetRepo:
    def __init__(self) -> None:
        self.bets: dict[tuple[int, str], Bet] = {}

    async def get_bet(self, db, round_id: int, player_id: str) -> Bet | None:
        return self.bets.get((round_id, player_id))

    async def insert_bet(self, db, bet: Bet) -> None:
        key = (bet.round_id, bet.player_id)
        assert key not in self.bets, "primary key violation"
        self.bets[key] = bet

    async def delete_bets(self, db, player_id: str, round_ids: list[int]) -> int:
        deleted = 0
        for round_id in round_ids:
            if self.bets.pop((round_id, player_id), None) is not None:
                deleted += 1
        return deleted

    async def list_bets(self, db, player_id, start_after, limit, descending) -> list[Bet]:
        bets = sorted(
            (b for b in self.bets.values() if b.player_id == player_id),
            key=lambda b: b.round_id,
            reverse=descending,
        )
        if start_after is not None:
            if descending:
                bets = [b for b in bets if b.round_id < start_after]
            else:
                bets = [b for b in bets if b.round_id > start_after]
        return bets[:limit]

    async def list_all_bets(self, db, player_id: str) -> list[Bet]:
        return sorted(
            (b for b in self.bets.values() if b.player_id == player_id),
            key=lambda b: b.round_id,
        )


class FakeTransfers:
    """Balances keyed by player; custody tracked separately."""

    def __init__(self, balances: dict[str, int] | None = None) -> None:
        self.balances: dict[str, int] = dict(balances or {})
        self.custody = 0

    async def pull_stake(self, db, player_id: str, amount: int, round_id: int) -> None:
        available = self.balances.get(player_id, 0)
        if available < amount:
            raise InsufficientBalanceError(amount, available)
        self.balances[player_id] = available - amount
        self.custody += amount

    async def push_winnings(self, db, player_id: str, amount: int) -> None:
        assert self.custody >= amount, "custody overdrawn"
        self.custody -= amount
        self.balances[player_id] = self.balances.get(player_id, 0) + amount


class FakePriceFeed:
    def __init__(self, *prices: int) -> None:
        self.prices = list(prices)
        self.calls = 0
        self.fail = False

    async def get_price(self) -> int:
        self.calls += 1
        if self.fail:
            raise PriceFeedUnavailableError("feed down")
        if len(self.prices) > 1:
            return self.prices.pop(0)
        return self.prices[0]


class FakeClock:
    def __init__(self, now: int = 1_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def market_repo() -> InMemoryMarketRepo:
    return InMemoryMarketRepo()


@pytest.fixture
def bet_repo() -> InMemoryBetRepo:
    return InMemoryBetRepo()


@pytest.fixture
def transfers() -> FakeTransfers:
    return FakeTransfers({"alice": 10_000, "bob": 10_000, "carol": 10_000})


@pytest.fixture
def price_feed() -> FakePriceFeed:
    return FakePriceFeed(100)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1_000)


@pytest.fixture
def db() -> AsyncMock:
    return AsyncMock()
