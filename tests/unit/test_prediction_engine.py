"""Unit tests for PredictionEngine using in-memory repositories (see conftest)."""
from unittest.mock import AsyncMock

import pytest

from src.pp_common.enums import Direction, MarketEventType
from src.pp_common.errors import (
    DuplicateBetError,
    InsufficientBalanceError,
    InvalidConfigError,
    MarketNotInitializedError,
    MarketPausedError,
    NothingToClaimError,
    PriceFeedUnavailableError,
)
from src.pp_engine.engine import PredictionEngine
from src.pp_market.domain.models import MarketConfig

BULL, BEAR = Direction.BULL, Direction.BEAR


@pytest.fixture
def events() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def engine(market_repo, bet_repo, transfers, price_feed, clock, events) -> PredictionEngine:
    return PredictionEngine(
        price_feed=price_feed,
        market_repo=market_repo,
        bet_repo=bet_repo,
        transfers=transfers,
        clock=clock,
        event_writer=events,
    )


def _event_types(events: AsyncMock) -> list[MarketEventType]:
    return [c.args[0] for c in events.await_args_list]


class TestAdvance:
    async def test_first_advance_creates_round_zero(self, engine, market_repo, db) -> None:
        outcome = await engine.advance(db)

        assert outcome.created.id == 0
        assert market_repo.state.bidding.id == 0
        assert market_repo.state.next_round_id == 1
        db.commit.assert_awaited_once()

    async def test_nothing_due_writes_nothing(self, engine, market_repo, events, db) -> None:
        await engine.advance(db)
        writes = market_repo.writes
        events.reset_mock()

        outcome = await engine.advance(db)

        assert outcome.changed is False
        assert market_repo.writes == writes
        events.assert_not_awaited()

    async def test_feed_failure_leaves_state_untouched(
        self, engine, market_repo, price_feed, clock, db
    ) -> None:
        await engine.advance(db)
        before = market_repo.state
        writes = market_repo.writes
        price_feed.fail = True
        clock.now += 300

        with pytest.raises(PriceFeedUnavailableError):
            await engine.advance(db)

        assert market_repo.state == before
        assert market_repo.writes == writes
        db.rollback.assert_awaited()

    async def test_paused_market_rejects_advance(self, engine, market_repo, db) -> None:
        await engine.set_paused(db, True)
        with pytest.raises(MarketPausedError):
            await engine.advance(db)

    async def test_uninitialized_market(self, engine, market_repo, db) -> None:
        market_repo.state = None
        with pytest.raises(MarketNotInitializedError):
            await engine.advance(db)
        db.rollback.assert_awaited_once()

    async def test_events_written_in_transition_order(self, engine, clock, events, db) -> None:
        clock.now = 0
        await engine.advance(db)
        clock.now = 300
        await engine.advance(db)
        clock.now = 600
        await engine.advance(db)

        assert _event_types(events) == [
            MarketEventType.ROUND_CREATED,
            MarketEventType.ROUND_OPENED,
            MarketEventType.ROUND_CREATED,
            MarketEventType.ROUND_CLOSED,
            MarketEventType.ROUND_OPENED,
            MarketEventType.ROUND_CREATED,
        ]


class TestPlaceBet:
    async def test_places_bet_and_pulls_gross(
        self, engine, market_repo, bet_repo, transfers, db
    ) -> None:
        await engine.advance(db)

        placement = await engine.place_bet(db, "alice", 0, BULL, 100)

        assert placement.bet.amount == 99
        assert market_repo.state.bidding.bull_amount == 99
        assert market_repo.state.accumulated_fee == 1
        assert market_repo.state.total_volume == 99
        assert transfers.balances["alice"] == 10_000 - 100
        assert transfers.custody == 100
        assert (0, "alice") in bet_repo.bets

    async def test_duplicate_bet_rejected(self, engine, market_repo, transfers, db) -> None:
        await engine.advance(db)
        await engine.place_bet(db, "alice", 0, BULL, 100)

        with pytest.raises(DuplicateBetError):
            await engine.place_bet(db, "alice", 0, BEAR, 50)

        assert market_repo.state.bidding.bear_amount == 0
        assert transfers.balances["alice"] == 9_900

    async def test_insufficient_balance_writes_nothing(
        self, engine, market_repo, bet_repo, db
    ) -> None:
        await engine.advance(db)
        before = market_repo.state

        with pytest.raises(InsufficientBalanceError):
            await engine.place_bet(db, "mallory", 0, BULL, 100)

        assert market_repo.state == before
        assert bet_repo.bets == {}

    async def test_paused_market_rejects_bets(self, engine, db) -> None:
        await engine.advance(db)
        await engine.set_paused(db, True)

        with pytest.raises(MarketPausedError):
            await engine.place_bet(db, "alice", 0, BULL, 100)

    async def test_resume_reopens_betting(self, engine, db) -> None:
        await engine.advance(db)
        await engine.set_paused(db, True)
        await engine.set_paused(db, False)

        placement = await engine.place_bet(db, "alice", 0, BULL, 100)
        assert placement.bet.round_id == 0

    async def test_pool_totals_match_bets(self, engine, market_repo, bet_repo, db) -> None:
        await engine.advance(db)
        await engine.place_bet(db, "alice", 0, BULL, 100)
        await engine.place_bet(db, "bob", 0, BULL, 250)
        await engine.place_bet(db, "carol", 0, BEAR, 1_000)

        bidding = market_repo.state.bidding
        bets = [b for (r, _), b in bet_repo.bets.items() if r == 0]
        assert bidding.bull_amount == sum(b.amount for b in bets if b.direction is BULL)
        assert bidding.bear_amount == sum(b.amount for b in bets if b.direction is BEAR)


class TestScenarios:
    async def test_one_sided_round_refunds_net_stake(
        self, engine, market_repo, transfers, price_feed, clock, db
    ) -> None:
        clock.now = 0
        await engine.advance(db)
        await engine.place_bet(db, "alice", 0, BULL, 100)

        price_feed.prices = [50]
        clock.now = 300
        await engine.advance(db)
        live = market_repo.state.live
        assert (live.id, live.open_price) == (0, 50)
        assert (market_repo.state.bidding.open_time, market_repo.state.bidding.close_time) == (600, 900)

        price_feed.prices = [60]
        clock.now = 600
        await engine.advance(db)
        finished = market_repo.finished[0]
        assert finished.close_price == 60
        assert finished.winner is BULL
        assert market_repo.state.live.open_price == 60
        assert market_repo.state.bidding.id == 2

        claim = await engine.collect(db, "alice")
        assert claim.total == 99
        assert transfers.balances["alice"] == 10_000 - 100 + 99

    async def test_two_sided_winner_takes_pool(
        self, engine, bet_repo, transfers, price_feed, clock, db
    ) -> None:
        clock.now = 0
        await engine.advance(db)
        await engine.place_bet(db, "alice", 0, BULL, 100)
        await engine.place_bet(db, "bob", 0, BEAR, 100)
        price_feed.prices = [50]
        clock.now = 300
        await engine.advance(db)
        price_feed.prices = [60]
        clock.now = 600
        await engine.advance(db)

        claim = await engine.collect(db, "alice")
        assert claim.total == 198
        with pytest.raises(NothingToClaimError):
            await engine.collect(db, "bob")
        # bob's losing bet stays on record after the aborted collect
        assert (0, "bob") in bet_repo.bets
        assert transfers.custody == 2  # the two fees' worth of gross stays in custody

    async def test_push_refunds_everyone(self, engine, price_feed, clock, db) -> None:
        clock.now = 0
        await engine.advance(db)
        await engine.place_bet(db, "alice", 0, BULL, 300)
        await engine.place_bet(db, "bob", 0, BEAR, 100)
        price_feed.prices = [50]
        clock.now = 300
        await engine.advance(db)
        clock.now = 600
        await engine.advance(db)

        assert (await engine.collect(db, "alice")).total == 297
        assert (await engine.collect(db, "bob")).total == 99


class TestCollect:
    async def _finish_round_zero(self, engine, price_feed, clock, db) -> None:
        clock.now = 0
        await engine.advance(db)
        await engine.place_bet(db, "alice", 0, BULL, 100)
        price_feed.prices = [50]
        clock.now = 300
        await engine.advance(db)
        await engine.place_bet(db, "alice", 1, BULL, 100)
        price_feed.prices = [60]
        clock.now = 600
        await engine.advance(db)

    async def test_collect_twice_raises_nothing_to_claim(
        self, engine, price_feed, clock, db
    ) -> None:
        await self._finish_round_zero(engine, price_feed, clock, db)

        await engine.collect(db, "alice")
        with pytest.raises(NothingToClaimError):
            await engine.collect(db, "alice")

    async def test_live_round_bet_is_not_collected(
        self, engine, bet_repo, price_feed, clock, db
    ) -> None:
        await self._finish_round_zero(engine, price_feed, clock, db)

        claim = await engine.collect(db, "alice")

        assert claim.round_ids == [0]
        assert (1, "alice") in bet_repo.bets
        assert (0, "alice") not in bet_repo.bets

    async def test_collect_writes_event(self, engine, events, price_feed, clock, db) -> None:
        await self._finish_round_zero(engine, price_feed, clock, db)

        await engine.collect(db, "alice")

        assert _event_types(events)[-1] is MarketEventType.WINNINGS_COLLECTED
        payload = events.await_args_list[-1].args[2]
        assert payload == {"player_id": "alice", "amount": 99, "round_ids": [0]}

    async def test_collect_allowed_while_paused(self, engine, price_feed, clock, db) -> None:
        await self._finish_round_zero(engine, price_feed, clock, db)
        await engine.set_paused(db, True)

        assert (await engine.collect(db, "alice")).total == 99


class TestAdmin:
    async def test_update_config(self, engine, market_repo, events, db) -> None:
        config = MarketConfig(round_seconds=60, minimum_bet=5, fee_bps=250)

        assert await engine.update_config(db, config) == config

        assert market_repo.state.config == config
        assert _event_types(events) == [MarketEventType.CONFIG_UPDATED]

    @pytest.mark.parametrize(
        "config",
        [
            MarketConfig(round_seconds=0, minimum_bet=10, fee_bps=100),
            MarketConfig(round_seconds=300, minimum_bet=0, fee_bps=100),
            MarketConfig(round_seconds=300, minimum_bet=10, fee_bps=-1),
            MarketConfig(round_seconds=300, minimum_bet=10, fee_bps=10_001),
        ],
    )
    async def test_invalid_config_rejected(self, engine, market_repo, db, config) -> None:
        before = market_repo.state.config
        with pytest.raises(InvalidConfigError):
            await engine.update_config(db, config)
        assert market_repo.state.config == before

    async def test_new_round_length_applies_to_next_transition(
        self, engine, market_repo, clock, db
    ) -> None:
        clock.now = 0
        await engine.advance(db)
        await engine.update_config(db, MarketConfig(round_seconds=60, minimum_bet=10, fee_bps=100))
        # Round 0 keeps its scheduled open_time
        assert market_repo.state.bidding.open_time == 300

        clock.now = 300
        await engine.advance(db)
        assert market_repo.state.live.close_time == 360

    async def test_pause_and_resume_events(self, engine, events, db) -> None:
        await engine.set_paused(db, True)
        await engine.set_paused(db, False)
        assert _event_types(events) == [
            MarketEventType.MARKET_PAUSED,
            MarketEventType.MARKET_RESUMED,
        ]
