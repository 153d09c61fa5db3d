"""PredictionEngine — the single writer for the prediction market.

Every command runs the same way:

    async with lock:                      # one writer per process
        SELECT market_state FOR UPDATE    # one writer across processes
        ...domain decision (pure)...
        ...persist rounds / bets / counters / transfers / events...
        commit                            # or rollback on any exception

Domain code (scheduler, ledger, settlement) computes the full outcome before
the first write, including every price read, so a failing collaborator never
leaves a half-applied command behind.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from src.pp_account.application.transfer import TransferService
from src.pp_betting.domain.ledger import BetPlacement, place_bet
from src.pp_betting.domain.repository import BetRepositoryProtocol
from src.pp_betting.infrastructure.persistence import BetRepository
from src.pp_clearing.domain.fee import accumulate
from src.pp_clearing.domain.settlement import Claim, build_claim, is_claimable
from src.pp_clearing.infrastructure.event_log import write_market_event
from src.pp_common.datetime_utils import Clock, now_ts
from src.pp_common.enums import Direction, MarketEventType
from src.pp_common.errors import AppError, MarketNotInitializedError, MarketPausedError
from src.pp_market.domain.config_rules import validate_config
from src.pp_market.domain.models import MarketConfig, MarketState
from src.pp_market.domain.repository import MarketRepositoryProtocol
from src.pp_market.domain.scheduler import AdvanceOutcome, advance
from src.pp_market.infrastructure.persistence import MarketRepository
from src.pp_oracle.price_feed import PriceFeedProtocol

logger = logging.getLogger(__name__)

T = TypeVar("T")

EventWriter = Callable[
    [MarketEventType, int | None, dict[str, object], int, AsyncSession], Awaitable[None]
]


class PredictionEngine:
    def __init__(
        self,
        price_feed: PriceFeedProtocol,
        market_repo: MarketRepositoryProtocol | None = None,
        bet_repo: BetRepositoryProtocol | None = None,
        transfers: TransferService | None = None,
        clock: Clock = now_ts,
        event_writer: EventWriter = write_market_event,
    ) -> None:
        self._price_feed = price_feed
        self._market_repo: MarketRepositoryProtocol = market_repo or MarketRepository()
        self._bet_repo: BetRepositoryProtocol = bet_repo or BetRepository()
        self._transfers = transfers or TransferService()
        self._clock = clock
        self._write_event = event_writer
        self._lock = asyncio.Lock()

    @property
    def clock(self) -> Clock:
        return self._clock

    # ------------------------------------------------------------------
    # Command plumbing
    # ------------------------------------------------------------------

    async def _run(
        self,
        name: str,
        db: AsyncSession,
        command: Callable[[MarketState, int], Awaitable[T]],
    ) -> T:
        async with self._lock:
            try:
                state = await self._market_repo.load_state(db, for_update=True)
                if state is None:
                    raise MarketNotInitializedError()
                result = await command(state, self._clock())
                await db.commit()
            except Exception as exc:
                await db.rollback()
                if isinstance(exc, AppError):
                    logger.warning("%s aborted: [%d] %s", name, exc.code, exc.message)
                else:
                    logger.exception("%s failed", name)
                raise
            return result

    @staticmethod
    def _assert_not_paused(state: MarketState) -> None:
        if state.is_paused:
            raise MarketPausedError()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def place_bet(
        self,
        db: AsyncSession,
        player_id: str,
        round_id: int,
        direction: Direction,
        gross_amount: int,
    ) -> BetPlacement:
        async def command(state: MarketState, now: int) -> BetPlacement:
            self._assert_not_paused(state)
            existing = await self._bet_repo.get_bet(db, round_id, player_id)
            placement = place_bet(
                state.bidding, existing, player_id, round_id,
                gross_amount, direction, state.config, now,
            )
            fee, volume = accumulate(state.accumulated_fee, state.total_volume, placement.charge)

            await self._transfers.pull_stake(db, player_id, gross_amount, round_id)
            await self._bet_repo.insert_bet(db, placement.bet)
            await self._market_repo.save_round(db, placement.round)
            await self._market_repo.save_counters(db, state.next_round_id, fee, volume)
            await self._write_event(
                MarketEventType.BET_PLACED,
                round_id,
                {
                    "player_id": player_id,
                    "direction": direction.value,
                    "gross": placement.charge.gross,
                    "fee": placement.charge.fee,
                    "amount": placement.bet.amount,
                },
                now,
                db,
            )
            logger.info(
                "Bet placed: round=%d player=%s %s net=%d fee=%d",
                round_id, player_id, direction.value,
                placement.bet.amount, placement.charge.fee,
            )
            return placement

        return await self._run("place_bet", db, command)

    async def advance(self, db: AsyncSession) -> AdvanceOutcome:
        async def command(state: MarketState, now: int) -> AdvanceOutcome:
            self._assert_not_paused(state)
            outcome = await advance(
                state.slots, now, state.config.round_seconds, self._price_feed.get_price
            )
            if not outcome.changed:
                logger.debug("Advance at %d: nothing due", now)
                return outcome

            # Order matters for the one-BIDDING / one-LIVE unique indexes
            for round_ in (outcome.finished, outcome.promoted, outcome.created):
                if round_ is not None:
                    await self._market_repo.save_round(db, round_)
            await self._market_repo.save_counters(
                db, outcome.slots.next_round_id, state.accumulated_fee, state.total_volume
            )
            for event in outcome.events:
                await self._write_event(event.event_type, event.round_id, event.attributes, now, db)
                logger.info("Round %d: %s %s", event.round_id, event.event_type.value, event.attributes)
            return outcome

        return await self._run("advance", db, command)

    async def collect(self, db: AsyncSession, player_id: str) -> Claim:
        async def command(state: MarketState, now: int) -> Claim:
            bets = await self._bet_repo.list_all_bets(db, player_id)
            eligible = [b for b in bets if is_claimable(b, state.claimable_before)]
            rounds = await self._market_repo.get_finished_rounds(
                db, [b.round_id for b in eligible]
            )
            claim = build_claim(player_id, eligible, rounds, state.claimable_before)

            await self._bet_repo.delete_bets(db, player_id, claim.round_ids)
            await self._transfers.push_winnings(db, player_id, claim.total)
            await self._write_event(
                MarketEventType.WINNINGS_COLLECTED,
                None,
                {"player_id": player_id, "amount": claim.total, "round_ids": claim.round_ids},
                now,
                db,
            )
            logger.info(
                "Collected %d for %s over %d round(s)", claim.total, player_id, len(claim.settled)
            )
            return claim

        return await self._run("collect", db, command)

    async def update_config(self, db: AsyncSession, config: MarketConfig) -> MarketConfig:
        # Takes effect on the next transition; already scheduled rounds keep their times
        async def command(state: MarketState, now: int) -> MarketConfig:
            validate_config(config)
            await self._market_repo.save_config(db, config)
            await self._write_event(
                MarketEventType.CONFIG_UPDATED,
                None,
                {
                    "round_seconds": config.round_seconds,
                    "minimum_bet": config.minimum_bet,
                    "fee_bps": config.fee_bps,
                },
                now,
                db,
            )
            logger.info("Market config updated: %s", config)
            return config

        return await self._run("update_config", db, command)

    async def set_paused(self, db: AsyncSession, is_paused: bool) -> bool:
        async def command(state: MarketState, now: int) -> bool:
            await self._market_repo.save_paused(db, is_paused)
            event_type = MarketEventType.MARKET_PAUSED if is_paused else MarketEventType.MARKET_RESUMED
            await self._write_event(event_type, None, {}, now, db)
            logger.info("Market %s", "paused" if is_paused else "resumed")
            return is_paused

        return await self._run("set_paused", db, command)
