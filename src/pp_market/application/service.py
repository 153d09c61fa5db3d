"""MarketApplicationService — read side of the market.

Queries only; commands go through PredictionEngine.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.pp_common.datetime_utils import Clock, now_ts
from src.pp_common.errors import MarketNotInitializedError, RoundNotFoundError
from src.pp_market.application.schemas import (
    AdvanceResponse,
    ConfigResponse,
    RoundOut,
    StatusResponse,
)
from src.pp_market.domain.models import MarketState
from src.pp_market.domain.repository import MarketRepositoryProtocol
from src.pp_market.domain.scheduler import AdvanceOutcome
from src.pp_market.infrastructure.persistence import MarketRepository


class MarketApplicationService:
    def __init__(
        self, repo: MarketRepositoryProtocol | None = None, clock: Clock = now_ts
    ) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._clock = clock

    async def _state(self, db: AsyncSession) -> MarketState:
        state = await self._repo.load_state(db)
        if state is None:
            raise MarketNotInitializedError()
        return state

    async def get_config(self, db: AsyncSession) -> ConfigResponse:
        state = await self._state(db)
        return ConfigResponse.from_domain(state.config, state.is_paused, state.accumulated_fee)

    async def get_status(self, db: AsyncSession) -> StatusResponse:
        state = await self._state(db)
        finished = await self._repo.get_latest_finished_round(db)
        return StatusResponse.build(
            bidding=state.bidding,
            live=state.live,
            finished=finished,
            total_volume=state.total_volume,
            accumulated_fee=state.accumulated_fee,
            current_time=self._clock(),
            is_paused=state.is_paused,
        )

    async def get_finished_round(self, db: AsyncSession, round_id: int) -> RoundOut:
        round_ = await self._repo.get_finished_round(db, round_id)
        if round_ is None:
            raise RoundNotFoundError(round_id)
        return RoundOut.from_domain(round_)


def advance_to_response(outcome: AdvanceOutcome) -> AdvanceResponse:
    slots = outcome.slots
    return AdvanceResponse(
        changed=outcome.changed,
        finished_round=RoundOut.from_domain(outcome.finished) if outcome.finished else None,
        live_round=RoundOut.from_domain(slots.live) if slots.live else None,
        bidding_round=RoundOut.from_domain(slots.bidding) if slots.bidding else None,
        events=[e.event_type.value for e in outcome.events],
    )
