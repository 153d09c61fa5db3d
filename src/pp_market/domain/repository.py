# src/pp_market/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from collections.abc import Iterable
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pp_market.domain.models import FinishedRound, MarketConfig, MarketState, Round


class MarketRepositoryProtocol(Protocol):
    async def load_state(
        self, db: AsyncSession, for_update: bool = False
    ) -> MarketState | None: ...

    async def save_counters(
        self,
        db: AsyncSession,
        next_round_id: int,
        accumulated_fee: int,
        total_volume: int,
    ) -> None: ...

    async def save_config(self, db: AsyncSession, config: MarketConfig) -> None: ...

    async def save_paused(self, db: AsyncSession, is_paused: bool) -> None: ...

    async def save_round(self, db: AsyncSession, round_: Round) -> None: ...

    async def get_finished_round(
        self, db: AsyncSession, round_id: int
    ) -> FinishedRound | None: ...

    async def get_finished_rounds(
        self, db: AsyncSession, round_ids: Iterable[int]
    ) -> dict[int, FinishedRound]: ...

    async def get_latest_finished_round(
        self, db: AsyncSession
    ) -> FinishedRound | None: ...
