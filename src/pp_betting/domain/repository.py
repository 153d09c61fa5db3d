"""Repository Protocol — dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pp_betting.domain.models import Bet


class BetRepositoryProtocol(Protocol):
    async def get_bet(
        self, db: AsyncSession, round_id: int, player_id: str
    ) -> Bet | None: ...

    async def insert_bet(self, db: AsyncSession, bet: Bet) -> None: ...

    async def delete_bets(
        self, db: AsyncSession, player_id: str, round_ids: list[int]
    ) -> int: ...

    async def list_bets(
        self,
        db: AsyncSession,
        player_id: str,
        start_after: int | None,
        limit: int,
        descending: bool,
    ) -> list[Bet]: ...

    async def list_all_bets(self, db: AsyncSession, player_id: str) -> list[Bet]: ...
