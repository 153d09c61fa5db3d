"""BetRepository — concrete implementation of BetRepositoryProtocol.

Primary key (round_id, player_id) enforces one bet per player per round.
The player index is idx_bets_player_round (player_id, round_id): every
per-player read is a keyset range scan over it, with an exclusive cursor
in either direction.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pp_betting.domain.models import Bet
from src.pp_common.enums import Direction

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GET_BET_SQL = text("""
    SELECT player_id, round_id, amount, direction
    FROM bets
    WHERE round_id = :round_id AND player_id = :player_id
""")

_INSERT_BET_SQL = text("""
    INSERT INTO bets (round_id, player_id, amount, direction)
    VALUES (:round_id, :player_id, :amount, :direction)
""")

_DELETE_BETS_SQL = text("""
    DELETE FROM bets
    WHERE player_id = :player_id
      AND round_id = ANY(CAST(:round_ids AS BIGINT[]))
""")

# asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
_LIST_BETS_ASC_SQL = text("""
    SELECT player_id, round_id, amount, direction
    FROM bets
    WHERE player_id = :player_id
      AND (CAST(:start_after AS BIGINT) IS NULL OR round_id > CAST(:start_after AS BIGINT))
    ORDER BY round_id ASC
    LIMIT :limit
""")

_LIST_BETS_DESC_SQL = text("""
    SELECT player_id, round_id, amount, direction
    FROM bets
    WHERE player_id = :player_id
      AND (CAST(:start_after AS BIGINT) IS NULL OR round_id < CAST(:start_after AS BIGINT))
    ORDER BY round_id DESC
    LIMIT :limit
""")

_LIST_ALL_BETS_SQL = text("""
    SELECT player_id, round_id, amount, direction
    FROM bets
    WHERE player_id = :player_id
    ORDER BY round_id ASC
""")


def _row_to_bet(row: object) -> Bet:
    return Bet(
        player_id=row.player_id,  # type: ignore[attr-defined]
        round_id=row.round_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        direction=Direction(row.direction),  # type: ignore[attr-defined]
    )


class BetRepository:
    async def get_bet(
        self, db: AsyncSession, round_id: int, player_id: str
    ) -> Bet | None:
        row = (
            await db.execute(_GET_BET_SQL, {"round_id": round_id, "player_id": player_id})
        ).fetchone()
        return _row_to_bet(row) if row else None

    async def insert_bet(self, db: AsyncSession, bet: Bet) -> None:
        await db.execute(
            _INSERT_BET_SQL,
            {
                "round_id": bet.round_id,
                "player_id": bet.player_id,
                "amount": bet.amount,
                "direction": bet.direction.value,
            },
        )

    async def delete_bets(
        self, db: AsyncSession, player_id: str, round_ids: list[int]
    ) -> int:
        if not round_ids:
            return 0
        result = await db.execute(
            _DELETE_BETS_SQL, {"player_id": player_id, "round_ids": round_ids}
        )
        return int(result.rowcount)  # type: ignore[attr-defined]

    async def list_bets(
        self,
        db: AsyncSession,
        player_id: str,
        start_after: int | None,
        limit: int,
        descending: bool,
    ) -> list[Bet]:
        sql = _LIST_BETS_DESC_SQL if descending else _LIST_BETS_ASC_SQL
        rows = (
            await db.execute(
                sql, {"player_id": player_id, "start_after": start_after, "limit": limit}
            )
        ).fetchall()
        return [_row_to_bet(row) for row in rows]

    async def list_all_bets(self, db: AsyncSession, player_id: str) -> list[Bet]:
        rows = (
            await db.execute(_LIST_ALL_BETS_SQL, {"player_id": player_id})
        ).fetchall()
        return [_row_to_bet(row) for row in rows]
