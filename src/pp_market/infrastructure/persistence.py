"""MarketRepository — concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM).
market_state is a singleton row (id = 1); loading it FOR UPDATE is what
serialises commands across processes. Rounds share one table, the phase
column tells Bidding/Live/Finished apart and partial unique indexes keep at
most one BIDDING and one LIVE row.

Transaction ownership: PredictionEngine commits or rolls back.
"""

from collections.abc import Iterable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pp_common.enums import Direction, RoundPhase
from src.pp_market.domain.models import (
    BiddingRound,
    FinishedRound,
    LiveRound,
    MarketConfig,
    MarketState,
    Round,
)

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_STATE_COLUMNS = """
    round_seconds, minimum_bet, fee_bps, is_paused,
    next_round_id, accumulated_fee, total_volume
"""

_GET_STATE_SQL = text(f"SELECT {_STATE_COLUMNS} FROM market_state WHERE id = 1")

_GET_STATE_FOR_UPDATE_SQL = text(
    f"SELECT {_STATE_COLUMNS} FROM market_state WHERE id = 1 FOR UPDATE"
)

_ROUND_COLUMNS = """
    id, phase, bid_time, open_time, close_time,
    open_price, close_price, winner, bull_amount, bear_amount
"""

_GET_OPEN_ROUNDS_SQL = text(f"""
    SELECT {_ROUND_COLUMNS}
    FROM rounds
    WHERE phase IN ('BIDDING', 'LIVE')
""")

_GET_FINISHED_ROUND_SQL = text(f"""
    SELECT {_ROUND_COLUMNS}
    FROM rounds
    WHERE id = :round_id AND phase = 'FINISHED'
""")

_GET_FINISHED_ROUNDS_SQL = text(f"""
    SELECT {_ROUND_COLUMNS}
    FROM rounds
    WHERE id = ANY(CAST(:round_ids AS BIGINT[])) AND phase = 'FINISHED'
""")

_GET_LATEST_FINISHED_SQL = text(f"""
    SELECT {_ROUND_COLUMNS}
    FROM rounds
    WHERE phase = 'FINISHED'
    ORDER BY id DESC
    LIMIT 1
""")

_UPSERT_ROUND_SQL = text("""
    INSERT INTO rounds
        (id, phase, bid_time, open_time, close_time,
         open_price, close_price, winner, bull_amount, bear_amount)
    VALUES
        (:id, :phase, :bid_time, :open_time, :close_time,
         :open_price, :close_price, :winner, :bull_amount, :bear_amount)
    ON CONFLICT (id) DO UPDATE
        SET phase       = EXCLUDED.phase,
            open_time   = EXCLUDED.open_time,
            close_time  = EXCLUDED.close_time,
            open_price  = EXCLUDED.open_price,
            close_price = EXCLUDED.close_price,
            winner      = EXCLUDED.winner,
            bull_amount = EXCLUDED.bull_amount,
            bear_amount = EXCLUDED.bear_amount,
            updated_at  = NOW()
        WHERE rounds.phase <> 'FINISHED'
""")

_SAVE_COUNTERS_SQL = text("""
    UPDATE market_state
    SET next_round_id   = :next_round_id,
        accumulated_fee = :accumulated_fee,
        total_volume    = :total_volume
    WHERE id = 1
""")

_SAVE_CONFIG_SQL = text("""
    UPDATE market_state
    SET round_seconds = :round_seconds,
        minimum_bet   = :minimum_bet,
        fee_bps       = :fee_bps
    WHERE id = 1
""")

_SAVE_PAUSED_SQL = text("UPDATE market_state SET is_paused = :is_paused WHERE id = 1")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_round(row: object) -> Round:
    phase = row.phase  # type: ignore[attr-defined]
    if phase == RoundPhase.BIDDING:
        return BiddingRound(
            id=row.id,  # type: ignore[attr-defined]
            bid_time=row.bid_time,  # type: ignore[attr-defined]
            open_time=row.open_time,  # type: ignore[attr-defined]
            close_time=row.close_time,  # type: ignore[attr-defined]
            bull_amount=row.bull_amount,  # type: ignore[attr-defined]
            bear_amount=row.bear_amount,  # type: ignore[attr-defined]
        )
    if phase == RoundPhase.LIVE:
        return LiveRound(
            id=row.id,  # type: ignore[attr-defined]
            bid_time=row.bid_time,  # type: ignore[attr-defined]
            open_time=row.open_time,  # type: ignore[attr-defined]
            close_time=row.close_time,  # type: ignore[attr-defined]
            open_price=row.open_price,  # type: ignore[attr-defined]
            bull_amount=row.bull_amount,  # type: ignore[attr-defined]
            bear_amount=row.bear_amount,  # type: ignore[attr-defined]
        )
    return _row_to_finished(row)


def _row_to_finished(row: object) -> FinishedRound:
    winner = row.winner  # type: ignore[attr-defined]
    return FinishedRound(
        id=row.id,  # type: ignore[attr-defined]
        bid_time=row.bid_time,  # type: ignore[attr-defined]
        open_time=row.open_time,  # type: ignore[attr-defined]
        close_time=row.close_time,  # type: ignore[attr-defined]
        open_price=row.open_price,  # type: ignore[attr-defined]
        close_price=row.close_price,  # type: ignore[attr-defined]
        winner=Direction(winner) if winner else None,
        bull_amount=row.bull_amount,  # type: ignore[attr-defined]
        bear_amount=row.bear_amount,  # type: ignore[attr-defined]
    )


def _round_params(round_: Round) -> dict[str, object]:
    params: dict[str, object] = {
        "id": round_.id,
        "bid_time": round_.bid_time,
        "open_time": round_.open_time,
        "close_time": round_.close_time,
        "open_price": None,
        "close_price": None,
        "winner": None,
        "bull_amount": round_.bull_amount,
        "bear_amount": round_.bear_amount,
    }
    if isinstance(round_, BiddingRound):
        params["phase"] = RoundPhase.BIDDING.value
    elif isinstance(round_, LiveRound):
        params["phase"] = RoundPhase.LIVE.value
        params["open_price"] = round_.open_price
    else:
        params["phase"] = RoundPhase.FINISHED.value
        params["open_price"] = round_.open_price
        params["close_price"] = round_.close_price
        params["winner"] = round_.winner.value if round_.winner else None
    return params


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketRepository:
    """Concrete repository for market_state and rounds."""

    async def load_state(
        self, db: AsyncSession, for_update: bool = False
    ) -> MarketState | None:
        sql = _GET_STATE_FOR_UPDATE_SQL if for_update else _GET_STATE_SQL
        row = (await db.execute(sql)).fetchone()
        if row is None:
            return None

        bidding: BiddingRound | None = None
        live: LiveRound | None = None
        for round_row in (await db.execute(_GET_OPEN_ROUNDS_SQL)).fetchall():
            round_ = _row_to_round(round_row)
            if isinstance(round_, BiddingRound):
                bidding = round_
            elif isinstance(round_, LiveRound):
                live = round_

        return MarketState(
            config=MarketConfig(
                round_seconds=row.round_seconds,
                minimum_bet=row.minimum_bet,
                fee_bps=row.fee_bps,
            ),
            is_paused=row.is_paused,
            next_round_id=row.next_round_id,
            accumulated_fee=row.accumulated_fee,
            total_volume=row.total_volume,
            bidding=bidding,
            live=live,
        )

    async def save_counters(
        self,
        db: AsyncSession,
        next_round_id: int,
        accumulated_fee: int,
        total_volume: int,
    ) -> None:
        await db.execute(
            _SAVE_COUNTERS_SQL,
            {
                "next_round_id": next_round_id,
                "accumulated_fee": accumulated_fee,
                "total_volume": total_volume,
            },
        )

    async def save_config(self, db: AsyncSession, config: MarketConfig) -> None:
        await db.execute(
            _SAVE_CONFIG_SQL,
            {
                "round_seconds": config.round_seconds,
                "minimum_bet": config.minimum_bet,
                "fee_bps": config.fee_bps,
            },
        )

    async def save_paused(self, db: AsyncSession, is_paused: bool) -> None:
        await db.execute(_SAVE_PAUSED_SQL, {"is_paused": is_paused})

    async def save_round(self, db: AsyncSession, round_: Round) -> None:
        await db.execute(_UPSERT_ROUND_SQL, _round_params(round_))

    async def get_finished_round(
        self, db: AsyncSession, round_id: int
    ) -> FinishedRound | None:
        row = (
            await db.execute(_GET_FINISHED_ROUND_SQL, {"round_id": round_id})
        ).fetchone()
        return _row_to_finished(row) if row else None

    async def get_finished_rounds(
        self, db: AsyncSession, round_ids: Iterable[int]
    ) -> dict[int, FinishedRound]:
        ids = sorted(set(round_ids))
        if not ids:
            return {}
        rows = (
            await db.execute(_GET_FINISHED_ROUNDS_SQL, {"round_ids": ids})
        ).fetchall()
        rounds = [_row_to_finished(row) for row in rows]
        return {r.id: r for r in rounds}

    async def get_latest_finished_round(
        self, db: AsyncSession
    ) -> FinishedRound | None:
        row = (await db.execute(_GET_LATEST_FINISHED_SQL)).fetchone()
        return _row_to_finished(row) if row else None
