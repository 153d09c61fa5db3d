"""DB helper for market_events — the append-only audit trail.

Called from PredictionEngine within its transaction, so an aborted command
leaves no events behind.
"""
import json

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pp_common.enums import MarketEventType

_INSERT_EVENT_SQL = text("""
    INSERT INTO market_events (event_type, round_id, payload, created_at_ts)
    VALUES (:event_type, :round_id, CAST(:payload AS JSONB), :created_at_ts)
""")


async def write_market_event(
    event_type: MarketEventType,
    round_id: int | None,
    payload: dict[str, object],
    created_at_ts: int,
    db: AsyncSession,
) -> None:
    """Insert one row into market_events within the caller's transaction."""
    await db.execute(
        _INSERT_EVENT_SQL,
        {
            "event_type": event_type.value,
            "round_id": round_id,
            "payload": json.dumps(payload),
            "created_at_ts": created_at_ts,
        },
    )
