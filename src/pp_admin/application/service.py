# src/pp_admin/application/service.py
"""Admin application service: config, pause switch and oracle price push."""
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.pp_engine.engine import PredictionEngine
from src.pp_market.domain.models import MarketConfig
from src.pp_oracle.price_feed import RedisPriceFeed


class AdminService:
    async def update_config(
        self, engine: PredictionEngine, config: MarketConfig, db: AsyncSession
    ) -> dict[str, Any]:
        saved = await engine.update_config(db, config)
        return {
            "round_seconds": saved.round_seconds,
            "minimum_bet": saved.minimum_bet,
            "fee_bps": saved.fee_bps,
        }

    async def set_paused(
        self, engine: PredictionEngine, is_paused: bool, db: AsyncSession
    ) -> dict[str, Any]:
        return {"is_paused": await engine.set_paused(db, is_paused)}

    async def push_price(
        self, engine: PredictionEngine, feed: RedisPriceFeed, price: int
    ) -> dict[str, Any]:
        updated_at = engine.clock()
        await feed.set_price(price, updated_at)
        return {"price": price, "updated_at": updated_at}
