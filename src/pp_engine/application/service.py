# src/pp_engine/application/service.py
from src.pp_common.redis_client import get_redis
from src.pp_engine.engine import PredictionEngine
from src.pp_oracle.price_feed import RedisPriceFeed

_engine: PredictionEngine | None = None


async def get_prediction_engine() -> PredictionEngine:
    """FastAPI dependency: the process-wide engine (one lock per process)."""
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = PredictionEngine(price_feed=RedisPriceFeed(await get_redis()))
    return _engine
