# src/pp_admin/api/router.py
"""Admin REST API — every route requires an is_admin user."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from src.pp_admin.application.service import AdminService
from src.pp_account.domain.constants import MAX_AMOUNT
from src.pp_common.database import get_db_session
from src.pp_common.redis_client import get_redis
from src.pp_common.response import ApiResponse, success_response
from src.pp_engine.application.service import get_prediction_engine
from src.pp_engine.engine import PredictionEngine
from src.pp_gateway.auth.dependencies import require_admin
from src.pp_gateway.user.db_models import UserModel
from src.pp_market.application.schemas import ConfigRequest
from src.pp_oracle.price_feed import RedisPriceFeed

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


class PriceRequest(BaseModel):
    price: int = Field(..., le=MAX_AMOUNT, description="Reference price in feed units")


@router.put("/config")
async def update_config(
    body: ConfigRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    engine: Annotated[PredictionEngine, Depends(get_prediction_engine)],
) -> ApiResponse:
    result = await _service.update_config(engine, body.to_domain(), db)
    return success_response(result, request)


@router.post("/pause")
async def pause_market(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    engine: Annotated[PredictionEngine, Depends(get_prediction_engine)],
) -> ApiResponse:
    result = await _service.set_paused(engine, True, db)
    return success_response(result, request)


@router.post("/resume")
async def resume_market(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    engine: Annotated[PredictionEngine, Depends(get_prediction_engine)],
) -> ApiResponse:
    result = await _service.set_paused(engine, False, db)
    return success_response(result, request)


@router.post("/oracle/price")
async def push_price(
    body: PriceRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    engine: Annotated[PredictionEngine, Depends(get_prediction_engine)],
) -> ApiResponse:
    feed = RedisPriceFeed(await get_redis())
    result = await _service.push_price(engine, feed, body.price)
    return success_response(result, request)
