"""pp_market REST endpoints.

GET /market/config    — round length, minimum bet, fee, paused flag
GET /market/status    — Bidding/Live/last Finished rounds plus counters
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pp_common.database import get_db_session
from src.pp_common.response import ApiResponse, success_response
from src.pp_market.application.service import MarketApplicationService

router = APIRouter(prefix="/market", tags=["market"])

_service = MarketApplicationService()


@router.get("/config")
async def get_config(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_config(db)
    return success_response(result.model_dump(), request)


@router.get("/status")
async def get_status(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_status(db)
    return success_response(result.model_dump(), request)
