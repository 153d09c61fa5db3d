"""Round endpoints.

POST /rounds/advance     — permissionless trigger for the round scheduler (no auth)
GET  /rounds/{round_id}  — a Finished round
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pp_common.database import get_db_session
from src.pp_common.response import ApiResponse, success_response
from src.pp_engine.application.service import get_prediction_engine
from src.pp_engine.engine import PredictionEngine
from src.pp_market.application.service import MarketApplicationService, advance_to_response

router = APIRouter(prefix="/rounds", tags=["rounds"])

_service = MarketApplicationService()


@router.post("/advance")
async def advance_round(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    engine: Annotated[PredictionEngine, Depends(get_prediction_engine)],
) -> ApiResponse:
    outcome = await engine.advance(db)
    resp = success_response(advance_to_response(outcome).model_dump(), request)
    if not outcome.changed:
        resp.message = "Nothing to advance"
    return resp


@router.get("/{round_id}")
async def get_round(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    round_id: int = Path(..., ge=0),
) -> ApiResponse:
    result = await _service.get_finished_round(db, round_id)
    return success_response(result.model_dump(), request)
