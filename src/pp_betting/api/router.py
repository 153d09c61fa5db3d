"""pp_betting REST endpoints, all scoped to the authenticated player.

POST /bets                 — place a wager on the current Bidding round
POST /bets/collect         — claim every settled bet
GET  /bets                 — own bets, keyset-paginated by round id
GET  /bets/position        — stake in the Live and next (Bidding) rounds
GET  /bets/pending-reward  — unclaimed winnings in finished rounds
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pp_betting.application.schemas import (
    CollectResponse,
    PlaceBetRequest,
    PlaceBetResponse,
)
from src.pp_betting.application.service import BettingApplicationService
from src.pp_common.database import get_db_session
from src.pp_common.enums import SortOrder
from src.pp_common.response import ApiResponse, success_response
from src.pp_engine.application.service import get_prediction_engine
from src.pp_engine.engine import PredictionEngine
from src.pp_gateway.auth.dependencies import get_current_user
from src.pp_gateway.user.db_models import UserModel

router = APIRouter(prefix="/bets", tags=["bets"])

_service = BettingApplicationService()


@router.post("")
async def place_bet(
    body: PlaceBetRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    engine: Annotated[PredictionEngine, Depends(get_prediction_engine)],
) -> ApiResponse:
    placement = await engine.place_bet(
        db, str(current_user.id), body.round_id, body.direction, body.amount
    )
    return success_response(PlaceBetResponse.from_domain(placement).model_dump(), request)


@router.post("/collect")
async def collect_winnings(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    engine: Annotated[PredictionEngine, Depends(get_prediction_engine)],
) -> ApiResponse:
    claim = await engine.collect(db, str(current_user.id))
    return success_response(CollectResponse.from_domain(claim).model_dump(), request)


@router.get("")
async def list_bets(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    start_after: int | None = Query(None, description="Exclusive round id cursor"),
    limit: int | None = Query(None, description="Page size, 1-30 (default 10)"),
    order: SortOrder = Query(SortOrder.ASC),
) -> ApiResponse:
    result = await _service.list_bets(db, str(current_user.id), start_after, limit, order)
    return success_response(result.model_dump(), request)


@router.get("/position")
async def get_position(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_position(db, str(current_user.id))
    return success_response(result.model_dump(), request)


@router.get("/pending-reward")
async def get_pending_reward(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_pending_reward(db, str(current_user.id))
    return success_response(result.model_dump(), request)
