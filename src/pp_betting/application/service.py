"""BettingApplicationService — read side of the bet ledger.

All methods are read-only; placing bets and collecting go through
PredictionEngine.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.pp_betting.application.schemas import (
    BetListResponse,
    BetOut,
    PendingRewardResponse,
    PositionResponse,
)
from src.pp_betting.domain.ledger import resolve_page_limit
from src.pp_betting.domain.models import Bet, Position
from src.pp_betting.domain.repository import BetRepositoryProtocol
from src.pp_betting.infrastructure.persistence import BetRepository
from src.pp_clearing.domain.settlement import pending_reward
from src.pp_common.enums import Direction, SortOrder
from src.pp_common.errors import MarketNotInitializedError
from src.pp_market.domain.repository import MarketRepositoryProtocol
from src.pp_market.infrastructure.persistence import MarketRepository


def _split(bet: Bet | None) -> tuple[int, int]:
    """(bull, bear) amounts for a single bet."""
    if bet is None:
        return 0, 0
    if bet.direction is Direction.BULL:
        return bet.amount, 0
    return 0, bet.amount


class BettingApplicationService:
    def __init__(
        self,
        bet_repo: BetRepositoryProtocol | None = None,
        market_repo: MarketRepositoryProtocol | None = None,
    ) -> None:
        self._bet_repo: BetRepositoryProtocol = bet_repo or BetRepository()
        self._market_repo: MarketRepositoryProtocol = market_repo or MarketRepository()

    async def list_bets(
        self,
        db: AsyncSession,
        player_id: str,
        start_after: int | None,
        limit: int | None,
        order: SortOrder,
    ) -> BetListResponse:
        page_size = resolve_page_limit(limit)
        # Fetch limit+1 to detect has_more without COUNT(*)
        bets = await self._bet_repo.list_bets(
            db, player_id, start_after, page_size + 1, order is SortOrder.DESC
        )
        has_more = len(bets) > page_size
        page = bets[:page_size]
        return BetListResponse(
            items=[BetOut.from_domain(b) for b in page],
            next_start_after=page[-1].round_id if has_more and page else None,
            has_more=has_more,
        )

    async def get_position(self, db: AsyncSession, player_id: str) -> PositionResponse:
        state = await self._market_repo.load_state(db)
        if state is None:
            raise MarketNotInitializedError()

        live_id = state.live.id if state.live else None
        next_id = state.bidding.id if state.bidding else None
        live_bet = await self._bet_repo.get_bet(db, live_id, player_id) if live_id is not None else None
        next_bet = await self._bet_repo.get_bet(db, next_id, player_id) if next_id is not None else None

        live_bull, live_bear = _split(live_bet)
        next_bull, next_bear = _split(next_bet)
        position = Position(
            live_bull_amount=live_bull,
            live_bear_amount=live_bear,
            next_bull_amount=next_bull,
            next_bear_amount=next_bear,
        )
        return PositionResponse.from_domain(position, live_id, next_id)

    async def get_pending_reward(
        self, db: AsyncSession, player_id: str
    ) -> PendingRewardResponse:
        bets = await self._bet_repo.list_all_bets(db, player_id)
        rounds = await self._market_repo.get_finished_rounds(db, [b.round_id for b in bets])
        return PendingRewardResponse(pending_reward=pending_reward(bets, rounds))
