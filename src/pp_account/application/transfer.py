"""TransferService — moves stake tokens between players and the custody account.

Every movement is two balance updates inside the caller's transaction:
one on the player's account and the mirror one on PREDICTION_POOL, each
with its own ledger entry. Nothing is committed here; PredictionEngine
commits or rolls back the whole command.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pp_account.domain.constants import CUSTODY_ACCOUNT_ID
from src.pp_account.domain.repository import AccountRepositoryProtocol
from src.pp_account.infrastructure.persistence import AccountRepository
from src.pp_common.enums import LedgerEntryType

logger = logging.getLogger(__name__)


class TransferService:
    def __init__(self, repo: AccountRepositoryProtocol | None = None) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()

    async def pull_stake(
        self, db: AsyncSession, player_id: str, amount: int, round_id: int
    ) -> None:
        """Take the gross wager from the player into custody.

        Raises InsufficientBalanceError if the player cannot cover it.
        """
        ref_id = str(round_id)
        await self._repo.debit(
            db, player_id, amount, LedgerEntryType.BET_STAKE.value,
            "ROUND", ref_id, f"Stake on round {round_id}",
        )
        await self._repo.credit(
            db, CUSTODY_ACCOUNT_ID, amount, LedgerEntryType.BET_STAKE_CUSTODY_IN.value,
            "ROUND", ref_id, f"Stake from {player_id}",
        )

    async def push_winnings(self, db: AsyncSession, player_id: str, amount: int) -> None:
        """Pay a collected claim out of custody to the player."""
        await self._repo.debit(
            db, CUSTODY_ACCOUNT_ID, amount, LedgerEntryType.WINNINGS_CUSTODY_OUT.value,
            "CLAIM", player_id, f"Winnings to {player_id}",
        )
        await self._repo.credit(
            db, player_id, amount, LedgerEntryType.WINNINGS_PAYOUT.value,
            "CLAIM", player_id, "Collected winnings",
        )
        logger.debug("Paid %d to %s", amount, player_id)
