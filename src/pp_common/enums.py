"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class Direction(str, Enum):
    """Side of a wager: price goes up (BULL) or down (BEAR)."""
    BULL = "BULL"
    BEAR = "BEAR"


class RoundPhase(str, Enum):
    BIDDING = "BIDDING"
    LIVE = "LIVE"
    FINISHED = "FINISHED"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class LedgerEntryType(str, Enum):
    # Deposit/Withdraw
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    # Bet stake (player debit + custody credit)
    BET_STAKE = "BET_STAKE"
    BET_STAKE_CUSTODY_IN = "BET_STAKE_CUSTODY_IN"
    # Winnings (custody debit + player credit)
    WINNINGS_PAYOUT = "WINNINGS_PAYOUT"
    WINNINGS_CUSTODY_OUT = "WINNINGS_CUSTODY_OUT"


class MarketEventType(str, Enum):
    BET_PLACED = "BET_PLACED"
    ROUND_CLOSED = "ROUND_CLOSED"
    ROUND_OPENED = "ROUND_OPENED"
    ROUND_CREATED = "ROUND_CREATED"
    WINNINGS_COLLECTED = "WINNINGS_COLLECTED"
    CONFIG_UPDATED = "CONFIG_UPDATED"
    MARKET_PAUSED = "MARKET_PAUSED"
    MARKET_RESUMED = "MARKET_RESUMED"
