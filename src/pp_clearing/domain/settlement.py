"""SettlementEngine — pari-mutuel payouts for finished rounds.

A winning bet receives its pro-rata share of the whole pool (both sides):

    payout = amount x (bull_amount + bear_amount) // winning_side_amount

Floor-division remainders are forfeited and stay in custody; they are never
redistributed. One-sided rounds and pushes refund the net stake.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from src.pp_betting.domain.models import Bet
from src.pp_common.enums import Direction
from src.pp_common.errors import InternalError, NothingToClaimError
from src.pp_market.domain.models import FinishedRound


@dataclass(frozen=True)
class SettledBet:
    bet: Bet
    payout: int


@dataclass(frozen=True)
class Claim:
    player_id: str
    settled: tuple[SettledBet, ...]

    @property
    def total(self) -> int:
        return sum(s.payout for s in self.settled)

    @property
    def round_ids(self) -> list[int]:
        return [s.bet.round_id for s in self.settled]


def payout_for(finished_round: FinishedRound, bet: Bet) -> int:
    bull = finished_round.bull_amount
    bear = finished_round.bear_amount

    # Nobody took the other side: refund
    if bull == 0 or bear == 0:
        return bet.amount

    winner = finished_round.winner
    if winner is None:
        return bet.amount
    if bet.direction is not winner:
        return 0

    winning_side = bull if winner is Direction.BULL else bear
    return bet.amount * (bull + bear) // winning_side


def is_claimable(bet: Bet, claimable_before: int) -> bool:
    """Only rounds strictly older than the Live round have finished."""
    return bet.round_id < claimable_before


def settle_bets(
    player_id: str,
    bets: Iterable[Bet],
    rounds: Mapping[int, FinishedRound],
) -> Claim:
    """Compute payouts for every bet in `bets`; each must have a finished round."""
    settled: list[SettledBet] = []
    for bet in bets:
        finished_round = rounds.get(bet.round_id)
        if finished_round is None:
            raise InternalError(f"Round {bet.round_id} is claimable but not finished")
        settled.append(SettledBet(bet=bet, payout=payout_for(finished_round, bet)))
    return Claim(player_id=player_id, settled=tuple(settled))


def build_claim(
    player_id: str,
    bets: Iterable[Bet],
    rounds: Mapping[int, FinishedRound],
    claimable_before: int,
) -> Claim:
    """Settle the player's claimable bets. Raises NothingToClaimError on a zero total.

    A zero total covers both "no settled bets" and "only ever lost"; the
    caller's transaction then aborts and the losing bets stay on record.
    """
    eligible = [b for b in bets if is_claimable(b, claimable_before)]
    claim = settle_bets(player_id, eligible, rounds)
    if claim.total == 0:
        raise NothingToClaimError()
    return claim


def pending_reward(bets: Iterable[Bet], rounds: Mapping[int, FinishedRound]) -> int:
    """Unclaimed winnings across the bets whose round has finished."""
    return sum(
        payout_for(rounds[b.round_id], b) for b in bets if b.round_id in rounds
    )
