"""FeeAccumulator — protocol fee taken out of every wager.

fee = floor(gross x fee_bps / FEE_PRECISION), integer only.
The fee is retained out of the transferred gross, not charged on top:
net = gross - fee is what gets staked, paid out and refunded.
"""

from dataclasses import dataclass

FEE_PRECISION = 10_000  # fee_bps is in basis points: 100 = 1%


@dataclass(frozen=True)
class FeeCharge:
    gross: int
    fee: int

    @property
    def net(self) -> int:
        return self.gross - self.fee


def calc_fee(gross: int, fee_bps: int) -> int:
    """Floor division fee: (gross x fee_bps) // 10000."""
    return gross * fee_bps // FEE_PRECISION


def charge_fee(gross: int, fee_bps: int) -> FeeCharge:
    return FeeCharge(gross=gross, fee=calc_fee(gross, fee_bps))


def accumulate(accumulated_fee: int, total_volume: int, charge: FeeCharge) -> tuple[int, int]:
    """Return (accumulated_fee, total_volume) after one charged wager."""
    return accumulated_fee + charge.fee, total_volume + charge.net
