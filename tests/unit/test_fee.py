"""Unit tests for fee arithmetic (integer only, floor division)."""
from src.pp_clearing.domain.fee import FEE_PRECISION, accumulate, calc_fee, charge_fee


class TestCalcFee:
    def test_one_percent_of_100(self) -> None:
        assert calc_fee(100, 100) == 1

    def test_floors_fractional_fee(self) -> None:
        # 1% of 199 = 1.99 -> 1
        assert calc_fee(199, 100) == 1

    def test_small_amount_pays_no_fee(self) -> None:
        assert calc_fee(99, 100) == 0

    def test_zero_rate(self) -> None:
        assert calc_fee(10_000, 0) == 0

    def test_full_rate_takes_everything(self) -> None:
        assert calc_fee(777, FEE_PRECISION) == 777

    def test_large_amounts_stay_exact(self) -> None:
        gross = 10**30 + 7
        assert calc_fee(gross, 250) == gross * 250 // 10_000


class TestChargeFee:
    def test_net_is_gross_minus_fee(self) -> None:
        charge = charge_fee(100, 100)
        assert (charge.gross, charge.fee, charge.net) == (100, 1, 99)


class TestAccumulate:
    def test_adds_fee_and_net_volume(self) -> None:
        assert accumulate(5, 1_000, charge_fee(100, 100)) == (6, 1_099)

    def test_counters_never_decrease(self) -> None:
        fee, volume = 0, 0
        for gross in (10, 55, 1_000, 12_345):
            new_fee, new_volume = accumulate(fee, volume, charge_fee(gross, 100))
            assert new_fee >= fee and new_volume > volume
            fee, volume = new_fee, new_volume
