"""Validation for market config updates: the whole config is replaced or nothing is."""

from src.pp_clearing.domain.fee import FEE_PRECISION
from src.pp_common.errors import InvalidConfigError
from src.pp_market.domain.models import MarketConfig


def validate_config(config: MarketConfig) -> MarketConfig:
    if config.round_seconds <= 0:
        raise InvalidConfigError(f"round_seconds must be positive, got {config.round_seconds}")
    if config.minimum_bet < 1:
        raise InvalidConfigError(f"minimum_bet must be at least 1, got {config.minimum_bet}")
    if not 0 <= config.fee_bps <= FEE_PRECISION:
        raise InvalidConfigError(
            f"fee_bps must be between 0 and {FEE_PRECISION}, got {config.fee_bps}"
        )
    return config
