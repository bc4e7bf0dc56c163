"""
Price corrections for positions recorded before price discovery.
"""

from dataclasses import replace

from .constants import (
    PRICE_DISCOVERY_START_TIMESTAMP,
    PRICE_OVERRIDES,
    STABLECOIN_PRICE_USD,
    WETH_ADDRESS,
    WETH_LAUNCH_PRICE_USD,
)
from .position import Position


def _reference_price(token_id, current_price: float) -> float:
    if token_id in PRICE_OVERRIDES:
        return STABLECOIN_PRICE_USD
    if token_id == WETH_ADDRESS:
        return WETH_LAUNCH_PRICE_USD
    return current_price


def normalize_early_prices(
    position: Position,
    price_discovery_start: int = PRICE_DISCOVERY_START_TIMESTAMP,
) -> Position:
    """
    Replace unreliable early token prices with known reference prices.

    For positions timestamped before `price_discovery_start`, USD-pegged
    tokens in PRICE_OVERRIDES are priced at $1 and WETH at its launch price.
    Other tokens, later positions and positions without a timestamp are
    returned unchanged. The input is never modified.

    Args:
        position: The position to correct.
        price_discovery_start: Unix timestamp after which prices are trusted.

    Returns:
        A Position with corrected token prices.

    Examples:
        >>> p = Position(1, 10, 5, 5, 0, 0.0, 0.0, timestamp=1,
        ...              token0_id='0x6b175474e89094c44da98b954eedeac495271d0f',
        ...              token1_id='0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2')
        >>> q = normalize_early_prices(p)
        >>> (q.token0_price_usd, q.token1_price_usd)
        (1.0, 203.0)
    """
    if position.timestamp is None or position.timestamp >= price_discovery_start:
        return position

    return replace(
        position,
        token0_price_usd=_reference_price(position.token0_id, position.token0_price_usd),
        token1_price_usd=_reference_price(position.token1_id, position.token1_price_usd),
    )
