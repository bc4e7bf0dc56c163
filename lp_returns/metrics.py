"""
Return decomposition for a single window bounded by two positions.
"""

import math
from typing import TypedDict

from .position import Position


class ReturnMetrics(TypedDict):
    """Returns earned over one window, all in USD."""
    hodl_return: float      # value change of the t0 token amounts, t0 -> t1 prices
    net_return: float       # change in the provider's share of reserveUSD
    uniswap_return: float   # fees + imp_loss
    imp_loss: float
    fees: float


def get_metrics_for_position_window(position_t0: Position, position_t1: Position) -> ReturnMetrics:
    """
    Decompose the value change of a liquidity position over one window.

    Ownership at t1 uses the t0 pool-share balance against the t1 total supply,
    so the result reflects a static balance being diluted or concentrated.
    Inputs are assumed validated (positive total supply, finite values).

    Args:
        position_t0: The provider's position and pool state at the start of the window.
        position_t1: Pool state and prices at the end of the window.

    Returns:
        A dict with hodl_return, net_return, uniswap_return, imp_loss and fees.

    Examples:
        >>> t0 = Position(100, 1000, 500, 500, 1000, 1.0, 1.0)
        >>> t1 = Position(100, 1000, 500, 500, 1100, 1.1, 1.0)
        >>> round(get_metrics_for_position_window(t0, t1)['net_return'], 9)
        10.0
    """
    t0_ownership = position_t0.ownership()
    t1_ownership = position_t1.ownership(position_t0.liquidity_token_balance)

    # Token amounts owned at the start of the window
    token0_amount_t0 = t0_ownership * position_t0.reserve0
    token1_amount_t0 = t0_ownership * position_t0.reserve1

    # Token amounts owned at the end of the window
    token0_amount_t1 = t1_ownership * position_t1.reserve0
    token1_amount_t1 = t1_ownership * position_t1.reserve1

    # Constant product baseline with no fee accrual
    price1 = position_t1.token1_price_usd
    sqrt_k = math.sqrt(price1)
    token0_amount_no_fees = sqrt_k * math.sqrt(price1) if price1 else 0.0
    token1_amount_no_fees = sqrt_k / math.sqrt(price1) if price1 else 0.0
    no_fees_usd = (
        token0_amount_no_fees * position_t1.token0_price_usd
        + token1_amount_no_fees * position_t1.token1_price_usd
    )

    difference_fees_token0 = token0_amount_t1 - token0_amount_no_fees
    difference_fees_token1 = token1_amount_t1 - token1_amount_no_fees
    difference_fees_usd = (
        difference_fees_token0 * position_t1.token0_price_usd
        + difference_fees_token1 * position_t1.token1_price_usd
    )

    # Hodl: t0 amounts valued at t0 and t1 prices
    asset_value_t0 = (
        token0_amount_t0 * position_t0.token0_price_usd
        + token1_amount_t0 * position_t0.token1_price_usd
    )
    asset_value_t1 = (
        token0_amount_t0 * position_t1.token0_price_usd
        + token1_amount_t0 * position_t1.token1_price_usd
    )

    imp_loss_usd = no_fees_usd - asset_value_t1

    net_value_t0 = t0_ownership * position_t0.reserve_usd
    net_value_t1 = t1_ownership * position_t1.reserve_usd

    return ReturnMetrics(
        hodl_return=asset_value_t1 - asset_value_t0,
        net_return=net_value_t1 - net_value_t0,
        uniswap_return=difference_fees_usd + imp_loss_usd,
        imp_loss=imp_loss_usd,
        fees=difference_fees_usd,
    )
