"""
Lifetime returns for one liquidity provider on one pair.

Snapshots are taken every time the provider's position changes. Returns are
computed for each window between consecutive snapshots, with the final window
closed by the pool's live state, and summed.
"""

import logging
from typing import Any, List, Mapping, Optional, TypedDict

from .constants import PRICE_DISCOVERY_START_TIMESTAMP
from .errors import EmptyHistoryError
from .metrics import get_metrics_for_position_window
from .position import Position, position_from_pool, positions_from_snapshots
from .prices import normalize_early_prices
from .principal import Principal, get_principal_for_pair
from .sources import LiquidityDataSource, call_source

logger = logging.getLogger(__name__)


# "return" is a keyword, so these use the functional TypedDict form
HodlReturns = TypedDict("HodlReturns", {"sum": float, "return": float})
NetReturns = TypedDict("NetReturns", {"return": float})
UniswapReturns = TypedDict("UniswapReturns", {"return": float})


class LifetimeReturns(TypedDict):
    """Principal and summed returns across a provider's whole history on a pair."""
    principal: Principal
    hodl: HodlReturns
    net: NetReturns
    uniswap: UniswapReturns


class WindowTotals(TypedDict):
    hodl_return: float
    net_return: float
    uniswap_return: float
    windows: int


def sum_window_returns(
    positions: List[Position],
    current_position: Position,
    price_discovery_start: int = PRICE_DISCOVERY_START_TIMESTAMP,
) -> WindowTotals:
    """
    Sum hodl, net and uniswap returns across consecutive windows.

    Each position is paired with the next one, and the last with
    `current_position`. Both ends of every window have early prices normalized.

    Args:
        positions: Chronologically ordered positions.
        current_position: Position closing the final window.
        price_discovery_start: Unix timestamp after which prices are trusted.

    Returns:
        A dict with summed hodl_return, net_return, uniswap_return and the
        number of windows evaluated.
    """
    hodl_return = 0.0
    net_return = 0.0
    uniswap_return = 0.0

    window_ends = positions[1:] + [current_position]
    for start, end in zip(positions, window_ends):
        results = get_metrics_for_position_window(
            normalize_early_prices(start, price_discovery_start),
            normalize_early_prices(end, price_discovery_start),
        )
        hodl_return += results["hodl_return"]
        net_return += results["net_return"]
        uniswap_return += results["uniswap_return"]

    return WindowTotals(
        hodl_return=hodl_return,
        net_return=net_return,
        uniswap_return=uniswap_return,
        windows=len(positions),
    )


async def get_lp_returns_on_pair(
    source: LiquidityDataSource,
    user: str,
    pool: Mapping[str, Any],
    eth_price: float,
    legacy_accumulation: bool = False,
    price_discovery_start: int = PRICE_DISCOVERY_START_TIMESTAMP,
    timeout: Optional[float] = None,
) -> LifetimeReturns:
    """
    Compute principal and lifetime returns for a user's position on a pool.

    Args:
        source: Data source for mints, burns and position snapshots.
        user: Liquidity provider address.
        pool: Live pool state (id, totalSupply, reserves, reserveUSD and
            token0/token1 with derivedETH).
        eth_price: Current ETH price in USD.
        legacy_accumulation: Passed through to the principal calculation.
        price_discovery_start: Unix timestamp after which prices are trusted,
            used for both principal and window price normalization.
        timeout: Optional bound, in seconds, on each data source call.

    Returns:
        A dict with principal, hodl (sum and return), net and uniswap returns.

    Raises:
        EmptyHistoryError: The user has no position snapshots on this pool.
        InvalidPositionError: A snapshot or the pool state cannot be parsed.
        InvalidEventError: A mint or burn event cannot be parsed.
    """
    pair_address = pool["id"]
    principal = await get_principal_for_pair(
        source,
        user,
        pair_address,
        legacy_accumulation=legacy_accumulation,
        price_discovery_start=price_discovery_start,
        timeout=timeout,
    )
    snapshots = await call_source(source.fetch_position_snapshots(user, pair_address), timeout)
    if not snapshots:
        raise EmptyHistoryError(f"No position snapshots for {user} on {pair_address}")

    positions = positions_from_snapshots(snapshots)
    current_position = position_from_pool(
        pool, positions[-1].liquidity_token_balance, eth_price
    )

    totals = sum_window_returns(positions, current_position, price_discovery_start)
    logger.debug(
        "Summed %d windows for %s on %s", totals["windows"], user, pair_address
    )

    return LifetimeReturns(
        principal=principal,
        hodl={"sum": principal["usd"] + totals["hodl_return"], "return": totals["hodl_return"]},
        net={"return": totals["net_return"]},
        uniswap={"return": totals["uniswap_return"]},
    )
