"""
Liquidity provider return calculations for Uniswap V2 style pools.

This package decomposes the value change of a pooled liquidity position into
hodl return, net return and uniswap return (fees plus impermanent loss), for
single windows, across a provider's lifetime, and as a daily history.
"""

from .errors import (
    LPReturnsError,
    InvalidPositionError,
    InvalidEventError,
    EmptyHistoryError,
    UpstreamFetchError,
)
from .position import (
    Position,
    position_from_snapshot,
    positions_from_snapshots,
    position_from_pool,
    position_from_share_value,
)
from .prices import normalize_early_prices
from .principal import Principal, calculate_principal, get_principal_for_pair
from .metrics import ReturnMetrics, get_metrics_for_position_window
from .lifetime import LifetimeReturns, sum_window_returns, get_lp_returns_on_pair
from .history import (
    HistoryPoint,
    ReturnsState,
    day_index,
    day_timestamps,
    advance_day,
    build_returns_history,
    get_returns_history_per_lp_per_pair,
    history_to_frame,
)

__all__ = [
    "LPReturnsError",
    "InvalidPositionError",
    "InvalidEventError",
    "EmptyHistoryError",
    "UpstreamFetchError",
    "Position",
    "position_from_snapshot",
    "positions_from_snapshots",
    "position_from_pool",
    "position_from_share_value",
    "normalize_early_prices",
    "Principal",
    "calculate_principal",
    "get_principal_for_pair",
    "ReturnMetrics",
    "get_metrics_for_position_window",
    "LifetimeReturns",
    "sum_window_returns",
    "get_lp_returns_on_pair",
    "HistoryPoint",
    "ReturnsState",
    "day_index",
    "day_timestamps",
    "advance_day",
    "build_returns_history",
    "get_returns_history_per_lp_per_pair",
    "history_to_frame",
]
