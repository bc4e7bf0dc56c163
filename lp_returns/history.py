"""
Daily returns history for one liquidity provider on one pair.

Position snapshots only exist on days the provider minted or burned, so each
calendar day is priced from a backfilled share value record instead. Returns
are folded day by day through a ReturnsState:

- committed totals only move on days with a real on-chain position change,
- every day also reports a local total (committed + that day's window) for
  display, which is never carried forward.

Days are UTC buckets: day_index = timestamp // 86400.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple, TypedDict

import pandas as pd

from .constants import SECONDS_PER_DAY
from .errors import EmptyHistoryError, UpstreamFetchError
from .metrics import get_metrics_for_position_window
from .position import (
    Position,
    position_from_pool,
    position_from_share_value,
    positions_from_snapshots,
    share_price_usd,
)
from .sources import ShareValueSource, call_source

logger = logging.getLogger(__name__)


class HistoryPoint(TypedDict):
    """One day of a provider's returns history."""
    date: int
    usd_value: float
    net_return: float
    asset_return: float
    uniswap_return: float
    committed_net_return: float
    committed_asset_return: float
    committed_uniswap_return: float
    imp_loss: float
    fees: float
    position_changed: bool


@dataclass(frozen=True)
class ReturnsState:
    """Last known position and the returns committed up to it."""
    last_updated: int
    position: Position
    net_return: float = 0.0
    asset_return: float = 0.0
    uniswap_return: float = 0.0

    @classmethod
    def seed(cls, first_position: Position) -> "ReturnsState":
        """Start from the earliest snapshot with no returns committed."""
        return cls(last_updated=first_position.timestamp, position=first_position)

    @classmethod
    def at_day(cls, positions: Sequence[Position], day_timestamp: int) -> "ReturnsState":
        """
        Seed from the latest snapshot at or before the start of `day_timestamp`.

        Snapshots strictly inside the day are left for advance_day to commit.
        Falls back to the earliest snapshot when none precede the day.
        """
        earlier = [position for position in positions if position.timestamp <= day_timestamp]
        return cls.seed(earlier[-1] if earlier else positions[0])


def day_index(timestamp: int) -> int:
    """UTC day bucket for a unix timestamp."""
    return int(timestamp) // SECONDS_PER_DAY


def day_timestamps(start_timestamp: int, first_snapshot_timestamp: int, now: int) -> List[int]:
    """
    Day boundary timestamps from the start day up to, not including, today.

    The start is moved forward to the first snapshot's day when it is earlier.

    Examples:
        >>> day_timestamps(0, 86400 * 3 + 10, 86400 * 5 + 10)
        [259200, 345600]
    """
    start_day = day_index(start_timestamp)
    first_day = day_index(first_snapshot_timestamp)
    if start_day < first_day:
        logger.debug("Moving history start from day %d to first snapshot day %d", start_day, first_day)
        start_day = first_day
    return [day * SECONDS_PER_DAY for day in range(start_day, day_index(now))]


def advance_day(
    state: ReturnsState,
    day_timestamp: int,
    share_value: Mapping[str, Any],
    positions: Sequence[Position],
    current_position: Optional[Position] = None,
) -> Tuple[ReturnsState, HistoryPoint]:
    """
    Compute one day of history and the state carried into the next day.

    The window runs from the running position to, in order of preference:
    the latest snapshot strictly inside this day that is newer than the state,
    then `current_position` (pass it only for the final day), then the day's
    share value record priced with the running balance.

    Args:
        state: Running state from the previous day.
        day_timestamp: Start of the UTC day.
        share_value: Backfilled pool state and share price for this day.
        positions: All parsed snapshots, in ascending timestamp order.
        current_position: Live pool position; closes the window on the final day.

    Returns:
        (next_state, point). next_state differs from state only when a
        snapshot fell inside this day.
    """
    day_ceiling = day_timestamp + SECONDS_PER_DAY
    position_t0 = state.position

    if current_position is not None:
        position_t1 = current_position
    else:
        position_t1 = position_from_share_value(share_value, position_t0.liquidity_token_balance)

    changes = [
        position for position in positions
        if day_timestamp < position.timestamp < day_ceiling
        and position.timestamp > state.last_updated
    ]
    latest_change = max(changes, key=lambda position: position.timestamp, default=None)
    if latest_change is not None:
        position_t1 = latest_change

    window = get_metrics_for_position_window(position_t0, position_t1)

    if latest_change is not None:
        state = ReturnsState(
            last_updated=latest_change.timestamp,
            position=latest_change,
            net_return=state.net_return + window["net_return"],
            asset_return=state.asset_return + window["hodl_return"],
            uniswap_return=state.uniswap_return + window["uniswap_return"],
        )
        logger.debug("Position changed on day %d at %d", day_timestamp, latest_change.timestamp)

    point = HistoryPoint(
        date=day_timestamp,
        usd_value=position_t0.liquidity_token_balance * share_price_usd(share_value),
        net_return=state.net_return + window["net_return"],
        asset_return=state.asset_return + window["hodl_return"],
        uniswap_return=state.uniswap_return + window["uniswap_return"],
        committed_net_return=state.net_return,
        committed_asset_return=state.asset_return,
        committed_uniswap_return=state.uniswap_return,
        imp_loss=window["imp_loss"],
        fees=window["fees"],
        position_changed=latest_change is not None,
    )
    return state, point


def build_returns_history(
    days: Sequence[int],
    share_values: Sequence[Mapping[str, Any]],
    positions: Sequence[Position],
    current_position: Position,
) -> List[HistoryPoint]:
    """
    Fold advance_day over every day, closing the last day with live pool state.

    Args:
        days: Day boundary timestamps, ascending.
        share_values: One share value record per day, aligned by index.
        positions: Parsed snapshots, ascending. The latest one at or before
            the first day seeds the state.
        current_position: Live pool position for the final day.

    Returns:
        One HistoryPoint per day, in the order of `days`.

    Raises:
        EmptyHistoryError: `positions` is empty.
        UpstreamFetchError: `share_values` is not aligned with `days`.
    """
    if not positions:
        raise EmptyHistoryError("Cannot build returns history without position snapshots")
    if len(share_values) != len(days):
        raise UpstreamFetchError(
            f"Expected {len(days)} share value records, got {len(share_values)}"
        )

    if not days:
        return []

    state = ReturnsState.at_day(positions, days[0])
    history = []
    last = len(days) - 1
    for i, (day, share_value) in enumerate(zip(days, share_values)):
        state, point = advance_day(
            state,
            day,
            share_value,
            positions,
            current_position if i == last else None,
        )
        history.append(point)

    return history


async def get_returns_history_per_lp_per_pair(
    share_value_source: ShareValueSource,
    start_timestamp: int,
    current_pool: Mapping[str, Any],
    snapshots: Sequence[Mapping[str, Any]],
    eth_price: float,
    now: Optional[int] = None,
    timeout: Optional[float] = None,
) -> List[HistoryPoint]:
    """
    Build the daily returns history for a provider's position on a pool.

    Args:
        share_value_source: Source of backfilled daily share values.
        start_timestamp: Earliest day to show; clamped to the first snapshot's day.
        current_pool: Live pool state (id, totalSupply, reserves, reserveUSD and
            token0/token1 with derivedETH).
        snapshots: The provider's position snapshots on this pool, any order.
        eth_price: Current ETH price in USD.
        now: Current unix time. Defaults to the system clock.
        timeout: Optional bound, in seconds, on the share value fetch.

    Returns:
        One HistoryPoint per UTC day from the start day up to, not including, today.

    Raises:
        EmptyHistoryError: `snapshots` is empty.
        InvalidPositionError: A snapshot, share value or the pool cannot be parsed.
        UpstreamFetchError: The share value series does not match the requested days.
    """
    if not snapshots:
        raise EmptyHistoryError("Cannot build returns history without position snapshots")
    if now is None:
        now = int(time.time())

    positions = positions_from_snapshots(snapshots)
    days = day_timestamps(start_timestamp, positions[0].timestamp, now)
    if not days:
        return []

    share_values = await call_source(
        share_value_source.fetch_share_value_series(current_pool["id"], days), timeout
    )

    current_position = position_from_pool(
        current_pool, positions[-1].liquidity_token_balance, eth_price
    )

    history = build_returns_history(days, share_values, positions, current_position)
    logger.debug("Built %d days of history for %s", len(history), current_pool["id"])
    return history


def history_to_frame(history: Sequence[HistoryPoint]) -> pd.DataFrame:
    """
    Convert a returns history to a DataFrame indexed by UTC datetime.

    The original unix `date` column is kept alongside the index.
    """
    columns = list(HistoryPoint.__annotations__)
    df = pd.DataFrame(list(history), columns=columns)
    df.index = pd.to_datetime(df["date"].astype("int64"), unit="s", utc=True)
    df.index.name = "datetime"
    return df
