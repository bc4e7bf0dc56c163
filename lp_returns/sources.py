"""
Interfaces for the data sources the return calculations depend on.

Implementations typically wrap a subgraph client. Any exception they raise is
propagated to the caller unchanged; no retries happen here.
"""

import asyncio
from typing import Awaitable, List, Optional, Protocol, Sequence, TypeVar, TypedDict

T = TypeVar("T")


class TokenRef(TypedDict):
    id: str


class PairRef(TypedDict):
    id: str
    token0: TokenRef
    token1: TokenRef


class MintBurnEvent(TypedDict):
    """A deposit (mint) or withdrawal (burn) of liquidity."""
    amount0: str
    amount1: str
    amountUSD: str
    timestamp: str
    pair: PairRef


class MintsAndBurns(TypedDict):
    mints: List[MintBurnEvent]
    burns: List[MintBurnEvent]


class PositionSnapshot(TypedDict, total=False):
    """A liquidity position snapshot taken whenever the position changed."""
    timestamp: int
    liquidityTokenBalance: str
    liquidityTokenTotalSupply: str
    reserve0: str
    reserve1: str
    reserveUSD: str
    token0PriceUSD: str
    token1PriceUSD: str
    pair: PairRef


class PoolToken(TypedDict):
    id: str
    derivedETH: str


class PoolState(TypedDict):
    """Live state of a pool."""
    id: str
    totalSupply: str
    reserve0: str
    reserve1: str
    reserveUSD: str
    token0: PoolToken
    token1: PoolToken


class ShareValue(TypedDict):
    """Pool state and pool-share USD value as of one day."""
    totalSupply: float
    reserve0: float
    reserve1: float
    reserveUSD: float
    token0PriceUSD: float
    token1PriceUSD: float
    sharePriceUsd: float


class LiquidityDataSource(Protocol):
    """Per-user liquidity events and snapshots for a pair."""

    async def fetch_mints_and_burns(self, user: str, pair_address: str) -> MintsAndBurns:
        ...

    async def fetch_position_snapshots(self, user: str, pair_address: str) -> List[PositionSnapshot]:
        ...


class ShareValueSource(Protocol):
    """Historical pool-share values, one record per requested timestamp."""

    async def fetch_share_value_series(
        self, pair_address: str, day_timestamps: Sequence[int]
    ) -> List[ShareValue]:
        ...


async def call_source(awaitable: Awaitable[T], timeout: Optional[float] = None) -> T:
    """
    Await a data source call, optionally bounded by `timeout` seconds.

    asyncio.TimeoutError propagates to the caller when the bound is exceeded.
    """
    if timeout is None:
        return await awaitable
    return await asyncio.wait_for(awaitable, timeout)
