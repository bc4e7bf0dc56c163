"""
Point-in-time snapshots of a liquidity provider's stake in a pool.

Subgraph records arrive as dicts with camelCase keys and numbers encoded as
strings. Everything is parsed into a Position here so the return calculations
downstream can assume finite floats and a positive total supply.
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Type

from .errors import InvalidPositionError, LPReturnsError


@dataclass(frozen=True)
class Position:
    """A liquidity provider's pool-share balance plus pool state and prices."""
    liquidity_token_balance: float
    liquidity_token_total_supply: float
    reserve0: float
    reserve1: float
    reserve_usd: float
    token0_price_usd: float
    token1_price_usd: float
    timestamp: Optional[int] = None
    token0_id: Optional[str] = None
    token1_id: Optional[str] = None

    def ownership(self, balance: Optional[float] = None) -> float:
        """
        Fraction of the pool owned by `balance` pool-share tokens.

        Args:
            balance: Pool-share balance to price against this position's total
                supply. Defaults to the position's own balance.

        Returns:
            balance / liquidity_token_total_supply.
        """
        if balance is None:
            balance = self.liquidity_token_balance
        return balance / self.liquidity_token_total_supply


def _to_finite(value: Any, key: str, error: Type[LPReturnsError] = InvalidPositionError) -> float:
    if value is None:
        raise error(f"Missing required field '{key}'")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise error(f"Field '{key}' is not numeric: {value!r}")
    if not math.isfinite(number):
        raise error(f"Field '{key}' is not finite: {value!r}")
    return number


def _parse_number(
    record: Mapping[str, Any],
    key: str,
    error: Type[LPReturnsError] = InvalidPositionError,
) -> float:
    return _to_finite(record.get(key), key, error)


def _parse_price(record: Mapping[str, Any], key: str) -> float:
    price = _parse_number(record, key)
    if price < 0:
        raise InvalidPositionError(f"Price '{key}' must not be negative, got {price}")
    return price


def _parse_total_supply(record: Mapping[str, Any], key: str) -> float:
    total_supply = _parse_number(record, key)
    if total_supply <= 0:
        raise InvalidPositionError(
            f"Total supply must be positive to compute ownership, got {total_supply}"
        )
    return total_supply


def _token_ids(pair: Optional[Mapping[str, Any]]):
    if not pair:
        return None, None
    token0 = pair.get("token0") or {}
    token1 = pair.get("token1") or {}
    return token0.get("id"), token1.get("id")


def position_from_snapshot(snapshot: Mapping[str, Any]) -> Position:
    """
    Parse a liquidity position snapshot as returned by the subgraph.

    Args:
        snapshot: Dict with liquidityTokenBalance, liquidityTokenTotalSupply,
            reserve0, reserve1, reserveUSD, token0PriceUSD, token1PriceUSD,
            timestamp and optionally pair.token0.id / pair.token1.id.

    Returns:
        A validated Position.

    Raises:
        InvalidPositionError: A field is missing, non-numeric or non-finite,
            a price is negative, or the total supply is not positive.

    Examples:
        >>> position_from_snapshot({
        ...     'timestamp': 1600000000,
        ...     'liquidityTokenBalance': '100', 'liquidityTokenTotalSupply': '1000',
        ...     'reserve0': '500', 'reserve1': '500', 'reserveUSD': '1000',
        ...     'token0PriceUSD': '1', 'token1PriceUSD': '1',
        ... }).ownership()
        0.1
    """
    token0_id, token1_id = _token_ids(snapshot.get("pair"))
    timestamp = snapshot.get("timestamp")
    return Position(
        liquidity_token_balance=_parse_number(snapshot, "liquidityTokenBalance"),
        liquidity_token_total_supply=_parse_total_supply(snapshot, "liquidityTokenTotalSupply"),
        reserve0=_parse_number(snapshot, "reserve0"),
        reserve1=_parse_number(snapshot, "reserve1"),
        reserve_usd=_parse_number(snapshot, "reserveUSD"),
        token0_price_usd=_parse_price(snapshot, "token0PriceUSD"),
        token1_price_usd=_parse_price(snapshot, "token1PriceUSD"),
        timestamp=int(timestamp) if timestamp is not None else None,
        token0_id=token0_id,
        token1_id=token1_id,
    )


def position_from_pool(
    pool: Mapping[str, Any],
    liquidity_token_balance: float,
    eth_price: float,
) -> Position:
    """
    Build the "current" position from live pool state.

    Token prices are the pool's derivedETH for each token times the current
    ETH price in USD. The result carries no timestamp, so price normalization
    leaves it untouched.

    Args:
        pool: Dict with id, totalSupply, reserve0, reserve1, reserveUSD and
            token0/token1 dicts holding id and derivedETH.
        liquidity_token_balance: The provider's current pool-share balance.
        eth_price: Current ETH price in USD.

    Returns:
        A validated Position.

    Raises:
        InvalidPositionError: A pool field or the ETH price is missing,
            non-finite or negative, or a derived token price is not finite.
    """
    token0 = pool.get("token0") or {}
    token1 = pool.get("token1") or {}
    eth_price = _to_finite(eth_price, "eth_price")
    if eth_price < 0:
        raise InvalidPositionError(f"ETH price must not be negative, got {eth_price}")
    token0_price_usd = _parse_price(token0, "derivedETH") * eth_price
    token1_price_usd = _parse_price(token1, "derivedETH") * eth_price
    if not (math.isfinite(token0_price_usd) and math.isfinite(token1_price_usd)):
        raise InvalidPositionError("Derived token prices are not finite")
    return Position(
        liquidity_token_balance=_to_finite(liquidity_token_balance, "liquidityTokenBalance"),
        liquidity_token_total_supply=_parse_total_supply(pool, "totalSupply"),
        reserve0=_parse_number(pool, "reserve0"),
        reserve1=_parse_number(pool, "reserve1"),
        reserve_usd=_parse_number(pool, "reserveUSD"),
        token0_price_usd=token0_price_usd,
        token1_price_usd=token1_price_usd,
        token0_id=token0.get("id"),
        token1_id=token1.get("id"),
    )


def position_from_share_value(
    share_value: Mapping[str, Any],
    liquidity_token_balance: float,
) -> Position:
    """Build a position from a backfilled daily share value record."""
    return Position(
        liquidity_token_balance=_to_finite(liquidity_token_balance, "liquidityTokenBalance"),
        liquidity_token_total_supply=_parse_total_supply(share_value, "totalSupply"),
        reserve0=_parse_number(share_value, "reserve0"),
        reserve1=_parse_number(share_value, "reserve1"),
        reserve_usd=_parse_number(share_value, "reserveUSD"),
        token0_price_usd=_parse_price(share_value, "token0PriceUSD"),
        token1_price_usd=_parse_price(share_value, "token1PriceUSD"),
    )


def share_price_usd(share_value: Mapping[str, Any]) -> float:
    """USD value of a single pool-share token from a share value record."""
    return _parse_number(share_value, "sharePriceUsd")


def positions_from_snapshots(snapshots: Iterable[Mapping[str, Any]]) -> List[Position]:
    """
    Parse snapshots and order them by ascending timestamp.

    Raises:
        InvalidPositionError: A snapshot cannot be parsed or has no timestamp.
    """
    positions = [position_from_snapshot(snapshot) for snapshot in snapshots]
    for position in positions:
        if position.timestamp is None:
            raise InvalidPositionError("Position snapshot is missing 'timestamp'")
    return sorted(positions, key=lambda position: position.timestamp)
