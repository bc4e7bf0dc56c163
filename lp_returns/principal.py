"""
Net principal a liquidity provider has contributed to a pair.
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Tuple, TypedDict

from .constants import PRICE_DISCOVERY_START_TIMESTAMP, PRICE_OVERRIDES
from .errors import InvalidEventError
from .position import _parse_number
from .sources import LiquidityDataSource, call_source

logger = logging.getLogger(__name__)


class Principal(TypedDict):
    """Net deposits (mints minus burns) in USD and in token units."""
    usd: float
    amount0: float
    amount1: float


def _event_token_ids(event: Mapping[str, Any]) -> Tuple[str, str]:
    try:
        pair = event["pair"]
        return pair["token0"]["id"], pair["token1"]["id"]
    except (KeyError, TypeError):
        raise InvalidEventError(f"Event is missing pair token ids: {event!r}")


def _event_usd(event: Mapping[str, Any], price_discovery_start: int) -> float:
    # Before price discovery, a stablecoin side is doubled to approximate the
    # full deposit value, assuming the other side matched it.
    token0_id, token1_id = _event_token_ids(event)
    early = _parse_number(event, "timestamp", InvalidEventError) < price_discovery_start
    if early and token0_id in PRICE_OVERRIDES:
        return _parse_number(event, "amount0", InvalidEventError) * 2
    if early and token1_id in PRICE_OVERRIDES:
        return _parse_number(event, "amount1", InvalidEventError) * 2
    return _parse_number(event, "amountUSD", InvalidEventError)


def _event_amounts(event: Mapping[str, Any]) -> Tuple[float, float]:
    return (
        _parse_number(event, "amount0", InvalidEventError),
        _parse_number(event, "amount1", InvalidEventError),
    )


def calculate_principal(
    mints: Iterable[Mapping[str, Any]],
    burns: Iterable[Mapping[str, Any]],
    legacy_accumulation: bool = False,
    price_discovery_start: int = PRICE_DISCOVERY_START_TIMESTAMP,
) -> Principal:
    """
    Aggregate mint and burn events into net principal.

    Mints add to principal and burns subtract from it. Events before price
    discovery on a pair with a USD-pegged token count twice that token's
    amount in USD rather than the reported amountUSD.

    Args:
        mints: Mint events with amount0, amount1, amountUSD, timestamp and
            pair.token0.id / pair.token1.id.
        burns: Burn events, same shape as mints.
        legacy_accumulation: Reproduce the historical token-unit accumulation
            for mints, where each mint computes amount += amount + mint_amount.
            Off by default, giving a plain sum.
        price_discovery_start: Unix timestamp after which amountUSD is trusted.

    Returns:
        A dict with usd, amount0 and amount1.

    Raises:
        InvalidEventError: An event is missing a field or has a non-numeric
            or non-finite value.

    Examples:
        >>> calculate_principal(
        ...     mints=[{'amount0': '250', 'amount1': '1', 'amountUSD': '500',
        ...             'timestamp': '1600000000',
        ...             'pair': {'token0': {'id': '0xa'}, 'token1': {'id': '0xb'}}}],
        ...     burns=[],
        ... )
        {'usd': 500.0, 'amount0': 250.0, 'amount1': 1.0}
    """
    usd = 0.0
    amount0 = 0.0
    amount1 = 0.0

    for mint in mints:
        usd += _event_usd(mint, price_discovery_start)
        mint0, mint1 = _event_amounts(mint)
        if legacy_accumulation:
            amount0 += amount0 + mint0
            amount1 += amount1 + mint1
        else:
            amount0 += mint0
            amount1 += mint1

    for burn in burns:
        usd -= _event_usd(burn, price_discovery_start)
        burn0, burn1 = _event_amounts(burn)
        amount0 -= burn0
        amount1 -= burn1

    return Principal(usd=usd, amount0=amount0, amount1=amount1)


async def get_principal_for_pair(
    source: LiquidityDataSource,
    user: str,
    pair_address: str,
    legacy_accumulation: bool = False,
    price_discovery_start: int = PRICE_DISCOVERY_START_TIMESTAMP,
    timeout: Optional[float] = None,
) -> Principal:
    """Fetch a user's mints and burns on a pair and compute net principal."""
    events = await call_source(source.fetch_mints_and_burns(user, pair_address), timeout)
    mints = events.get("mints") or []
    burns = events.get("burns") or []
    logger.debug(
        "Principal for %s on %s from %d mints and %d burns",
        user, pair_address, len(mints), len(burns),
    )
    return calculate_principal(
        mints,
        burns,
        legacy_accumulation=legacy_accumulation,
        price_discovery_start=price_discovery_start,
    )
