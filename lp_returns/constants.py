"""
Fixed reference values used when computing liquidity provider returns.

Before PRICE_DISCOVERY_START_TIMESTAMP the subgraph's USD prices were not yet
reliable, so a handful of tokens are priced from known reference values instead.
"""

# Unix timestamp after which subgraph token prices are trusted
PRICE_DISCOVERY_START_TIMESTAMP = 1589747086

# USD-pegged tokens priced at exactly $1 before price discovery
PRICE_OVERRIDES = frozenset({
    "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",  # USDC
    "0x6b175474e89094c44da98b954eedeac495271d0f",  # DAI
})

STABLECOIN_PRICE_USD = 1.0

WETH_ADDRESS = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"

# WETH price at protocol launch
WETH_LAUNCH_PRICE_USD = 203.0

SECONDS_PER_DAY = 86400
