"""
Exceptions raised while computing liquidity provider returns.
"""


class LPReturnsError(Exception):
    """Base class for all errors raised by lp_returns."""


class InvalidPositionError(LPReturnsError, ValueError):
    """A position is missing a field, has a non-finite value, or has zero total supply."""


class EmptyHistoryError(LPReturnsError):
    """No position snapshots were available to seed a computation."""


class UpstreamFetchError(LPReturnsError):
    """A data source returned data that cannot be used as-is."""


class InvalidEventError(LPReturnsError, ValueError):
    """A mint or burn event is missing a field or has a non-finite amount."""
