"""Pool error classes.

Every failure of a pool operation is raised as a PoolError subclass. None of
them are retried or recovered inside the engine; a failed operation is rolled
back and the error propagates to the caller.
"""


class PoolError(Exception):
    """Base error for pool operations."""

    pass


class DomainError(PoolError):
    """Tick or sqrt price outside the legal domain."""

    pass


class InvalidRange(PoolError):
    """Position range is empty, unaligned to the tick spacing, or out of bounds."""

    pass


class ZeroLiquidity(PoolError):
    """Mint or burn of zero liquidity, or poke of a nonexistent position."""

    pass


class ZeroAmount(PoolError):
    """Swap with a zero specified amount."""

    pass


class InsufficientInput(PoolError):
    """Settlement callback did not deliver the required tokens."""

    pass


class FlashLoanNotPaid(InsufficientInput):
    """Flash loan callback repaid less than principal plus fee."""

    pass


class InvalidPriceLimit(PoolError):
    """Swap price limit is on the wrong side of the current price or out of domain."""

    pass


class NotEnoughLiquidity(PoolError):
    """Active liquidity ran out while input or output remained."""

    pass


class Overflow(PoolError, ArithmeticError):
    """Fixed-width arithmetic would exceed its bounds."""

    pass


class Locked(PoolError):
    """Re-entrant call into a pool that is mid-operation."""

    pass


class AlreadyInitialized(PoolError):
    """Pool price has already been set."""

    pass


class PoolNotInitialized(PoolError):
    """Operation requires an initialized pool price."""

    pass


class TransferFailed(PoolError):
    """Token transfer returned False or raised."""

    pass


class OracleError(PoolError):
    """Observation requested older than the oldest stored observation."""

    pass


__all__ = [
    "PoolError",
    "DomainError",
    "InvalidRange",
    "ZeroLiquidity",
    "ZeroAmount",
    "InsufficientInput",
    "FlashLoanNotPaid",
    "InvalidPriceLimit",
    "NotEnoughLiquidity",
    "Overflow",
    "Locked",
    "AlreadyInitialized",
    "PoolNotInitialized",
    "TransferFailed",
    "OracleError",
]
