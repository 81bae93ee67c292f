"""Checked integer wrapper for pool arithmetic.

This module provides SafeInt, a lightweight wrapper that makes arithmetic
on token amounts, prices and liquidity safe by default:
- Division by zero raises DivisionByZero
- Subtraction underflow raises Underflow
- Fixed-width overflow is caught on conversion (to_uint160, to_uint128, ...)

Usage pattern:
    from clamm.safe_int import S

    def amount1_delta(sqrt_a: int, sqrt_b: int, liquidity: int) -> int:
        # Wrap at entry
        sa, sb, sl = S(sqrt_a), S(sqrt_b), S(liquidity)

        # Natural arithmetic - automatically safe
        diff = sb - sa              # Raises if sqrt_a > sqrt_b
        result = (sl * diff) // Q96

        # Unwrap at exit, checking the width the caller stores
        return result.to_uint256()
"""

from __future__ import annotations

from clamm.errors import Overflow

UINT128_MAX = 2**128 - 1
UINT160_MAX = 2**160 - 1
UINT256_MAX = 2**256 - 1
INT128_MIN = -(2**127)
INT128_MAX = 2**127 - 1


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division or modulo by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce negative result."""

    pass


class SafeInt:
    """Integer with checked arithmetic operations.

    Wraps an integer and provides arithmetic operators that raise
    descriptive errors instead of producing invalid results:
    - Division by zero raises DivisionByZero
    - Negative results from subtraction raise Underflow
    - Values exceeding a fixed width raise Overflow on to_uintN()/to_int128()

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        """Add two values. Result may be negative (no check)."""
        return SafeInt(self._value + _extract_value(other))

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _extract_value(other))

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer division.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    def __mod__(self, other: SafeInt | int) -> SafeInt:
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Modulo by zero: {self._value} % 0")
        return SafeInt(self._value % other_val)

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _extract_value(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def __index__(self) -> int:
        return self._value

    # --- Named operations ---

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Ceiling division (rounds up) for non-negative operands.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Ceiling division by zero: {self._value}")
        return SafeInt(-(-self._value // other_val))

    def wrapping_sub(self, other: SafeInt | int) -> SafeInt:
        """Subtract modulo 2^256 (fee-growth accumulators wrap)."""
        return SafeInt((self._value - _extract_value(other)) % (UINT256_MAX + 1))

    def wrapping_add(self, other: SafeInt | int) -> SafeInt:
        """Add modulo 2^256."""
        return SafeInt((self._value + _extract_value(other)) % (UINT256_MAX + 1))

    def _to_unsigned(self, bits: int, maximum: int) -> int:
        if self._value < 0:
            raise Overflow(f"Negative value cannot be uint{bits}: {self._value}")
        if self._value > maximum:
            raise Overflow(f"Value exceeds uint{bits} max: {self._value}")
        return self._value

    def to_uint128(self) -> int:
        """Convert to int, validating uint128 bounds.

        Raises:
            Overflow: If value is negative or exceeds 2^128-1
        """
        return self._to_unsigned(128, UINT128_MAX)

    def to_uint160(self) -> int:
        """Convert to int, validating uint160 bounds."""
        return self._to_unsigned(160, UINT160_MAX)

    def to_uint256(self) -> int:
        """Convert to int, validating uint256 bounds."""
        return self._to_unsigned(256, UINT256_MAX)

    def to_int128(self) -> int:
        """Convert to int, validating int128 bounds."""
        if not INT128_MIN <= self._value <= INT128_MAX:
            raise Overflow(f"Value outside int128 range: {self._value}")
        return self._value


def _extract_value(x: SafeInt | int) -> int:
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt
