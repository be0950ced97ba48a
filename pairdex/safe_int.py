"""Checked integer arithmetic for reserve and share accounting.

SafeInt wraps a Python int so that the operations the pool engine relies on
fail loudly instead of producing a value no reserve slot can hold:
- Division by zero raises DivisionByZero
- Subtraction below zero raises Underflow
- Values wider than a declared bit width raise WidthOverflow on to_bits()

Usage pattern:
    from pairdex.safe_int import S

    def shares_for(amount: int, total: int, reserve: int) -> int:
        return (S(amount) * total // reserve).value
"""

from __future__ import annotations

import math

UINT112_MAX = 2**112 - 1


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""


class DivisionByZero(SafeIntError):
    """Divisor was zero."""


class Underflow(SafeIntError):
    """Result would be negative."""


class WidthOverflow(SafeIntError):
    """Value does not fit in the requested unsigned width."""


class SafeInt:
    """Non-wrapping integer for token amounts, reserves and shares.

    Operands on the right may be SafeInt or int; results are SafeInt until
    unwrapped with `.value` or `to_bits()`.
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
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (SafeInt, int)):
            return self._value == _unwrap(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _unwrap(other)

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _unwrap(other))

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Raises Underflow if the difference is negative."""
        rhs = _unwrap(other)
        if rhs > self._value:
            raise Underflow(f"{self._value} - {rhs} is negative")
        return SafeInt(self._value - rhs)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _unwrap(other))

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Raises DivisionByZero for a zero divisor."""
        rhs = _unwrap(other)
        if rhs == 0:
            raise DivisionByZero(f"{self._value} // 0")
        return SafeInt(self._value // rhs)

    def min(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(min(self._value, _unwrap(other)))

    def saturating_sub(self, other: SafeInt | int) -> SafeInt:
        """Subtract, clamping at zero instead of raising."""
        return SafeInt(max(0, self._value - _unwrap(other)))

    def isqrt(self) -> SafeInt:
        """Floor of the square root. Raises Underflow for negative values."""
        if self._value < 0:
            raise Underflow(f"isqrt of negative value {self._value}")
        return SafeInt(math.isqrt(self._value))

    def to_bits(self, bits: int) -> int:
        """Unwrap, checking the value fits an unsigned `bits`-wide slot.

        Raises:
            WidthOverflow: If the value is negative or above 2**bits - 1
        """
        if not 0 <= self._value < 1 << bits:
            raise WidthOverflow(f"{self._value} does not fit in uint{bits}")
        return self._value


def _unwrap(x: SafeInt | int) -> int:
    return x._value if isinstance(x, SafeInt) else x


S = SafeInt
