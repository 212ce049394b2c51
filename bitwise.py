"""Bit operations for ``Integer`` with infinite two's-complement semantics.

Negative values behave as if sign-extended with 1-bits forever, so
``~v == -(v + 1)`` and ``-1 & x == x``.  Shift counts and bit indices must
be non-negative; a negative one is a programmer error and raises
``ValueError`` instead of being reinterpreted.
"""

from __future__ import annotations

import operator
from typing import Any, Optional

import gmpy2


def _non_negative(count: Any, what: str) -> int:
    count = operator.index(count)
    if count < 0:
        raise ValueError(f"negative {what}: {count}")
    return count


class BitwiseMixin:
    __slots__ = ()

    # -- operators ----------------------------------------------------------

    def __and__(self, other: Any) -> Any:
        b = self._engine_or_none(other)
        if b is None:
            return NotImplemented
        return self._from_engine(self._value & b)

    __rand__ = __and__

    def __or__(self, other: Any) -> Any:
        b = self._engine_or_none(other)
        if b is None:
            return NotImplemented
        return self._from_engine(self._value | b)

    __ror__ = __or__

    def __xor__(self, other: Any) -> Any:
        b = self._engine_or_none(other)
        if b is None:
            return NotImplemented
        return self._from_engine(self._value ^ b)

    __rxor__ = __xor__

    def __invert__(self) -> Any:
        return self._from_engine(~self._value)

    def __lshift__(self, count: Any) -> Any:
        return self._from_engine(self._value << _non_negative(count, "shift count"))

    def __rshift__(self, count: Any) -> Any:
        # Arithmetic shift: floor division by 2**count.
        return self._from_engine(self._value >> _non_negative(count, "shift count"))

    # -- in place -----------------------------------------------------------

    def and_inplace(self, other: Any) -> None:
        self._store(self._value & self._operand(other))

    def or_inplace(self, other: Any) -> None:
        self._store(self._value | self._operand(other))

    def xor_inplace(self, other: Any) -> None:
        self._store(self._value ^ self._operand(other))

    def invert_inplace(self) -> None:
        self._store(~self._value)

    def lshift_inplace(self, count: int) -> None:
        self._store(self._value << _non_negative(count, "shift count"))

    def rshift_inplace(self, count: int) -> None:
        self._store(self._value >> _non_negative(count, "shift count"))

    # -- single bits --------------------------------------------------------

    def test_bit(self, index: int) -> bool:
        """Bit ``index`` (0 = least significant), sign-extended for negatives."""
        return bool(gmpy2.bit_test(self._value, _non_negative(index, "bit index")))

    def set_bit(self, index: int) -> None:
        self._store(gmpy2.bit_set(self._value, _non_negative(index, "bit index")))

    def clear_bit(self, index: int) -> None:
        self._store(gmpy2.bit_clear(self._value, _non_negative(index, "bit index")))

    def complement_bit(self, index: int) -> None:
        self._store(gmpy2.bit_flip(self._value, _non_negative(index, "bit index")))

    # -- scanning -----------------------------------------------------------

    def scan1(self, start: int = 0) -> Optional[int]:
        """Index of the first 1-bit at or above ``start``, or None."""
        found = gmpy2.bit_scan1(self._value, _non_negative(start, "bit index"))
        return None if found is None else int(found)

    def scan0(self, start: int = 0) -> Optional[int]:
        """Index of the first 0-bit at or above ``start``, or None.

        A negative value has no 0-bits above its magnitude.
        """
        found = gmpy2.bit_scan0(self._value, _non_negative(start, "bit index"))
        return None if found is None else int(found)

    @property
    def first_set_bit(self) -> Optional[int]:
        return self.scan1(0)

    @property
    def last_set_bit(self) -> Optional[int]:
        """Index of the highest set bit of the magnitude, or None for zero."""
        if self._value == 0:
            return None
        return self.bit_length() - 1

    # -- counting -----------------------------------------------------------

    def popcount(self) -> Optional[int]:
        """Number of 1-bits, or None for a negative value (infinitely many)."""
        if self._value < 0:
            return None
        return int(gmpy2.popcount(self._value))

    def hamming_distance(self, other: Any) -> Optional[int]:
        """``popcount(self ^ other)``; None when the signs differ."""
        b = self._operand(other)
        a = self._value
        if (a < 0) != (b < 0):
            return None
        # Same signs leave a non-negative xor.
        return int(gmpy2.popcount(a ^ b))

    def is_odd(self) -> bool:
        return bool(gmpy2.is_odd(self._value))

    def is_even(self) -> bool:
        return bool(gmpy2.is_even(self._value))
