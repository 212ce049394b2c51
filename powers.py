"""Exponentiation and root extraction for ``Integer``."""

from __future__ import annotations

import operator
from typing import Any, Optional

import gmpy2

from numerrors import DivisionByZeroError, InvalidExponentError, NegativeSquareRootError


def _exponent(e: Any) -> int:
    e = operator.index(e)
    if e < 0:
        raise InvalidExponentError(e)
    return e


def _degree(n: Any) -> int:
    n = operator.index(n)
    if n < 1:
        raise InvalidExponentError(n)
    return n


class PowersMixin:
    __slots__ = ()

    # -- plain powers -------------------------------------------------------

    def pow(self, exponent: Any) -> Any:
        return self._from_engine(self._value ** _exponent(exponent))

    @classmethod
    def power(cls, base: Any, exponent: Any) -> Any:
        return cls._from_engine(gmpy2.mpz(cls._operand(base)) ** _exponent(exponent))

    def __pow__(self, exponent: Any, modulus: Optional[Any] = None) -> Any:
        if modulus is not None:
            return self.pow_mod(exponent, modulus)
        if self._engine_or_none(exponent) is None:
            return NotImplemented
        return self.pow(exponent)

    def __rpow__(self, base: Any) -> Any:
        b = self._engine_or_none(base)
        if b is None:
            return NotImplemented
        return self._from_engine(gmpy2.mpz(b) ** _exponent(self))

    # -- modular ------------------------------------------------------------

    def pow_mod(self, exponent: Any, modulus: Any) -> Any:
        """``self**exponent mod |modulus|`` in ``[0, |modulus|)``.

        A negative exponent uses the modular inverse of ``self`` and raises
        ``DivisionByZeroError`` when there is none.  Not constant-time.
        """
        e = self._operand(exponent)
        m = abs(self._operand(modulus))
        if m == 0:
            raise DivisionByZeroError("zero modulus")
        base = self._value
        if e < 0:
            try:
                base = gmpy2.invert(base, m)
            except ZeroDivisionError as exc:
                raise DivisionByZeroError(
                    "base has no inverse for a negative exponent"
                ) from exc
            e = -e
        return self._from_engine(gmpy2.powmod(base, e, m))

    def pow_mod_secure(self, exponent: Any, modulus: Any) -> Any:
        """Constant-time modular power for secret operands.

        Requires ``exponent > 0`` and an odd modulus.
        """
        e = self._operand(exponent)
        m = abs(self._operand(modulus))
        if e <= 0:
            raise ValueError(f"exponent must be positive, got {e}")
        if gmpy2.is_even(m):
            raise ValueError(f"modulus must be odd, got {m}")
        return self._from_engine(gmpy2.powmod_sec(self._value, e, m))

    # -- roots --------------------------------------------------------------

    def _radicand(self, n: int) -> Any:
        v = self._value
        if v < 0 and n % 2 == 0:
            raise NegativeSquareRootError(
                f"even root (n={n}) of a negative value"
            )
        return v

    def sqrt(self) -> Any:
        """Truncated square root."""
        return self._from_engine(gmpy2.isqrt(self._radicand(2)))

    def sqrt_rem(self) -> tuple[Any, Any]:
        """``(s, r)`` with ``s*s + r == self`` and ``s`` truncated."""
        s, r = gmpy2.isqrt_rem(self._radicand(2))
        return self._from_engine(s), self._from_engine(r)

    def root(self, n: Any) -> tuple[Any, bool]:
        """``(r, exact)``: the ``n``-th root truncated toward zero."""
        n = _degree(n)
        v = self._radicand(n)
        r, exact = gmpy2.iroot(abs(v), n)
        return self._from_engine(-r if v < 0 else r), bool(exact)

    def root_rem(self, n: Any) -> tuple[Any, Any]:
        """``(r, rem)`` with ``r**n + rem == self``."""
        n = _degree(n)
        v = self._radicand(n)
        r, rem = gmpy2.iroot_rem(abs(v), n)
        if v < 0:
            r, rem = -r, -rem
        return self._from_engine(r), self._from_engine(rem)

    def is_perfect_square(self) -> bool:
        v = self._value
        return v >= 0 and bool(gmpy2.is_square(v))

    def is_perfect_power(self) -> bool:
        """True if ``self == b**k`` for some integers ``b`` and ``k > 1``.

        0 and 1 count; a negative value needs an odd ``k``.
        """
        v = gmpy2.mpz(self._value)
        if v >= 0:
            return bool(gmpy2.is_power(v))
        m = -v
        if m == 1:
            return True
        return any(gmpy2.iroot(m, k)[1] for k in range(3, gmpy2.bit_length(m) + 1, 2))
