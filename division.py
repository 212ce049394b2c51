"""Division family for ``Integer``.

Three rounding conventions, each with quotient-only, remainder-only and
combined entry points (see ``contracts.ROUNDING_RULES``):

    floor     quotient toward -inf, remainder takes the divisor's sign
    ceiling   quotient toward +inf, remainder takes the opposite sign
    truncate  quotient toward 0,    remainder takes the dividend's sign

Every entry point raises ``DivisionByZeroError`` for a zero divisor.
The Python operators ``//``, ``%`` and ``divmod`` follow the floor family,
as they do for ``int``.
"""

from __future__ import annotations

from typing import Any

import gmpy2

from contracts import Rounding
from numerrors import DivisionByZeroError, InvalidExponentError

_DIVMOD = {
    Rounding.FLOOR: gmpy2.f_divmod,
    Rounding.CEILING: gmpy2.c_divmod,
    Rounding.TRUNCATE: gmpy2.t_divmod,
}


def _check_exponent(exponent: int) -> int:
    if exponent < 0:
        raise InvalidExponentError(exponent)
    return exponent


class DivisionMixin:
    __slots__ = ()

    def _divisor(self, divisor: Any) -> Any:
        d = self._operand(divisor)
        if d == 0:
            raise DivisionByZeroError()
        return d

    # -- floor --------------------------------------------------------------

    def floor_div(self, divisor: Any) -> Any:
        return self._from_engine(gmpy2.f_div(self._value, self._divisor(divisor)))

    def floor_rem(self, divisor: Any) -> Any:
        return self._from_engine(gmpy2.f_mod(self._value, self._divisor(divisor)))

    def floor_divmod(self, divisor: Any) -> tuple[Any, Any]:
        return self.quotient_and_remainder(divisor, Rounding.FLOOR)

    # -- ceiling ------------------------------------------------------------

    def ceil_div(self, divisor: Any) -> Any:
        return self._from_engine(gmpy2.c_div(self._value, self._divisor(divisor)))

    def ceil_rem(self, divisor: Any) -> Any:
        return self._from_engine(gmpy2.c_mod(self._value, self._divisor(divisor)))

    def ceil_divmod(self, divisor: Any) -> tuple[Any, Any]:
        return self.quotient_and_remainder(divisor, Rounding.CEILING)

    # -- truncate -----------------------------------------------------------

    def trunc_div(self, divisor: Any) -> Any:
        return self._from_engine(gmpy2.t_div(self._value, self._divisor(divisor)))

    def trunc_rem(self, divisor: Any) -> Any:
        return self._from_engine(gmpy2.t_mod(self._value, self._divisor(divisor)))

    def trunc_divmod(self, divisor: Any) -> tuple[Any, Any]:
        return self.quotient_and_remainder(divisor, Rounding.TRUNCATE)

    def quotient_and_remainder(
        self, divisor: Any, rounding: Rounding = Rounding.FLOOR
    ) -> tuple[Any, Any]:
        """Quotient and remainder under ``rounding``.

        ``self == q * divisor + r`` always holds, and ``|r| < |divisor|``.
        """
        q, r = _DIVMOD[rounding](self._value, self._divisor(divisor))
        return self._from_engine(q), self._from_engine(r)

    # -- modulo, exact division, predicates ---------------------------------

    def modulo(self, modulus: Any) -> Any:
        """Remainder in ``[0, |modulus|)`` whatever the modulus sign."""
        m = self._divisor(modulus)
        return self._from_engine(gmpy2.f_mod(self._value, abs(m)))

    def exact_div(self, divisor: Any) -> Any:
        """Quotient when ``divisor`` is known to divide ``self``.

        The result is meaningless when it does not; check ``is_divisible``
        first if unsure.
        """
        return self._from_engine(gmpy2.divexact(self._value, self._divisor(divisor)))

    def is_divisible(self, divisor: Any) -> bool:
        # Only zero is divisible by zero.
        d = self._operand(divisor)
        if d == 0:
            return self._value == 0
        return bool(gmpy2.is_divisible(self._value, d))

    def is_divisible_2exp(self, exponent: int) -> bool:
        _check_exponent(exponent)
        v = self._value
        return v == 0 or gmpy2.bit_scan1(v) >= exponent

    def is_congruent(self, other: Any, modulus: Any) -> bool:
        # Congruence modulo zero is equality.
        c = self._operand(other)
        m = self._operand(modulus)
        if m == 0:
            return self._value == c
        return bool(gmpy2.is_congruent(self._value, c, abs(m)))

    def is_congruent_2exp(self, other: Any, exponent: int) -> bool:
        _check_exponent(exponent)
        diff = self._value - self._operand(other)
        return gmpy2.f_mod_2exp(diff, exponent) == 0

    # -- power-of-two divisors ----------------------------------------------

    def floor_div_2exp(self, exponent: int) -> Any:
        return self._from_engine(gmpy2.f_div_2exp(self._value, _check_exponent(exponent)))

    def floor_rem_2exp(self, exponent: int) -> Any:
        return self._from_engine(gmpy2.f_mod_2exp(self._value, _check_exponent(exponent)))

    def ceil_div_2exp(self, exponent: int) -> Any:
        return self._from_engine(gmpy2.c_div_2exp(self._value, _check_exponent(exponent)))

    def ceil_rem_2exp(self, exponent: int) -> Any:
        return self._from_engine(gmpy2.c_mod_2exp(self._value, _check_exponent(exponent)))

    def trunc_div_2exp(self, exponent: int) -> Any:
        return self._from_engine(gmpy2.t_div_2exp(self._value, _check_exponent(exponent)))

    def trunc_rem_2exp(self, exponent: int) -> Any:
        return self._from_engine(gmpy2.t_mod_2exp(self._value, _check_exponent(exponent)))

    # -- in place -----------------------------------------------------------

    def floor_div_inplace(self, divisor: Any) -> None:
        self._store(gmpy2.f_div(self._value, self._divisor(divisor)))

    def ceil_div_inplace(self, divisor: Any) -> None:
        self._store(gmpy2.c_div(self._value, self._divisor(divisor)))

    def trunc_div_inplace(self, divisor: Any) -> None:
        self._store(gmpy2.t_div(self._value, self._divisor(divisor)))

    def modulo_inplace(self, modulus: Any) -> None:
        m = self._divisor(modulus)
        self._store(gmpy2.f_mod(self._value, abs(m)))

    # -- operators ----------------------------------------------------------

    def __floordiv__(self, other: Any) -> Any:
        d = self._engine_or_none(other)
        if d is None:
            return NotImplemented
        if d == 0:
            raise DivisionByZeroError()
        return self._from_engine(gmpy2.f_div(self._value, d))

    def __rfloordiv__(self, other: Any) -> Any:
        n = self._engine_or_none(other)
        if n is None:
            return NotImplemented
        return self._from_engine(gmpy2.f_div(n, self._divisor(self)))

    def __mod__(self, other: Any) -> Any:
        d = self._engine_or_none(other)
        if d is None:
            return NotImplemented
        if d == 0:
            raise DivisionByZeroError()
        return self._from_engine(gmpy2.f_mod(self._value, d))

    def __rmod__(self, other: Any) -> Any:
        n = self._engine_or_none(other)
        if n is None:
            return NotImplemented
        return self._from_engine(gmpy2.f_mod(n, self._divisor(self)))

    def __divmod__(self, other: Any) -> Any:
        if self._engine_or_none(other) is None:
            return NotImplemented
        return self.quotient_and_remainder(other, Rounding.FLOOR)

    def __rdivmod__(self, other: Any) -> Any:
        n = self._engine_or_none(other)
        if n is None:
            return NotImplemented
        q, r = gmpy2.f_divmod(n, self._divisor(self))
        return self._from_engine(q), self._from_engine(r)
