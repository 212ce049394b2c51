"""Number theory for ``Integer``: GCD family, symbols, primality, sequences.

Sequence generators are class methods taking non-negative native indices.
Primality results use the engine's tri-state convention::

    0  definitely composite
    1  probably prime (error probability at most 4**-reps)
    2  definitely prime
"""

from __future__ import annotations

import operator
from typing import Any, Optional

import gmpy2

from config import DEFAULT_PRIME_REPS, DETERMINISTIC_PRIME_LIMIT
from numerrors import DivisionByZeroError


def _index(n: Any, what: str = "index") -> int:
    n = operator.index(n)
    if n < 0:
        raise ValueError(f"{what} must be non-negative, got {n}")
    return n


def _check_reps(reps: int) -> int:
    if reps < 1:
        raise ValueError(f"reps must be positive, got {reps}")
    return reps


def _odd_positive(n: Any, what: str) -> None:
    if n <= 0 or gmpy2.is_even(n):
        raise ValueError(f"{what} must be an odd positive integer, got {n}")


class NumberTheoryMixin:
    __slots__ = ()

    # -- gcd family ---------------------------------------------------------

    @classmethod
    def gcd(cls, a: Any, b: Any) -> Any:
        """Non-negative greatest common divisor; ``gcd(0, 0) == 0``."""
        return cls._from_engine(gmpy2.gcd(cls._operand(a), cls._operand(b)))

    @classmethod
    def extended_gcd(cls, a: Any, b: Any) -> tuple[Any, Any, Any]:
        """``(g, s, t)`` with ``a*s + b*t == g``."""
        g, s, t = gmpy2.gcdext(cls._operand(a), cls._operand(b))
        return cls._from_engine(g), cls._from_engine(s), cls._from_engine(t)

    @classmethod
    def lcm(cls, a: Any, b: Any) -> Any:
        """Non-negative least common multiple, zero if either operand is zero."""
        return cls._from_engine(gmpy2.lcm(cls._operand(a), cls._operand(b)))

    def modular_inverse(self, modulus: Any) -> Optional[Any]:
        """Inverse in ``[0, |modulus|)``, or None when none exists."""
        m = abs(self._operand(modulus))
        if m == 0:
            return None
        if m == 1:
            return self._from_engine(0)
        try:
            inverse = gmpy2.invert(self._value, m)
        except ZeroDivisionError:
            return None
        return self._from_engine(inverse)

    # -- symbols ------------------------------------------------------------

    @classmethod
    def jacobi(cls, a: Any, n: Any) -> int:
        n = cls._operand(n)
        _odd_positive(n, "n")
        return int(gmpy2.jacobi(cls._operand(a), n))

    @classmethod
    def legendre(cls, a: Any, p: Any) -> int:
        p = cls._operand(p)
        _odd_positive(p, "p")
        return int(gmpy2.legendre(cls._operand(a), p))

    @classmethod
    def kronecker(cls, a: Any, n: Any) -> int:
        return int(gmpy2.kronecker(cls._operand(a), cls._operand(n)))

    # -- primality ----------------------------------------------------------

    def is_probable_prime(self, reps: int = DEFAULT_PRIME_REPS) -> int:
        """0, 1 or 2 (see module docstring).  Tests ``|self|``."""
        _check_reps(reps)
        n = abs(self._value)
        if not gmpy2.is_prime(n, reps):
            return 0
        # BPSW has no known counterexample below 2**64.
        if n < DETERMINISTIC_PRIME_LIMIT and (n < 5 or gmpy2.is_bpsw_prp(n)):
            return 2
        return 1

    def miller_rabin(self, reps: int) -> int:
        """1 if ``self`` passes ``reps`` rounds, else 0."""
        return 1 if self.is_probable_prime(reps) > 0 else 0

    def next_prime(self) -> Any:
        """Smallest probable prime greater than ``self``."""
        v = self._value
        if v < 2:
            return self._from_engine(2)
        return self._from_engine(gmpy2.next_prime(v))

    def previous_prime(self) -> Optional[tuple[Any, int]]:
        """``(prime, certainty)`` for the largest prime below ``self``.

        None when ``self <= 2``.
        """
        v = gmpy2.mpz(self._value)
        if v <= 2:
            return None
        candidate = v - 1
        if candidate > 2 and gmpy2.is_even(candidate):
            candidate -= 1
        while candidate > 2 and not gmpy2.is_prime(candidate, DEFAULT_PRIME_REPS):
            candidate -= 2
        prime = self._from_engine(candidate)
        return prime, prime.is_probable_prime(DEFAULT_PRIME_REPS)

    # -- sequences ----------------------------------------------------------

    @classmethod
    def factorial(cls, n: int) -> Any:
        return cls._from_engine(gmpy2.fac(_index(n)))

    @classmethod
    def double_factorial(cls, n: int) -> Any:
        return cls._from_engine(gmpy2.double_fac(_index(n)))

    @classmethod
    def multi_factorial(cls, n: int, k: int) -> Any:
        """``n * (n-k) * (n-2k) * ...``, for ``k >= 1``."""
        k = _index(k, "k")
        if k == 0:
            raise ValueError("k must be positive")
        return cls._from_engine(gmpy2.multi_fac(_index(n), k))

    @classmethod
    def primorial(cls, n: int) -> Any:
        """Product of the primes ``<= n``."""
        return cls._from_engine(gmpy2.primorial(_index(n)))

    @classmethod
    def binomial(cls, n: Any, k: int) -> Any:
        """``C(n, k)``; negative ``n`` uses ``C(n, k) = (-1)**k C(k-n-1, k)``."""
        n = cls._operand(n)
        k = _index(k, "k")
        if n >= 0:
            return cls._from_engine(gmpy2.comb(n, k))
        result = gmpy2.comb(k - n - 1, k)
        return cls._from_engine(-result if k % 2 else result)

    @classmethod
    def fibonacci(cls, n: int) -> Any:
        return cls._from_engine(gmpy2.fib(_index(n)))

    @classmethod
    def fibonacci2(cls, n: int) -> tuple[Any, Any]:
        """``(F(n), F(n-1))``, with ``F(-1) == 1``."""
        n = _index(n)
        if n == 0:
            return cls._from_engine(0), cls._from_engine(1)
        # Order the pair by size; F(n) >= F(n-1) for n >= 1.
        fn, fn_1 = sorted(gmpy2.fib2(n), reverse=True)
        return cls._from_engine(fn), cls._from_engine(fn_1)

    @classmethod
    def lucas(cls, n: int) -> Any:
        return cls._from_engine(gmpy2.lucas(_index(n)))

    @classmethod
    def lucas2(cls, n: int) -> tuple[Any, Any]:
        """``(L(n), L(n-1))``, with ``L(-1) == -1``."""
        n = _index(n)
        if n == 0:
            return cls._from_engine(2), cls._from_engine(-1)
        if n == 1:
            return cls._from_engine(1), cls._from_engine(2)
        # L(n) > L(n-1) from n == 2 on.
        ln, ln_1 = sorted(gmpy2.lucas2(n), reverse=True)
        return cls._from_engine(ln), cls._from_engine(ln_1)

    # -- factor removal -----------------------------------------------------

    def remove_factor_inplace(self, factor: Any) -> int:
        """Divide out every power of ``factor``; return how many were removed."""
        f = self._operand(factor)
        if f == 0:
            raise DivisionByZeroError("cannot remove a zero factor")
        if abs(f) == 1:
            raise ValueError("cannot remove a unit factor")
        if self._value == 0:
            return 0
        remaining, multiplicity = gmpy2.remove(self._value, abs(f))
        if f < 0 and multiplicity % 2:
            remaining = -remaining
        if multiplicity:
            self._store(remaining)
        return int(multiplicity)
