"""Random generation: caller-owned ``RandomState`` and the Integer mixin.

``RandomState`` output is deterministic for a given seed and is NOT
suitable for security use.  The ``secure_*`` constructors draw from the
operating system entropy source instead.

Known limitation: ``Integer.secure_random_below`` uses rejection sampling
with a bounded number of attempts (``config.SECURE_RANDOM_MAX_ATTEMPTS``).
If every attempt is rejected it falls back to modular reduction, which is
slightly biased toward small values.  The fallback is logged at WARNING.
With at least half of all candidates accepted on each attempt, reaching it
has probability below 2**-1000.

A state must not be shared between threads without external locking.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import gmpy2
from pydantic import ValidationError

import config
from formats import LinearCongruentialScheme, RandomAlgorithm
from numerrors import InvalidRandomStateError

_logger = logging.getLogger("mpcow.randomness")

# Full-period schemes (multiplier = 1 mod 4, odd addend) by output size.
_LC_SIZE_TABLE = (
    LinearCongruentialScheme(multiplier=1664525, addend=1013904223, exponent=32),
    LinearCongruentialScheme(multiplier=0x5DEECE66D, addend=0xB, exponent=48),
    LinearCongruentialScheme(
        multiplier=6364136223846793005, addend=1442695040888963407, exponent=64
    ),
    LinearCongruentialScheme(
        multiplier=0x2360ED051FC65DA44385DF649FCCF645,
        addend=0x5851F42D4C957F2D14057B7EF767814F,
        exponent=128,
    ),
)


def _entropy(count: int) -> bytes:
    try:
        return os.urandom(count)
    except (OSError, NotImplementedError) as exc:
        raise InvalidRandomStateError("system entropy source unavailable") from exc


def secure_bits(bits: int) -> int:
    """Uniform integer in ``[0, 2**bits)`` from the system entropy source."""
    raw = int.from_bytes(_entropy((bits + 7) // 8), "little")
    return raw & ((1 << bits) - 1)


def _positive(value: Any, what: str) -> Any:
    if value <= 0:
        raise ValueError(f"{what} must be positive, got {value}")
    return value


# ---------------------------------------------------------------------------
# Generator state
# ---------------------------------------------------------------------------

class RandomState:
    """Mutable generator state owned by the caller."""

    def __init__(
        self,
        algorithm: RandomAlgorithm,
        seed: Any = 0,
        scheme: LinearCongruentialScheme | None = None,
    ) -> None:
        if algorithm is RandomAlgorithm.LINEAR_CONGRUENTIAL and scheme is None:
            raise InvalidRandomStateError("linear congruential state needs a scheme")
        self.algorithm = algorithm
        self.scheme = scheme
        self._seed = 0
        self._engine: Any = None
        self._x = gmpy2.mpz(0)
        self.reseed(seed)

    # -- constructors -------------------------------------------------------

    @classmethod
    def default(cls) -> "RandomState":
        return cls(RandomAlgorithm.DEFAULT)

    @classmethod
    def mersenne_twister(cls, seed: Any = 0) -> "RandomState":
        return cls(RandomAlgorithm.MERSENNE_TWISTER, seed)

    @classmethod
    def linear_congruential(
        cls, seed: Any, multiplier: int, addend: int, exponent: int
    ) -> "RandomState":
        """``X = (multiplier * X + addend) mod 2**exponent``.

        Each step yields the high ``exponent // 2`` bits of ``X``.
        """
        try:
            scheme = LinearCongruentialScheme(
                multiplier=multiplier, addend=addend, exponent=exponent
            )
        except ValidationError as exc:
            raise InvalidRandomStateError(str(exc)) from exc
        return cls(RandomAlgorithm.LINEAR_CONGRUENTIAL, seed, scheme)

    @classmethod
    def linear_congruential_size(cls, seed: Any, size: int) -> "RandomState":
        """Linear congruential state yielding at least ``size`` bits per step."""
        if size >= 1:
            for scheme in _LC_SIZE_TABLE:
                if size <= scheme.output_bits:
                    return cls(RandomAlgorithm.LINEAR_CONGRUENTIAL, seed, scheme)
        raise InvalidRandomStateError(
            f"no linear congruential scheme for size {size} "
            f"(supported: 1..{_LC_SIZE_TABLE[-1].output_bits})"
        )

    # -- seeding ------------------------------------------------------------

    @property
    def seed(self) -> int:
        return self._seed

    def reseed(self, value: Any) -> None:
        seed = int(value)
        if seed < 0:
            raise InvalidRandomStateError(f"seed must be non-negative, got {seed}")
        self._seed = seed
        if self.algorithm is RandomAlgorithm.LINEAR_CONGRUENTIAL:
            self._x = gmpy2.f_mod_2exp(seed, self.scheme.exponent)
        else:
            self._engine = gmpy2.random_state(seed)
        _logger.debug("%s state reseeded", self.algorithm.value)

    def copy(self) -> "RandomState":
        """Independent copy continuing the same sequence.

        Mersenne Twister states are opaque to the engine and cannot be copied.
        """
        if self.algorithm is not RandomAlgorithm.LINEAR_CONGRUENTIAL:
            raise InvalidRandomStateError(
                f"{self.algorithm.value} state cannot be copied"
            )
        clone = RandomState(self.algorithm, self._seed, self.scheme)
        clone._x = self._x
        return clone

    # -- native draws -------------------------------------------------------

    def random_int(self, upper_bound: int) -> int:
        """Uniform int in ``[0, upper_bound)``."""
        return int(self.uniform_below(_positive(upper_bound, "upper_bound")))

    def random_bits(self, bits: int) -> int:
        """Uniform int in ``[0, 2**bits)``."""
        if bits < 0:
            raise ValueError(f"bits must be non-negative, got {bits}")
        return int(self.uniform_bits(bits))

    # -- engine draws -------------------------------------------------------

    def _lc_step(self) -> Any:
        scheme = self.scheme
        self._x = gmpy2.f_mod_2exp(scheme.multiplier * self._x + scheme.addend,
                                   scheme.exponent)
        return self._x >> (scheme.exponent - scheme.output_bits)

    def uniform_bits(self, bits: int) -> Any:
        if bits == 0:
            return gmpy2.mpz(0)
        if self._engine is not None:
            return gmpy2.mpz_urandomb(self._engine, bits)
        chunk = self.scheme.output_bits
        value = gmpy2.mpz(0)
        filled = 0
        while filled < bits:
            value |= self._lc_step() << filled
            filled += chunk
        return gmpy2.f_mod_2exp(value, bits)

    def uniform_below(self, upper_bound: Any) -> Any:
        if self._engine is not None:
            return gmpy2.mpz_random(self._engine, upper_bound)
        bits = gmpy2.bit_length(upper_bound)
        while True:
            candidate = self.uniform_bits(bits)
            if candidate < upper_bound:
                return candidate

    def long_runs(self, bits: int) -> Any:
        """``bits``-bit value made of long runs of equal bits, top bit set."""
        if self._engine is not None:
            return gmpy2.mpz_rrandomb(self._engine, bits)
        value = gmpy2.mpz(0)
        position = bits
        fill_ones = True
        longest = max(1, bits // 4)
        while position > 0:
            run = min(position, 1 + int(self.uniform_below(longest)))
            position -= run
            if fill_ones:
                value |= ((gmpy2.mpz(1) << run) - 1) << position
            fill_ones = not fill_ones
        return value

    def fraction(self, precision: int) -> Any:
        """Uniform ``mpfr`` in ``[0, 1)`` with ``precision`` bits."""
        if self._engine is not None:
            with config.engine_context(precision=precision):
                return gmpy2.mpfr_random(self._engine)
        numerator = self.uniform_bits(precision)
        with config.engine_context(precision=precision):
            return gmpy2.mpfr(numerator) / (gmpy2.mpz(1) << precision)


# ---------------------------------------------------------------------------
# Integer mixin
# ---------------------------------------------------------------------------

class RandomMixin:
    __slots__ = ()

    @classmethod
    def random_bits(cls, bits: int, state: RandomState) -> Any:
        """Pseudo-random value of exactly ``bits`` bits (top bit set).

        Not for security use.
        """
        _positive(bits, "bits")
        top = gmpy2.mpz(1) << (bits - 1)
        return cls._from_engine(state.uniform_bits(bits - 1) | top)

    @classmethod
    def random_below(cls, upper_bound: Any, state: RandomState) -> Any:
        """Pseudo-random value uniform in ``[0, upper_bound)``.  Not for security use."""
        bound = _positive(cls._operand(upper_bound), "upper_bound")
        return cls._from_engine(state.uniform_below(bound))

    @classmethod
    def random_long_runs(cls, bits: int, state: RandomState) -> Any:
        """Pseudo-random ``bits``-bit value with long runs of 0s and 1s.

        Useful as test input for carry and borrow edge cases.
        """
        return cls._from_engine(state.long_runs(_positive(bits, "bits")))

    @classmethod
    def secure_random_bits(cls, bits: int) -> Any:
        """Value of exactly ``bits`` bits from the system entropy source."""
        _positive(bits, "bits")
        # Masking may clear the top bit; force it.
        return cls._from_engine(secure_bits(bits) | (1 << (bits - 1)))

    @classmethod
    def secure_random_below(cls, upper_bound: Any) -> Any:
        """Value in ``[0, upper_bound)`` from the system entropy source.

        See the module docstring for the bias of the exhausted-budget
        fallback.
        """
        bound = int(_positive(cls._operand(upper_bound), "upper_bound"))
        bits = bound.bit_length()
        candidate = 0
        for _ in range(config.SECURE_RANDOM_MAX_ATTEMPTS):
            candidate = secure_bits(bits)
            if candidate < bound:
                return cls._from_engine(candidate)
        _logger.warning(
            "secure rejection sampling exhausted %d attempts for a %d-bit bound; "
            "falling back to biased modular reduction",
            config.SECURE_RANDOM_MAX_ATTEMPTS, bits,
        )
        return cls._from_engine(candidate % bound)
