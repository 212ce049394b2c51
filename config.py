"""Process-wide numeric configuration.

The settings here are module-level state with explicit getters and setters.
Changing a setting affects only values constructed afterwards; existing
``Float`` values keep the precision they were built with.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

import gmpy2

from numerrors import InvalidPrecisionError

_logger = logging.getLogger("mpcow.config")

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_FLOAT_PRECISION = 64
DEFAULT_PRIME_REPS = 25
SECURE_RANDOM_MAX_ATTEMPTS = 1000

# Below this bound a passing BPSW test is a proof of primality.
DETERMINISTIC_PRIME_LIMIT = 2**64

NATIVE_INT_BITS = 64
LOGGER_NAME = "mpcow"


@dataclass(frozen=True)
class NumericSettings:
    """Snapshot of the process-wide settings."""

    default_precision: int
    prime_reps: int
    secure_random_attempts: int

    def __post_init__(self) -> None:
        if self.prime_reps < 1:
            raise ValueError(f"prime_reps must be positive, got {self.prime_reps}")
        if self.secure_random_attempts < 1:
            raise ValueError(
                "secure_random_attempts must be positive, "
                f"got {self.secure_random_attempts}"
            )


_default_precision = DEFAULT_FLOAT_PRECISION


def check_precision(bits: int) -> int:
    if not isinstance(bits, int) or isinstance(bits, bool):
        raise TypeError(f"precision must be an int, got {type(bits).__name__}")
    if bits < 1 or bits > gmpy2.get_max_precision():
        raise InvalidPrecisionError(bits)
    return bits


def get_default_precision() -> int:
    """Precision in bits given to new ``Float`` values without an explicit one."""
    return _default_precision


def set_default_precision(bits: int) -> None:
    global _default_precision
    _default_precision = check_precision(bits)
    _logger.info("default float precision set to %d bits", bits)


@contextmanager
def precision_scope(bits: int) -> Iterator[int]:
    """Temporarily change the default precision, restoring it on exit."""
    previous = get_default_precision()
    set_default_precision(bits)
    try:
        yield bits
    finally:
        set_default_precision(previous)


@contextmanager
def engine_context(**overrides: object) -> Iterator[object]:
    """Run a block under a copy of the engine context with ``overrides``.

    ``engine_context(precision=113, round=gmpy2.RoundToZero)``
    """
    saved = gmpy2.get_context()
    scoped = saved.copy()
    for name, value in overrides.items():
        setattr(scoped, name, value)
    gmpy2.set_context(scoped)
    try:
        yield scoped
    finally:
        gmpy2.set_context(saved)


def current_settings() -> NumericSettings:
    return NumericSettings(
        default_precision=_default_precision,
        prime_reps=DEFAULT_PRIME_REPS,
        secure_random_attempts=SECURE_RANDOM_MAX_ATTEMPTS,
    )


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Install a basic handler on the root logger if none is configured."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    return logger
