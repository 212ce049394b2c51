"""Parameter models for binary export and random-state configuration.

These are pydantic models so that bad parameters are rejected at
construction time with a ``ValidationError`` (a ``ValueError``), before
any value is touched.
"""

from __future__ import annotations

import sys
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Binary export format
# ---------------------------------------------------------------------------

class WordOrder(str, Enum):
    NATIVE = "native"
    LEAST_SIGNIFICANT_FIRST = "lsf"
    MOST_SIGNIFICANT_FIRST = "msf"


class Endianness(str, Enum):
    NATIVE = "native"
    LITTLE = "little"
    BIG = "big"


class ExportFormat(BaseModel):
    """Word layout used by ``Integer.to_bytes`` and ``Integer.from_bytes``.

    ``size`` is the word size in bytes.  ``nails`` is the number of high bits
    in every word that carry no data: they are written as zero and ignored
    when reading.
    """

    model_config = ConfigDict(frozen=True)

    order: WordOrder = WordOrder.NATIVE
    size: int = Field(default=8, gt=0)
    endian: Endianness = Endianness.NATIVE
    nails: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def nails_leave_data_bits(self) -> "ExportFormat":
        if self.nails >= self.size * 8:
            raise ValueError(
                f"nails ({self.nails}) must be less than the word width "
                f"({self.size * 8} bits)"
            )
        return self

    @property
    def numb_bits(self) -> int:
        """Data bits per word."""
        return self.size * 8 - self.nails

    @property
    def least_significant_first(self) -> bool:
        # Native word order is least significant first, as in the engine.
        return self.order != WordOrder.MOST_SIGNIFICANT_FIRST

    @property
    def byteorder(self) -> str:
        if self.endian == Endianness.NATIVE:
            return sys.byteorder
        return self.endian.value


# Magnitude layout of the raw stream: big-endian bytes.
RAW_FORMAT = ExportFormat(order=WordOrder.MOST_SIGNIFICANT_FIRST, size=1, endian=Endianness.BIG)


# ---------------------------------------------------------------------------
# Random-state configuration
# ---------------------------------------------------------------------------

class RandomAlgorithm(str, Enum):
    DEFAULT = "default"
    MERSENNE_TWISTER = "mt"
    LINEAR_CONGRUENTIAL = "lc"


class LinearCongruentialScheme(BaseModel):
    """Parameters of ``X = (multiplier * X + addend) mod 2**exponent``."""

    model_config = ConfigDict(frozen=True)

    multiplier: int = Field(..., ge=0)
    addend: int = Field(default=0, ge=0)
    exponent: int = Field(..., ge=2)

    @property
    def modulus(self) -> int:
        return 1 << self.exponent

    @property
    def output_bits(self) -> int:
        """High-order bits taken from each state update."""
        return self.exponent // 2
