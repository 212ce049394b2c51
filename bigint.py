"""Arbitrary-precision integer with value semantics and copy-on-write storage.

``Integer(a)`` and ``a.copy()`` return a new handle on the same storage
cell in O(1).  Operators never mutate; they return a fresh value.  The
``*_inplace`` methods, ``set`` and ``swap`` mutate, and each first makes
its handle the sole owner of the cell (see ``storage.CowHandle``).  Every
write computes the result from the operands first and then stores it, so
an operand may be the receiver itself.

The operation families live in mixins:

    division.py   floor / ceiling / truncate division, divisibility
    bitwise.py    two's-complement bit operations
    numtheory.py  gcd family, symbols, primality, sequences
    powers.py     exponentiation and roots
    textio.py     radix text and line streams
    binaryio.py   signed binary export and raw streams
    limbs.py      raw limb access
    randomness.py pseudo-random and secure generation
"""

from __future__ import annotations

import math
from typing import Any, Optional

import gmpy2

from binaryio import BinaryMixin
from bitwise import BitwiseMixin
from config import NATIVE_INT_BITS
from division import DivisionMixin
from limbs import LimbsMixin
from numerrors import InvalidExponentError, InvalidStringFormatError, NumericOverflowError
from numtheory import NumberTheoryMixin
from powers import PowersMixin
from randomness import RandomMixin
from storage import CowHandle, FloatStorage, IntegerStorage
from textio import TextMixin, parse_integer

_MPZ_TYPES = (type(gmpy2.mpz(0)), type(gmpy2.xmpz(0)))

_DOUBLE_MANTISSA_BITS = 53
_DOUBLE_MAX_EXPONENT = 1024

_INT64_MAX = (1 << 63) - 1
_UINT64_MASK = (1 << 64) - 1


def _fits(v: Any, bits: int, signed: bool) -> bool:
    if signed:
        return -(1 << (bits - 1)) <= v < (1 << (bits - 1))
    return 0 <= v < (1 << bits)


def _float_cell_value(value: Any) -> Any:
    """Engine float behind a ``Float`` handle, else None."""
    storage = getattr(value, "_storage", None)
    if isinstance(storage, FloatStorage):
        return storage.value
    return None


def _is_nan(value: Any) -> bool:
    if isinstance(value, float):
        return math.isnan(value)
    engine_float = _float_cell_value(value)
    return engine_float is not None and bool(gmpy2.is_nan(engine_float))


class Integer(
    DivisionMixin,
    BitwiseMixin,
    NumberTheoryMixin,
    PowersMixin,
    TextMixin,
    BinaryMixin,
    LimbsMixin,
    RandomMixin,
    CowHandle,
):
    __slots__ = ()

    _storage_type = IntegerStorage

    def __init__(self, value: Any = 0, base: Optional[int] = None) -> None:
        if isinstance(value, Integer) and base is None:
            self._bind(value._storage)
            return
        self._bind(IntegerStorage(self._convert(value, base)))

    # -- engine plumbing ----------------------------------------------------

    @staticmethod
    def _convert(value: Any, base: Optional[int] = None) -> Any:
        """Engine integer for any supported source value."""
        if isinstance(value, str):
            parsed = parse_integer(value, 10 if base is None else base)
            if parsed is None:
                raise InvalidStringFormatError(value, 10 if base is None else base)
            return parsed
        if base is not None:
            raise TypeError("base is only allowed with a string value")
        if isinstance(value, Integer):
            return value._value
        if isinstance(value, (int, *_MPZ_TYPES)):
            return gmpy2.mpz(value)
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError(f"cannot convert {value} to Integer")
            return gmpy2.mpz(math.trunc(value))
        engine_float = _float_cell_value(value)
        if engine_float is None and isinstance(value, type(gmpy2.mpfr(0))):
            engine_float = value
        if engine_float is not None:
            if not gmpy2.is_finite(engine_float):
                raise ValueError(f"cannot convert {engine_float} to Integer")
            numerator, denominator = engine_float.as_integer_ratio()
            return gmpy2.t_div(numerator, denominator)
        raise TypeError(f"cannot convert {type(value).__name__} to Integer")

    @classmethod
    def _from_engine(cls, value: Any) -> "Integer":
        result = object.__new__(cls)
        result._bind(IntegerStorage(value))
        return result

    @staticmethod
    def _engine_or_none(value: Any) -> Any:
        """Engine view of an integer operand, or None if unsupported."""
        if isinstance(value, Integer):
            return value._storage.value
        if isinstance(value, (int, *_MPZ_TYPES)):
            return value
        return None

    @classmethod
    def _operand(cls, value: Any) -> Any:
        engine = cls._engine_or_none(value)
        if engine is None:
            raise TypeError(f"expected Integer or int, got {type(value).__name__}")
        return engine

    @property
    def _value(self) -> Any:
        return self._storage.value

    def _store(self, result: Any) -> None:
        self._ensure_unique().store(result)

    # -- construction and assignment ----------------------------------------

    @classmethod
    def preallocated(cls, bits: int) -> "Integer":
        """Zero with room for ``bits`` bits."""
        result = object.__new__(cls)
        result._bind(IntegerStorage.preallocated(bits))
        return result

    def reallocate(self, bits: int) -> None:
        """Resize to ``bits`` bits; a value that does not fit becomes zero."""
        self._ensure_unique().reallocate(bits)

    def set(self, value: Any) -> None:
        """Assign ``value``.  Assigning a handle on the same cell is a no-op."""
        if isinstance(value, Integer):
            if value._storage is not self._storage:
                self._rebind(value._storage)
            return
        self._store(self._convert(value))

    def set_string(self, text: str, base: int = 10) -> bool:
        """Assign from text; False (value unchanged) if malformed."""
        parsed = parse_integer(text, base)
        if parsed is None:
            return False
        self._store(parsed)
        return True

    def __reduce__(self) -> tuple:
        return (type(self), (self.to_string(16), 16))

    # -- conversion ---------------------------------------------------------

    def to_int(self) -> int:
        return int(self._value)

    def __int__(self) -> int:
        return int(self._value)

    def __index__(self) -> int:
        return int(self._value)

    def __bool__(self) -> bool:
        return self._value != 0

    def to_uint(self) -> int:
        """Low 64 bits of ``|self|``."""
        return int(abs(self._value)) & _UINT64_MASK

    def to_native(self, strict: bool = False) -> int:
        """Signed 64-bit value with the engine's truncation rule.

        Out of range, the low 63 bits of ``|self|`` are kept and the sign is
        applied; ``strict=True`` raises ``NumericOverflowError`` instead.
        """
        v = self._value
        if strict and not self.fits_int64():
            raise NumericOverflowError(v, "int64")
        low = self.to_uint()
        if v >= 0:
            return low & _INT64_MAX
        return -1 - ((low - 1) & _INT64_MAX)

    def fits_int(self) -> bool:
        return _fits(self._value, NATIVE_INT_BITS, True)

    def fits_uint(self) -> bool:
        return _fits(self._value, NATIVE_INT_BITS, False)

    def fits_int64(self) -> bool:
        return _fits(self._value, 64, True)

    def fits_uint64(self) -> bool:
        return _fits(self._value, 64, False)

    def fits_int32(self) -> bool:
        return _fits(self._value, 32, True)

    def fits_uint32(self) -> bool:
        return _fits(self._value, 32, False)

    def fits_int16(self) -> bool:
        return _fits(self._value, 16, True)

    def fits_uint16(self) -> bool:
        return _fits(self._value, 16, False)

    def to_double(self) -> float:
        """Nearest double toward zero; infinite past the double range."""
        v = self._value
        n = gmpy2.bit_length(v)
        if n <= _DOUBLE_MANTISSA_BITS:
            return float(int(v))
        if n > _DOUBLE_MAX_EXPONENT:
            return math.copysign(math.inf, v)
        shift = n - _DOUBLE_MANTISSA_BITS
        return math.ldexp(float(int(gmpy2.t_div_2exp(v, shift))), shift)

    def __float__(self) -> float:
        return self.to_double()

    def to_double_2exp(self) -> tuple[float, int]:
        """``(m, e)`` with ``self ~= m * 2**e`` and ``0.5 <= |m| < 1``.

        ``m`` is truncated toward zero; zero gives ``(0.0, 0)``.
        """
        v = self._value
        n = gmpy2.bit_length(v)
        if n == 0:
            return 0.0, 0
        shift = max(0, n - _DOUBLE_MANTISSA_BITS)
        mantissa = float(int(gmpy2.t_div_2exp(v, shift)))
        return math.ldexp(mantissa, shift - n), n

    def bit_length(self) -> int:
        """Bits in ``|self|``; 0 for zero."""
        return int(gmpy2.bit_length(self._value))

    def is_zero(self) -> bool:
        return self._value == 0

    def is_negative(self) -> bool:
        return self._value < 0

    def is_positive(self) -> bool:
        return self._value > 0

    @property
    def sign(self) -> int:
        return int(gmpy2.sign(self._value))

    # -- comparison ---------------------------------------------------------

    def _comparable(self, other: Any) -> Any:
        engine = self._engine_or_none(other)
        if engine is not None:
            return engine
        if isinstance(other, float):
            if math.isnan(other):
                raise ValueError("cannot compare with NaN")
            return other
        engine_float = _float_cell_value(other)
        if engine_float is not None:
            if gmpy2.is_nan(engine_float):
                raise ValueError("cannot compare with NaN")
            return engine_float
        raise TypeError(f"cannot compare Integer with {type(other).__name__}")

    def compare(self, other: Any) -> int:
        """-1, 0 or 1 as ``self`` is below, equal to or above ``other``."""
        return int(gmpy2.cmp(self._value, self._comparable(other)))

    def compare_abs(self, other: Any) -> int:
        return int(gmpy2.cmp(abs(self._value), abs(self._comparable(other))))

    def _richcmp(self, other: Any) -> Optional[int]:
        try:
            return self.compare(other)
        except TypeError:
            return None

    def __eq__(self, other: Any) -> Any:
        if _is_nan(other):
            return False
        result = self._richcmp(other)
        return NotImplemented if result is None else result == 0

    def __ne__(self, other: Any) -> Any:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __lt__(self, other: Any) -> Any:
        result = self._richcmp(other)
        return NotImplemented if result is None else result < 0

    def __le__(self, other: Any) -> Any:
        result = self._richcmp(other)
        return NotImplemented if result is None else result <= 0

    def __gt__(self, other: Any) -> Any:
        result = self._richcmp(other)
        return NotImplemented if result is None else result > 0

    def __ge__(self, other: Any) -> Any:
        result = self._richcmp(other)
        return NotImplemented if result is None else result >= 0

    def __hash__(self) -> int:
        """Hash of the current value, equal to the matching ``int`` hash.

        The ``*_inplace`` methods change the value and so the hash.  Do not
        mutate a value in place while it is a dict key or set member; mutate
        a copy instead.
        """
        return hash(self._value)

    # -- arithmetic ---------------------------------------------------------

    def __add__(self, other: Any) -> Any:
        b = self._engine_or_none(other)
        if b is None:
            return NotImplemented
        return self._from_engine(self._value + b)

    __radd__ = __add__

    def __sub__(self, other: Any) -> Any:
        b = self._engine_or_none(other)
        if b is None:
            return NotImplemented
        return self._from_engine(self._value - b)

    def __rsub__(self, other: Any) -> Any:
        a = self._engine_or_none(other)
        if a is None:
            return NotImplemented
        return self._from_engine(a - self._value)

    def __mul__(self, other: Any) -> Any:
        b = self._engine_or_none(other)
        if b is None:
            return NotImplemented
        return self._from_engine(self._value * b)

    __rmul__ = __mul__

    def __neg__(self) -> "Integer":
        return self._from_engine(-self._value)

    def __pos__(self) -> "Integer":
        return self._share()

    def __abs__(self) -> "Integer":
        return self._from_engine(abs(self._value))

    def negated(self) -> "Integer":
        return -self

    def absolute(self) -> "Integer":
        return abs(self)

    def multiplied_by_2exp(self, exponent: int) -> "Integer":
        if exponent < 0:
            raise InvalidExponentError(exponent)
        return self._from_engine(self._value << exponent)

    @classmethod
    def rsub(cls, left: Any, right: Any) -> "Integer":
        """``left - right`` for a native ``left``."""
        return cls._from_engine(cls._operand(left) - cls._operand(right))

    # -- in place -----------------------------------------------------------

    def add_inplace(self, other: Any) -> None:
        self._store(self._value + self._operand(other))

    def sub_inplace(self, other: Any) -> None:
        self._store(self._value - self._operand(other))

    def mul_inplace(self, other: Any) -> None:
        self._store(self._value * self._operand(other))

    def neg_inplace(self) -> None:
        self._store(-self._value)

    def abs_inplace(self) -> None:
        self._store(abs(self._value))

    def addmul_inplace(self, a: Any, b: Any) -> None:
        """``self += a * b``; any operand may be ``self``."""
        self._store(self._value + self._operand(a) * self._operand(b))

    def submul_inplace(self, a: Any, b: Any) -> None:
        """``self -= a * b``; any operand may be ``self``."""
        self._store(self._value - self._operand(a) * self._operand(b))

    def mul_2exp_inplace(self, exponent: int) -> None:
        if exponent < 0:
            raise InvalidExponentError(exponent)
        self._store(self._value << exponent)
