"""Arbitrary-precision binary float with value semantics.

``Float`` mirrors ``Integer``: handles share a ``FloatStorage`` cell until
one of them writes.  Each value carries a precision in bits.  Results are
rounded to nearest at the larger operand precision (a native or Integer
operand contributes none); the in-place forms keep the receiver's
precision.  Values built without an explicit precision take
``config.get_default_precision()`` at construction time.
"""

from __future__ import annotations

import math
import operator
from typing import Any, Optional

import gmpy2

import config
from bigint import Integer
from numerrors import (
    DivisionByZeroError,
    InvalidExponentError,
    InvalidRadixError,
    InvalidStringFormatError,
    NegativeSquareRootError,
    NumericOverflowError,
    NumericUnderflowError,
)
from randomness import RandomState, secure_bits
from storage import CowHandle, FloatStorage

_MPFR_TYPE = type(gmpy2.mpfr(0))
_MPZ_TYPES = (type(gmpy2.mpz(0)), type(gmpy2.xmpz(0)))

# Binary exponents (value = m * 2**e, 0.5 <= |m| < 1) a double can hold.
_DOUBLE_MAX_EXP = 1024
_DOUBLE_MIN_EXP = -1073
# Below this exponent doubles are subnormal, spaced 2**-1074 apart.
_DOUBLE_MIN_NORMAL_EXP = -1021
_DOUBLE_SUBNORMAL_SHIFT = 1074


def _parse(text: str, base: int, precision: int) -> Optional[Any]:
    if not 2 <= base <= 62:
        raise InvalidRadixError(base)
    compact = "".join(text.split())
    if not compact:
        return None
    try:
        return gmpy2.mpfr(compact, precision, base)
    except ValueError:
        return None


def _strip_zeros(digits: str) -> str:
    stripped = digits.rstrip("0")
    return stripped or "0"


class Float(CowHandle):
    __slots__ = ()

    _storage_type = FloatStorage

    def __init__(self, value: Any = 0, precision: Optional[int] = None) -> None:
        if isinstance(value, Float) and precision is None:
            self._bind(value._storage)
            return
        bits = config.get_default_precision() if precision is None else (
            config.check_precision(precision))
        if isinstance(value, str):
            parsed = _parse(value, 10, bits)
            if parsed is None:
                raise InvalidStringFormatError(value, 10)
            value = parsed
        self._bind(FloatStorage(self._convert(value), bits))

    # -- engine plumbing ----------------------------------------------------

    @staticmethod
    def _convert(value: Any) -> Any:
        if isinstance(value, Float):
            return value._value
        if isinstance(value, Integer):
            return value._value
        if isinstance(value, (int, float, _MPFR_TYPE, *_MPZ_TYPES)):
            return value
        raise TypeError(f"cannot convert {type(value).__name__} to Float")

    @staticmethod
    def _engine_or_none(value: Any) -> Any:
        if isinstance(value, Float):
            return value._value
        if isinstance(value, Integer):
            return value._value
        if isinstance(value, (int, float, _MPFR_TYPE, *_MPZ_TYPES)):
            return value
        return None

    @classmethod
    def _from_engine(cls, value: Any, precision: int) -> "Float":
        result = object.__new__(cls)
        result._bind(FloatStorage(value, precision))
        return result

    @property
    def _value(self) -> Any:
        return self._storage.value

    @property
    def precision(self) -> int:
        return self._storage.precision

    def _result_precision(self, other: Any) -> int:
        if isinstance(other, Float):
            return max(self.precision, other.precision)
        return self.precision

    def _binary(self, other: Any, op: Any, reflected: bool = False) -> Any:
        b = self._engine_or_none(other)
        if b is None:
            return NotImplemented
        bits = self._result_precision(other)
        with config.engine_context(precision=bits):
            result = op(b, self._value) if reflected else op(self._value, b)
        return self._from_engine(result, bits)

    def _inplace(self, op: Any, other: Any) -> None:
        b = self._engine_or_none(other)
        if b is None:
            raise TypeError(f"unsupported operand {type(other).__name__}")
        cell = self._ensure_unique()
        with config.engine_context(precision=cell.precision):
            cell.store(op(cell.value, b))

    # -- construction -------------------------------------------------------

    @classmethod
    def from_string(
        cls, text: str, base: int = 10, precision: Optional[int] = None
    ) -> Optional["Float"]:
        """Parse ``text`` in ``base``; None on malformed input."""
        bits = config.get_default_precision() if precision is None else (
            config.check_precision(precision))
        parsed = _parse(text, base, bits)
        if parsed is None:
            return None
        return cls._from_engine(parsed, bits)

    @classmethod
    def random(cls, state: RandomState, precision: Optional[int] = None) -> "Float":
        """Pseudo-random value in ``[0, 1)``.  Not for security use."""
        bits = config.get_default_precision() if precision is None else (
            config.check_precision(precision))
        return cls._from_engine(state.fraction(bits), bits)

    @classmethod
    def secure_random(cls, bits: int) -> "Float":
        """Value in ``[0, 1)`` with ``bits`` random bits from the system entropy source."""
        config.check_precision(bits)
        with config.engine_context(precision=bits):
            value = gmpy2.mpfr(secure_bits(bits)) / (gmpy2.mpz(1) << bits)
        return cls._from_engine(value, bits)

    def set(self, value: Any) -> None:
        """Assign ``value``, rounded to this value's precision."""
        if isinstance(value, Float) and value._storage is self._storage:
            return
        self._ensure_unique().store(self._convert(value))

    def set_precision(self, bits: int) -> None:
        """Change the precision of this value, rounding it if it shrinks."""
        self._ensure_unique().set_precision(config.check_precision(bits))

    def __reduce__(self) -> tuple:
        return (_restore, (self.to_string(16), self.precision))

    # -- arithmetic ---------------------------------------------------------

    def __add__(self, other: Any) -> Any:
        return self._binary(other, operator.add)

    def __radd__(self, other: Any) -> Any:
        return self._binary(other, operator.add, reflected=True)

    def __sub__(self, other: Any) -> Any:
        return self._binary(other, operator.sub)

    def __rsub__(self, other: Any) -> Any:
        return self._binary(other, operator.sub, reflected=True)

    def __mul__(self, other: Any) -> Any:
        return self._binary(other, operator.mul)

    def __rmul__(self, other: Any) -> Any:
        return self._binary(other, operator.mul, reflected=True)

    def __truediv__(self, other: Any) -> Any:
        b = self._engine_or_none(other)
        if b is not None and b == 0:
            raise DivisionByZeroError()
        return self._binary(other, operator.truediv)

    def __rtruediv__(self, other: Any) -> Any:
        if self._value == 0:
            raise DivisionByZeroError()
        return self._binary(other, operator.truediv, reflected=True)

    def _unary(self, op: Any) -> "Float":
        with config.engine_context(precision=self.precision):
            result = op(self._value)
        return self._from_engine(result, self.precision)

    def __neg__(self) -> "Float":
        return self._unary(operator.neg)

    def __pos__(self) -> "Float":
        return self._share()

    def __abs__(self) -> "Float":
        return self._unary(abs)

    def add_inplace(self, other: Any) -> None:
        self._inplace(operator.add, other)

    def sub_inplace(self, other: Any) -> None:
        self._inplace(operator.sub, other)

    def mul_inplace(self, other: Any) -> None:
        self._inplace(operator.mul, other)

    def div_inplace(self, other: Any) -> None:
        b = self._engine_or_none(other)
        if b is not None and b == 0:
            raise DivisionByZeroError()
        self._inplace(operator.truediv, other)

    def neg_inplace(self) -> None:
        cell = self._ensure_unique()
        with config.engine_context(precision=cell.precision):
            cell.store(-cell.value)

    def abs_inplace(self) -> None:
        cell = self._ensure_unique()
        with config.engine_context(precision=cell.precision):
            cell.store(abs(cell.value))

    def mul_2exp(self, exponent: int) -> "Float":
        if exponent < 0:
            raise InvalidExponentError(exponent)
        return self._binary(gmpy2.mpz(1) << exponent, operator.mul)

    def div_2exp(self, exponent: int) -> "Float":
        if exponent < 0:
            raise InvalidExponentError(exponent)
        return self._binary(gmpy2.mpz(1) << exponent, operator.truediv)

    # -- functions ----------------------------------------------------------

    def sqrt(self) -> "Float":
        if self._value < 0:
            raise NegativeSquareRootError()
        with config.engine_context(precision=self.precision):
            result = gmpy2.sqrt(self._value)
        return self._from_engine(result, self.precision)

    def pow(self, exponent: int) -> "Float":
        exponent = operator.index(exponent)
        if exponent < 0:
            raise InvalidExponentError(exponent)
        with config.engine_context(precision=self.precision):
            result = self._value ** exponent
        return self._from_engine(result, self.precision)

    def floor(self) -> "Float":
        return self._unary(gmpy2.floor)

    def ceil(self) -> "Float":
        return self._unary(gmpy2.ceil)

    def trunc(self) -> "Float":
        return self._unary(gmpy2.trunc)

    def is_integer(self) -> bool:
        return bool(gmpy2.is_integer(self._value))

    def is_zero(self) -> bool:
        return bool(gmpy2.is_zero(self._value))

    @property
    def sign(self) -> int:
        return int(gmpy2.sign(self._value))

    @classmethod
    def relative_difference(cls, a: Any, b: Any) -> "Float":
        """``|a - b| / |a|`` at the larger operand precision."""
        a = a if isinstance(a, Float) else cls(a)
        b = b if isinstance(b, Float) else cls(b)
        if a.is_zero():
            raise DivisionByZeroError("relative difference from zero")
        bits = max(a.precision, b.precision)
        with config.engine_context(precision=bits):
            result = abs(a._value - b._value) / abs(a._value)
        return cls._from_engine(result, bits)

    # -- comparison ---------------------------------------------------------

    def compare(self, other: Any) -> int:
        b = self._engine_or_none(other)
        if b is None:
            raise TypeError(f"cannot compare Float with {type(other).__name__}")
        if gmpy2.is_nan(self._value) or (isinstance(b, (float, _MPFR_TYPE)) and b != b):
            raise ValueError("cannot compare with NaN")
        return int(gmpy2.cmp(self._value, b))

    def _richcmp(self, other: Any, op: Any) -> Any:
        b = self._engine_or_none(other)
        if b is None:
            return NotImplemented
        return op(self._value, b)

    def __eq__(self, other: Any) -> Any:
        return self._richcmp(other, operator.eq)

    def __ne__(self, other: Any) -> Any:
        return self._richcmp(other, operator.ne)

    def __lt__(self, other: Any) -> Any:
        return self._richcmp(other, operator.lt)

    def __le__(self, other: Any) -> Any:
        return self._richcmp(other, operator.le)

    def __gt__(self, other: Any) -> Any:
        return self._richcmp(other, operator.gt)

    def __ge__(self, other: Any) -> Any:
        return self._richcmp(other, operator.ge)

    def __hash__(self) -> int:
        """Hash of the current value, so ``hash(Float(2.5)) == hash(2.5)``.

        In-place methods change it; never mutate a dict key or set member.
        """
        return hash(self._value)

    def __bool__(self) -> bool:
        return not gmpy2.is_zero(self._value)

    # -- conversion ---------------------------------------------------------

    def to_double(self, strict: bool = False) -> float:
        """Double truncated toward zero.

        Out of range gives ``inf`` or ``0.0``; ``strict=True`` raises
        ``NumericOverflowError`` or ``NumericUnderflowError`` instead.
        """
        x = self._value
        if not gmpy2.is_regular(x):
            return float(x)
        exponent = gmpy2.get_exp(x)
        if exponent > _DOUBLE_MAX_EXP:
            if strict:
                raise NumericOverflowError(x, "double")
            return math.copysign(math.inf, x)
        if exponent < _DOUBLE_MIN_EXP:
            if strict:
                raise NumericUnderflowError(x, "double")
            return math.copysign(0.0, x)
        if exponent < _DOUBLE_MIN_NORMAL_EXP:
            numerator, denominator = x.as_integer_ratio()
            units = gmpy2.t_div(numerator << _DOUBLE_SUBNORMAL_SHIFT, denominator)
            return math.ldexp(int(units), -_DOUBLE_SUBNORMAL_SHIFT)
        with config.engine_context(round=gmpy2.RoundToZero):
            truncated = gmpy2.mpfr(x, 53)
        return float(truncated)

    def __float__(self) -> float:
        return self.to_double()

    def to_double_2exp(self) -> tuple[float, int]:
        """``(m, e)`` with ``self ~= m * 2**e`` and ``0.5 <= |m| < 1``."""
        x = self._value
        if gmpy2.is_zero(x):
            return 0.0, 0
        if not gmpy2.is_regular(x):
            raise ValueError(f"{x} has no binary exponent")
        exponent = int(gmpy2.get_exp(x))
        with config.engine_context(precision=self.precision):
            if exponent >= 0:
                mantissa = x / (gmpy2.mpz(1) << exponent)
            else:
                mantissa = x * (gmpy2.mpz(1) << -exponent)
        with config.engine_context(round=gmpy2.RoundToZero):
            return float(gmpy2.mpfr(mantissa, 53)), exponent

    def _truncated(self) -> Optional[Integer]:
        if not gmpy2.is_finite(self._value):
            return None
        return Integer(self)

    def to_int(self) -> int:
        """Value truncated toward zero."""
        truncated = self._truncated()
        if truncated is None:
            raise ValueError(f"cannot convert {self._value} to int")
        return int(truncated)

    def __int__(self) -> int:
        return self.to_int()

    def fits_int(self) -> bool:
        return self._fits("fits_int")

    def fits_uint(self) -> bool:
        return self._fits("fits_uint")

    def fits_int64(self) -> bool:
        return self._fits("fits_int64")

    def fits_uint64(self) -> bool:
        return self._fits("fits_uint64")

    def fits_int32(self) -> bool:
        return self._fits("fits_int32")

    def fits_uint32(self) -> bool:
        return self._fits("fits_uint32")

    def fits_int16(self) -> bool:
        return self._fits("fits_int16")

    def fits_uint16(self) -> bool:
        return self._fits("fits_uint16")

    def _fits(self, predicate: str) -> bool:
        truncated = self._truncated()
        return truncated is not None and getattr(truncated, predicate)()

    # -- text ---------------------------------------------------------------

    def to_string(self, base: int = 10, digits: int = 0) -> str:
        """``[-]0.<digits>e<exp>`` meaning ``0.<digits> * base**exp``.

        Bases above 10 use ``@`` as the exponent marker.  ``digits=0``
        produces enough digits to read the value back exactly.
        """
        if not 2 <= base <= 62:
            raise InvalidRadixError(base)
        if digits < 0:
            raise ValueError(f"digits must be non-negative, got {digits}")
        x = self._value
        if not gmpy2.is_regular(x):
            return "0" if gmpy2.is_zero(x) else str(x)
        mantissa, exponent, _ = gmpy2.digits(x, base, digits)
        negative = mantissa.startswith("-")
        body = _strip_zeros(mantissa.lstrip("-"))
        marker = "e" if base <= 10 else "@"
        return f"{'-' if negative else ''}0.{body}{marker}{exponent}"

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"Float('{self._value}', precision={self.precision})"

    def __format__(self, spec: str) -> str:
        if not spec:
            return str(self)
        return format(self._value, spec)


def _restore(text: str, precision: int) -> Float:
    return Float.from_string(text, 16, precision)

