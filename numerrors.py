"""Recoverable error conditions raised by the numeric value types.

Every error is a ``NumericError`` and also subclasses the closest built-in
exception, so callers may catch either ``DivisionByZeroError`` or plain
``ZeroDivisionError``.  Programmer errors (negative shift counts, negative
bit indices, bad export parameters) are not part of this taxonomy; they
raise ``ValueError`` directly.
"""

from __future__ import annotations


class NumericError(Exception):
    """Base class for every recoverable numeric failure."""


class DivisionByZeroError(NumericError, ZeroDivisionError):
    """Raised for a zero divisor or modulus, or a missing modular inverse."""

    def __init__(self, message: str = "division by zero") -> None:
        super().__init__(message)


class InvalidStringFormatError(NumericError, ValueError):
    """Raised when a string is not a valid number in the requested base."""

    def __init__(self, text: str, base: int) -> None:
        self.text = text
        self.base = base
        super().__init__(f"invalid number {text!r} in base {base}")


class InvalidRadixError(NumericError, ValueError):
    """Raised for a radix outside the supported range."""

    def __init__(self, radix: int) -> None:
        self.radix = radix
        super().__init__(f"invalid radix: {radix}")


class InvalidExponentError(NumericError, ValueError):
    """Raised when a non-negative exponent was required."""

    def __init__(self, exponent: int) -> None:
        self.exponent = exponent
        super().__init__(f"invalid exponent: {exponent}")


class InvalidPrecisionError(NumericError, ValueError):
    """Raised for a floating-point precision below one bit."""

    def __init__(self, precision: int) -> None:
        self.precision = precision
        super().__init__(f"invalid precision: {precision}")


class NegativeSquareRootError(NumericError, ValueError):
    def __init__(self, message: str = "square root of a negative value") -> None:
        super().__init__(message)


class InvalidRandomStateError(NumericError, ValueError):
    """Raised when a random state cannot be built or used as requested."""


class NumericOverflowError(NumericError, OverflowError):
    """Raised by strict conversions when a value does not fit."""

    def __init__(self, value: object, target: str) -> None:
        self.value = value
        self.target = target
        super().__init__(f"{value} does not fit in {target}")


class NumericUnderflowError(NumericError, ArithmeticError):
    """Raised when a result is too small to represent in the target type."""

    def __init__(self, value: object, target: str) -> None:
        self.value = value
        self.target = target
        super().__init__(f"{value} underflows {target}")
