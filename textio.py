"""Radix text conversion and line-oriented stream I/O for ``Integer``.

Output bases are 2..62 (digits ``0-9``, ``a-z``, then ``A-Z`` above 36) or
-36..-2 for upper-case letters.  Input base 0 detects ``0x``, ``0b``,
``0o`` and a leading ``0`` (octal); anything else is decimal.  Whitespace
anywhere in the input is ignored.  The text format has an optional leading
``-`` and never a ``+``.
"""

from __future__ import annotations

import string
from typing import Any, Optional, TextIO

import gmpy2

from numerrors import InvalidRadixError

_DIGITS_36 = string.digits + string.ascii_lowercase
_DIGITS_62 = string.digits + string.ascii_uppercase + string.ascii_lowercase

_PREFIXES = (("0x", 16), ("0b", 2), ("0o", 8))


def check_output_base(base: int) -> int:
    if not (2 <= base <= 62 or -36 <= base <= -2):
        raise InvalidRadixError(base)
    return base


def check_input_base(base: int) -> int:
    if not (base == 0 or 2 <= base <= 62):
        raise InvalidRadixError(base)
    return base


def _alphabet(base: int) -> str:
    # Up to base 36 letters are case-insensitive.
    if base <= 36:
        allowed = _DIGITS_36[:base]
        return allowed + allowed.upper()
    return _DIGITS_62[:base]


def _detect_base(digits: str) -> tuple[str, int]:
    lowered = digits[:2].lower()
    for prefix, base in _PREFIXES:
        if lowered == prefix:
            return digits[2:], base
    if len(digits) > 1 and digits[0] == "0":
        return digits[1:], 8
    return digits, 10


def parse_integer(text: str, base: int = 10) -> Optional[Any]:
    """Engine integer for ``text`` in ``base``, or None if malformed.

    Raises ``InvalidRadixError`` for an unsupported base.
    """
    check_input_base(base)
    compact = "".join(text.split())
    negative = compact.startswith("-")
    digits = compact[1:] if negative else compact
    if base == 0:
        digits, base = _detect_base(digits)
    if not digits:
        return None
    alphabet = _alphabet(base)
    if any(ch not in alphabet for ch in digits):
        return None
    value = gmpy2.mpz(digits, base)
    return -value if negative else value


def format_integer(value: Any, base: int = 10) -> str:
    check_output_base(base)
    magnitude = gmpy2.digits(abs(gmpy2.mpz(value)), abs(base))
    if magnitude[:2] in ("0b", "0o", "0x"):
        magnitude = magnitude[2:]
    if base < 0:
        magnitude = magnitude.upper()
    return "-" + magnitude if value < 0 else magnitude


class TextMixin:
    __slots__ = ()

    @classmethod
    def from_string(cls, text: str, base: int = 10) -> Optional[Any]:
        """Parse ``text``; None on malformed input."""
        value = parse_integer(text, base)
        if value is None:
            return None
        return cls._from_engine(value)

    def to_string(self, base: int = 10) -> str:
        return format_integer(self._value, base)

    def size_in_base(self, base: int) -> int:
        """Digits needed in ``base`` (2..62), sign excluded.

        May exceed the exact count by one, as the engine does.
        """
        if not 2 <= base <= 62:
            raise InvalidRadixError(base)
        return int(gmpy2.num_digits(self._value, base))

    def __str__(self) -> str:
        return self.to_string(10)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_string(10)})"

    def __format__(self, spec: str) -> str:
        if not spec:
            return str(self)
        return format(gmpy2.mpz(self._value), spec)

    # -- streams ------------------------------------------------------------

    def write_line(self, stream: TextIO, base: int = 10) -> int:
        """Write the digits and a newline; return the characters written."""
        line = self.to_string(base) + "\n"
        stream.write(line)
        return len(line)

    @classmethod
    def read_line(cls, stream: TextIO, base: int = 10) -> Optional[Any]:
        """Parse one line from ``stream``; None at end of stream or if malformed."""
        line = stream.readline()
        if not line:
            return None
        return cls.from_string(line, base)
