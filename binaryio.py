"""Signed binary export/import and raw stream I/O for ``Integer``.

Export layout::

    [sign byte: 0 non-negative, 1 negative][magnitude words]

Words follow the ``ExportFormat`` (word order, word size, per-word
endianness, nail bits).  Zero exports as the single byte ``b"\\x00"``.

The raw stream layout is self-delimiting: a 4-byte big-endian signed byte
count (negative for a negative value) followed by the magnitude in
big-endian bytes.
"""

from __future__ import annotations

import struct
from typing import Any, BinaryIO, Optional

import gmpy2

from formats import RAW_FORMAT, ExportFormat

_SIGN_POSITIVE = 0
_SIGN_NEGATIVE = 1

_RAW_HEADER = struct.Struct(">i")

DEFAULT_FORMAT = ExportFormat()


def _split_words(magnitude: int, fmt: ExportFormat) -> list[bytes]:
    """Magnitude as words, least significant first."""
    size = fmt.size
    if fmt.nails == 0:
        count = -(-magnitude.bit_length() // (size * 8))
        blob = magnitude.to_bytes(count * size, "little")
        words = [blob[i * size:(i + 1) * size] for i in range(count)]
        if fmt.byteorder == "big":
            words = [w[::-1] for w in words]
        return words
    numb = fmt.numb_bits
    mask = (1 << numb) - 1
    words = []
    while magnitude:
        words.append((magnitude & mask).to_bytes(size, fmt.byteorder))
        magnitude >>= numb
    return words


def _join_words(words: list[bytes], fmt: ExportFormat) -> int:
    """Inverse of ``_split_words``; nail bits are ignored."""
    if fmt.nails == 0:
        if fmt.byteorder == "big":
            words = [w[::-1] for w in words]
        return int.from_bytes(b"".join(words), "little")
    numb = fmt.numb_bits
    mask = (1 << numb) - 1
    value = 0
    for word in reversed(words):
        value = (value << numb) | (int.from_bytes(word, fmt.byteorder) & mask)
    return value


def export_integer(value: Any, fmt: ExportFormat = DEFAULT_FORMAT) -> bytes:
    sign = _SIGN_NEGATIVE if value < 0 else _SIGN_POSITIVE
    words = _split_words(int(abs(value)), fmt)
    if not fmt.least_significant_first:
        words.reverse()
    return bytes([sign]) + b"".join(words)


def import_integer(data: bytes, fmt: ExportFormat = DEFAULT_FORMAT) -> Optional[int]:
    """Engine-independent import; None for data no export could produce."""
    if not data:
        return None
    sign = data[0]
    if sign not in (_SIGN_POSITIVE, _SIGN_NEGATIVE):
        return None
    if len(data) == 1:
        # A lone negative sign byte would be negative zero.
        return None if sign == _SIGN_NEGATIVE else 0
    size = fmt.size
    count = (len(data) - 1) // size
    if count == 0:
        return None
    body = data[1:1 + count * size]
    words = [body[i * size:(i + 1) * size] for i in range(count)]
    if not fmt.least_significant_first:
        words.reverse()
    magnitude = _join_words(words, fmt)
    return -magnitude if sign == _SIGN_NEGATIVE else magnitude


class BinaryMixin:
    __slots__ = ()

    def to_bytes(self, fmt: ExportFormat = DEFAULT_FORMAT) -> bytes:
        return export_integer(self._value, fmt)

    @classmethod
    def from_bytes(cls, data: bytes, fmt: ExportFormat = DEFAULT_FORMAT) -> Optional[Any]:
        """Import ``data`` written by ``to_bytes`` with the same ``fmt``.

        None for empty data, an unknown sign byte, negative zero, or less
        than one whole word.  Bytes past the last whole word are ignored.
        """
        value = import_integer(bytes(data), fmt)
        if value is None:
            return None
        return cls._from_engine(value)

    # -- raw streams --------------------------------------------------------

    def write_raw(self, stream: BinaryIO) -> int:
        """Write the raw layout to ``stream``; return the bytes written."""
        v = gmpy2.mpz(self._value)
        body = export_integer(abs(v), RAW_FORMAT)[1:]
        header = _RAW_HEADER.pack(-len(body) if v < 0 else len(body))
        stream.write(header + body)
        return len(header) + len(body)

    @classmethod
    def read_raw(cls, stream: BinaryIO) -> Optional[Any]:
        """Read one value in the raw layout; None at end of stream or if truncated."""
        header = stream.read(_RAW_HEADER.size)
        if len(header) < _RAW_HEADER.size:
            return None
        (count,) = _RAW_HEADER.unpack(header)
        body = stream.read(abs(count))
        if len(body) < abs(count):
            return None
        magnitude = import_integer(bytes([_SIGN_POSITIVE]) + body, RAW_FORMAT)
        return cls._from_engine(-magnitude if count < 0 else magnitude)
