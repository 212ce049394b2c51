"""Raw limb access for ``Integer``.

This is an escape hatch for interop with code that wants the engine's word
array.  Limbs hold the magnitude, least significant first; the sign is kept
separately.

Writing goes through ``writable_limbs()``, a context manager yielding a
``LimbWriter``.  The writer's pointer is valid only inside the ``with``
block, and ``finish()`` must run before the value is used again.  Leaving
the block without calling it finishes with the normalized limb count.
"""

from __future__ import annotations

import ctypes
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import gmpy2

LIMB_BITS = gmpy2.mp_limbsize()
LIMB_BYTES = LIMB_BITS // 8
LIMB_MAX = (1 << LIMB_BITS) - 1

_LIMB_CTYPE = ctypes.c_uint64 if LIMB_BITS == 64 else ctypes.c_uint32
_LIMB_CODE = "Q" if LIMB_BITS == 64 else "I"


class LimbWriter:
    """Writable window onto the limbs of one cell."""

    def __init__(self, cell: Any, count: int, keep: bool) -> None:
        self._cell = cell
        self._buffer = gmpy2.xmpz(cell.value)
        if keep:
            used = -(-gmpy2.bit_length(cell.value) // LIMB_BITS)
            address = self._buffer.limbs_modify(count)
            if count > used:
                # Limbs past the old size are uninitialized.
                ctypes.memset(address + used * LIMB_BYTES, 0,
                              (count - used) * LIMB_BYTES)
        else:
            address = self._buffer.limbs_write(count)
            ctypes.memset(address, 0, count * LIMB_BYTES)
        self._limbs: Optional[ctypes.Array] = (_LIMB_CTYPE * count).from_address(address)
        self.count = count
        self.finished = False

    def _open(self) -> ctypes.Array:
        if self._limbs is None:
            raise RuntimeError("limb writer already finished")
        return self._limbs

    def __len__(self) -> int:
        return self.count

    def __getitem__(self, index: int) -> int:
        return self._open()[index]

    def __setitem__(self, index: int, limb: int) -> None:
        if not 0 <= limb <= LIMB_MAX:
            raise ValueError(f"limb out of range: {limb}")
        self._open()[index] = limb

    def normalized_size(self) -> int:
        limbs = self._open()
        n = self.count
        while n and limbs[n - 1] == 0:
            n -= 1
        return n

    def finish(self, size: Optional[int] = None) -> None:
        """Resynchronize the value from the first ``|size|`` limbs.

        A negative ``size`` makes the value negative.
        """
        if size is None:
            size = self.normalized_size()
        self._open()
        if abs(size) > self.count:
            raise ValueError(f"size {size} exceeds the {self.count} written limbs")
        self._buffer.limbs_finish(size)
        self._limbs = None
        self._cell.store(self._buffer)
        self.finished = True


class LimbsMixin:
    __slots__ = ()

    @property
    def limb_count(self) -> int:
        """Limbs in the magnitude; 0 for zero."""
        return -(-self.bit_length() // LIMB_BITS)

    def limb(self, index: int) -> int:
        """Limb ``index`` of the magnitude; 0 past the end."""
        if index < 0:
            raise ValueError(f"negative limb index: {index}")
        shifted = gmpy2.f_div_2exp(abs(self._value), index * LIMB_BITS)
        return int(gmpy2.f_mod_2exp(shifted, LIMB_BITS))

    def read_limbs(self) -> memoryview:
        """Read-only snapshot of the limbs."""
        buffer = gmpy2.xmpz(self._value)
        count = self.limb_count
        if count == 0:
            return memoryview(b"").cast(_LIMB_CODE)
        raw = ctypes.string_at(buffer.limbs_read(), count * LIMB_BYTES)
        return memoryview(raw).cast(_LIMB_CODE)

    @contextmanager
    def writable_limbs(self, count: int, keep: bool = False) -> Iterator[LimbWriter]:
        """Write ``count`` limbs in place.

        ``keep=False`` starts from zeroed limbs; ``keep=True`` starts from
        the current magnitude.
        """
        if count < 1:
            raise ValueError(f"count must be positive, got {count}")
        writer = LimbWriter(self._ensure_unique(), count, keep)
        try:
            yield writer
        finally:
            if not writer.finished:
                writer.finish()
