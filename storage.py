"""Storage cells and copy-on-write handles.

A storage cell owns exactly one engine buffer.  Value handles (``Integer``,
``Float``) point at a cell and may share it with other handles until one of
them writes.  Before writing, a handle calls ``_ensure_unique()``; decision
branches are annotated with their ids so white-box tests can trace them:

    COW-OWNED     the cell has one owner, write in place (O(1))
    COW-SHARED    the cell has other owners, clone it first (O(n))
    CELL-RELEASE  the last owner detached, the buffer is released

Ownership is counted explicitly rather than inferred from interpreter
reference counts.  There is no locking: a handle shared across threads must
be guarded by the caller, with the uniqueness check and the following write
treated as one critical section.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar

import gmpy2

_logger = logging.getLogger("mpcow.storage")


# ---------------------------------------------------------------------------
# Cells
# ---------------------------------------------------------------------------

class _Cell:
    """Owner bookkeeping shared by the integer and float cells."""

    __slots__ = ("_value", "owners")

    def __init__(self) -> None:
        self._value: Any = None
        self.owners = 0

    @property
    def value(self) -> Any:
        if self._value is None:
            raise RuntimeError(f"{type(self).__name__} used after destroy()")
        return self._value

    @property
    def destroyed(self) -> bool:
        return self._value is None

    def attach(self) -> None:
        self.owners += 1

    def detach(self) -> None:
        self.owners -= 1
        if self.owners <= 0:                                    # CELL-RELEASE
            self.destroy()

    def destroy(self) -> None:
        """Release the engine buffer.  The cell is unusable afterwards."""
        self._value = None


class IntegerStorage(_Cell):
    """One engine integer.

    The cell holds an immutable ``gmpy2.mpz``; a write replaces it, so every
    handle on the cell observes the write.  Raw limb access goes through a
    temporary ``gmpy2.xmpz`` (see ``limbs.py``).
    """

    __slots__ = ("capacity_bits",)

    def __init__(self, value: Any = 0) -> None:
        super().__init__()
        self._value = gmpy2.mpz(value)
        self.capacity_bits = 0

    @classmethod
    def copying(cls, other: "IntegerStorage") -> "IntegerStorage":
        """Deep copy: later writes to either cell never reach the other."""
        cell = cls(other.value)
        cell.capacity_bits = other.capacity_bits
        return cell

    @classmethod
    def preallocated(cls, bits: int) -> "IntegerStorage":
        """A zero cell sized for at least ``bits`` bits.

        The engine grows buffers on demand, so the size is kept as a hint.
        """
        if bits < 0:
            raise ValueError(f"bits must be non-negative, got {bits}")
        cell = cls()
        cell.capacity_bits = bits
        return cell

    def store(self, result: Any) -> None:
        """Move a freshly computed result into this cell."""
        self.value  # raises if destroyed
        self._value = gmpy2.mpz(result)

    def reallocate(self, bits: int) -> None:
        """Resize to ``bits`` bits, zeroing a value that no longer fits."""
        if bits < 0:
            raise ValueError(f"bits must be non-negative, got {bits}")
        if gmpy2.bit_length(self.value) > bits:
            _logger.debug("reallocate(%d) drops a %d-bit value",
                          bits, gmpy2.bit_length(self.value))
            self._value = gmpy2.mpz(0)
        self.capacity_bits = bits


class FloatStorage(_Cell):
    """One engine float (``gmpy2.mpfr``) with a fixed precision in bits."""

    __slots__ = ("precision",)

    def __init__(self, value: Any = 0, precision: int = 53) -> None:
        super().__init__()
        self.precision = precision
        self._value = gmpy2.mpfr(value, precision)

    @classmethod
    def copying(cls, other: "FloatStorage") -> "FloatStorage":
        return cls(other.value, other.precision)

    def store(self, result: Any) -> None:
        """Round ``result`` to this cell's precision and keep it."""
        self.value
        self._value = gmpy2.mpfr(result, self.precision)

    def set_precision(self, precision: int) -> None:
        self._value = gmpy2.mpfr(self.value, precision)
        self.precision = precision


# ---------------------------------------------------------------------------
# Copy-on-write handle
# ---------------------------------------------------------------------------

class CowHandle:
    """Base for value types whose handles share a cell until written."""

    __slots__ = ("_storage", "__weakref__")

    _storage_type: ClassVar[type] = IntegerStorage

    def _bind(self, storage: _Cell) -> None:
        storage.attach()
        self._storage = storage

    def _rebind(self, storage: _Cell) -> None:
        old = self._storage
        storage.attach()
        self._storage = storage
        old.detach()

    def _ensure_unique(self) -> Any:
        """Make this handle the only owner of its cell and return the cell.

        Branches: COW-OWNED, COW-SHARED
        """
        storage = self._storage
        if storage.owners > 1:                                  # COW-SHARED
            _logger.debug("copy-on-write: cloning %s shared by %d handles",
                          type(storage).__name__, storage.owners)
            self._rebind(self._storage_type.copying(storage))
        return self._storage                                    # COW-OWNED

    def _share(self) -> "CowHandle":
        """A new handle on the same cell."""
        clone = object.__new__(type(self))
        clone._bind(self._storage)
        return clone

    @property
    def is_uniquely_referenced(self) -> bool:
        return self._storage.owners == 1

    def shares_storage_with(self, other: "CowHandle") -> bool:
        return self._storage is other._storage

    def swap(self, other: "CowHandle") -> None:
        """Exchange values with ``other`` in O(1), without copying digits."""
        if other is self:
            return
        if type(other) is not type(self):
            raise TypeError(
                f"cannot swap {type(self).__name__} with {type(other).__name__}"
            )
        self._ensure_unique()
        other._ensure_unique()
        self._storage, other._storage = other._storage, self._storage

    def copy(self) -> "CowHandle":
        return self._share()

    def __copy__(self) -> "CowHandle":
        return self._share()

    def __deepcopy__(self, memo: dict) -> "CowHandle":
        return self._share()

    def __del__(self) -> None:
        storage = getattr(self, "_storage", None)
        if storage is not None:
            storage.detach()
