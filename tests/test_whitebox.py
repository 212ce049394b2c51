"""White-box tests for copy-on-write storage sharing.

Each test class targets the decision branches annotated in ``storage.py``
(COW-OWNED, COW-SHARED, CELL-RELEASE).  A coverage matrix at the bottom of
this file records which test covers which branch.

Naming convention
-----------------
test_<branch_id_lowercase>_<scenario>
"""
from __future__ import annotations

import copy
import logging

import pytest

from bigfloat import Float
from bigint import Integer


# ===================================================================
# COW-OWNED
# ===================================================================

class TestOwnedWrite:

    def test_cow_owned_writes_in_place(self):
        """Branch: COW-OWNED: a sole owner keeps its cell across a write."""
        a = Integer(5)
        cell = a._storage
        a.add_inplace(1)
        assert a._storage is cell
        assert a == 6

    def test_cow_owned_fresh_result_is_unique(self):
        """Branch: COW-OWNED: operator results never share with operands."""
        a = Integer(5)
        b = a + 0
        assert not b.shares_storage_with(a)
        assert a.is_uniquely_referenced
        assert b.is_uniquely_referenced

    def test_cow_owned_after_clone_stays_owned(self):
        """Branch: COW-OWNED: a second write after a clone does not clone again."""
        a = Integer(5)
        b = Integer(a)
        b.add_inplace(1)
        cell = b._storage
        b.add_inplace(1)
        assert b._storage is cell
        assert b == 7


# ===================================================================
# COW-SHARED
# ===================================================================

class TestSharedWrite:

    def test_cow_shared_copy_is_constant_time_share(self):
        """Branch: COW-SHARED precondition: copies share one cell."""
        a = Integer(10**50)
        b = Integer(a)
        c = a.copy()
        d = +a
        for other in (b, c, d):
            assert other.shares_storage_with(a)
        assert a._storage.owners == 4
        assert not a.is_uniquely_referenced

    def test_cow_shared_write_leaves_sibling_unchanged(self):
        """Branch: COW-SHARED: the writer clones; the sibling keeps the value."""
        a = Integer(5)
        b = Integer(a)
        b.add_inplace(1)
        assert a == 5
        assert b == 6
        assert not a.shares_storage_with(b)
        assert a.is_uniquely_referenced
        assert b.is_uniquely_referenced

    def test_cow_shared_every_mutator_clones(self):
        """Branch: COW-SHARED: each mutating method family isolates the writer."""
        mutations = [
            lambda v: v.sub_inplace(3),
            lambda v: v.mul_inplace(3),
            lambda v: v.neg_inplace(),
            lambda v: v.set_bit(40),
            lambda v: v.floor_div_inplace(2),
            lambda v: v.set(99),
            lambda v: v.set_string("77"),
            lambda v: v.reallocate(1),
        ]
        for mutate in mutations:
            original = Integer(12)
            sibling = Integer(original)
            mutate(sibling)
            assert original == 12

    def test_cow_shared_clone_is_logged(self, caplog):
        """Branch: COW-SHARED: the clone is reported at DEBUG."""
        a = Integer(5)
        b = Integer(a)
        with caplog.at_level(logging.DEBUG, logger="mpcow.storage"):
            b.add_inplace(1)
        assert any("copy-on-write" in r.getMessage() for r in caplog.records)

    def test_cow_shared_self_alias_reads_before_write(self):
        """Branch: COW-SHARED: an operand aliasing the receiver is read first."""
        a = Integer(7)
        b = Integer(a)
        b.addmul_inplace(b, b)
        assert b == 7 + 7 * 7
        assert a == 7

    def test_cow_shared_limb_write_isolates(self):
        """Branch: COW-SHARED: raw limb writes clone like any other write."""
        a = Integer(1)
        b = Integer(a)
        with b.writable_limbs(1) as limbs:
            limbs[0] = 42
        assert a == 1
        assert b == 42

    def test_cow_shared_float_write_leaves_sibling_unchanged(self):
        """Branch: COW-SHARED: Float handles follow the same rule."""
        x = Float(1.5)
        y = Float(x)
        assert y.shares_storage_with(x)
        y.add_inplace(1)
        assert x == 1.5
        assert y == 2.5

    def test_cow_shared_swap_clones_before_exchange(self):
        """Branch: COW-SHARED: swap never moves a cell other handles still see."""
        a = Integer(1)
        b = Integer(2)
        c = Integer(a)
        a.swap(b)
        assert (int(a), int(b), int(c)) == (2, 1, 1)


# ===================================================================
# CELL-RELEASE
# ===================================================================

class TestCellRelease:

    def test_cell_release_last_owner(self):
        """Branch: CELL-RELEASE: dropping the only handle frees the cell."""
        a = Integer(5)
        cell = a._storage
        del a
        assert cell.destroyed

    def test_cell_release_waits_for_all_owners(self):
        """Branch: CELL-RELEASE: the cell lives while any handle remains."""
        a = Integer(5)
        b = Integer(a)
        cell = a._storage
        del a
        assert not cell.destroyed
        assert b == 5
        del b
        assert cell.destroyed

    def test_cell_release_on_rebind(self):
        """Branch: CELL-RELEASE: assigning a shared value frees the old cell."""
        a = Integer(5)
        c = Integer(9)
        old = a._storage
        a.set(c)
        assert old.destroyed
        assert a.shares_storage_with(c)
        assert a == 9

    def test_cell_release_destroyed_cell_rejects_access(self):
        """Branch: CELL-RELEASE: a released buffer is never read again."""
        a = Integer(5)
        cell = a._storage
        del a
        with pytest.raises(RuntimeError):
            cell.value


# ===================================================================
# Sharing helpers
# ===================================================================

class TestSharingHelpers:

    def test_set_same_cell_is_noop(self):
        a = Integer(5)
        b = Integer(a)
        a.set(b)
        assert a._storage.owners == 2

    def test_copy_module_shares(self):
        a = Integer(5)
        assert copy.copy(a).shares_storage_with(a)
        assert copy.deepcopy(a).shares_storage_with(a)

    def test_swap_with_self(self):
        a = Integer(5)
        a.swap(a)
        assert a == 5

    def test_swap_type_mismatch(self):
        with pytest.raises(TypeError):
            Integer(1).swap(Float(1))


# ===================================================================
# BRANCH COVERAGE MATRIX
# ===================================================================
# Maps each storage branch-ID to the test(s) that exercise it.

BRANCH_COVERAGE = {
    "COW-OWNED": [
        "TestOwnedWrite::test_cow_owned_writes_in_place",
        "TestOwnedWrite::test_cow_owned_fresh_result_is_unique",
        "TestOwnedWrite::test_cow_owned_after_clone_stays_owned",
    ],
    "COW-SHARED": [
        "TestSharedWrite::test_cow_shared_copy_is_constant_time_share",
        "TestSharedWrite::test_cow_shared_write_leaves_sibling_unchanged",
        "TestSharedWrite::test_cow_shared_every_mutator_clones",
        "TestSharedWrite::test_cow_shared_clone_is_logged",
        "TestSharedWrite::test_cow_shared_self_alias_reads_before_write",
        "TestSharedWrite::test_cow_shared_limb_write_isolates",
        "TestSharedWrite::test_cow_shared_float_write_leaves_sibling_unchanged",
        "TestSharedWrite::test_cow_shared_swap_clones_before_exchange",
    ],
    "CELL-RELEASE": [
        "TestCellRelease::test_cell_release_last_owner",
        "TestCellRelease::test_cell_release_waits_for_all_owners",
        "TestCellRelease::test_cell_release_on_rebind",
        "TestCellRelease::test_cell_release_destroyed_cell_rejects_access",
    ],
}
