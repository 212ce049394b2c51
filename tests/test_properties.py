"""Property-based tests using Hypothesis.

These tests check Integer against Python's own ``int`` over a wide range of
magnitudes, including multi-limb values.  They complement the white-box
tests by exploring the input space broadly rather than targeting specific
branches.
"""
from __future__ import annotations

import io

from hypothesis import assume, given, settings
from hypothesis.strategies import integers, sampled_from

from bigint import Integer
from contracts import ROUNDING_RULES, Rounding
from formats import Endianness, ExportFormat, WordOrder

# ---------------------------------------------------------------------------
# Shared strategies
# ---------------------------------------------------------------------------

wide = integers(min_value=-(2**300), max_value=2**300)
small_non_negative = integers(min_value=0, max_value=600)
output_bases = sampled_from([2, 3, 8, 10, 16, 36, 37, 62, -16, -36])
formats = sampled_from([
    ExportFormat(),
    ExportFormat(order=WordOrder.MOST_SIGNIFICANT_FIRST, size=1),
    ExportFormat(order=WordOrder.LEAST_SIGNIFICANT_FIRST, size=3, endian=Endianness.BIG),
    ExportFormat(order=WordOrder.MOST_SIGNIFICANT_FIRST, size=4, nails=5),
])


# ===================================================================
# ARITHMETIC
# ===================================================================

class TestArithmeticProperties:

    @given(a=wide, b=wide)
    def test_matches_int(self, a, b):
        assert Integer(a) + b == a + b
        assert Integer(a) - b == a - b
        assert Integer(a) * b == a * b

    @given(a=wide, b=wide)
    def test_commutativity(self, a, b):
        assert Integer(a) + Integer(b) == Integer(b) + Integer(a)
        assert Integer(a) * Integer(b) == Integer(b) * Integer(a)

    @given(a=wide, b=wide, c=wide)
    @settings(max_examples=200)
    def test_addmul(self, a, b, c):
        value = Integer(a)
        value.addmul_inplace(b, c)
        assert value == a + b * c


# ===================================================================
# DIVISION
# ===================================================================

class TestDivisionProperties:

    @given(a=wide, b=wide, rounding=sampled_from(list(Rounding)))
    @settings(max_examples=300)
    def test_rounding_rule(self, a, b, rounding):
        assume(b != 0)
        q, r = Integer(a).quotient_and_remainder(b, rounding)
        assert ROUNDING_RULES[rounding].holds(a, b, int(q), int(r))

    @given(a=wide, b=wide)
    def test_floor_operators_match_int(self, a, b):
        assume(b != 0)
        assert Integer(a) // b == a // b
        assert Integer(a) % b == a % b

    @given(a=wide, e=small_non_negative)
    def test_2exp_forms_match_shifts(self, a, e):
        assert Integer(a).floor_div_2exp(e) == a >> e
        assert Integer(a).floor_rem_2exp(e) == a & ((1 << e) - 1)


# ===================================================================
# BITS
# ===================================================================

class TestBitProperties:

    @given(a=wide, b=wide)
    def test_logic_matches_int(self, a, b):
        assert Integer(a) & b == a & b
        assert Integer(a) | b == a | b
        assert Integer(a) ^ b == a ^ b
        assert ~Integer(a) == ~a

    @given(a=wide, n=small_non_negative)
    def test_shifts_match_int(self, a, n):
        assert Integer(a) << n == a << n
        assert Integer(a) >> n == a >> n

    @given(a=wide, n=small_non_negative)
    def test_test_bit_matches_int(self, a, n):
        assert Integer(a).test_bit(n) == bool((a >> n) & 1)

    @given(a=integers(min_value=0, max_value=2**300))
    def test_popcount_matches_int(self, a):
        assert Integer(a).popcount() == bin(a).count("1")


# ===================================================================
# TEXT AND BINARY
# ===================================================================

class TestConversionProperties:

    @given(a=wide, base=output_bases)
    def test_text_round_trip(self, a, base):
        text = Integer(a).to_string(base)
        assert Integer.from_string(text, abs(base)) == a

    @given(a=wide)
    def test_decimal_matches_int(self, a):
        assert str(Integer(a)) == str(a)
        assert Integer(a).to_string(16) == format(a, "x")

    @given(a=wide, fmt=formats)
    def test_binary_round_trip(self, a, fmt):
        assert Integer.from_bytes(Integer(a).to_bytes(fmt), fmt) == a

    @given(a=wide)
    def test_raw_round_trip(self, a):
        stream = io.BytesIO()
        Integer(a).write_raw(stream)
        stream.seek(0)
        assert Integer.read_raw(stream) == a


# ===================================================================
# COPY-ON-WRITE
# ===================================================================

class TestSharingProperties:

    @given(a=wide, b=wide)
    def test_write_never_reaches_sibling(self, a, b):
        original = Integer(a)
        sibling = Integer(original)
        sibling.add_inplace(b)
        assert original == a
        assert sibling == a + b

    @given(a=wide, b=wide)
    def test_swap_exchanges_values(self, a, b):
        x, y = Integer(a), Integer(b)
        x.swap(y)
        assert (x, y) == (b, a)
