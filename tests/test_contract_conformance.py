"""Contract conformance tests.

These tests are driven by ``contracts.build_contracts()``: they iterate
over every postcondition, error condition and algebraic law it defines and
verify ``Integer`` satisfies them.  A new entry in the contract set is
covered here without writing a new test.
"""
from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis.strategies import integers

from bigint import Integer
from contracts import Rounding, build_contracts, reference_divmod

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

CONTRACTS = build_contracts()
SMALL = range(-12, 13)
wide = integers(min_value=-(2**200), max_value=2**200)

DIVISION_OPS = {f"{r.name.lower()}_divmod": r for r in Rounding}


def _run(op_name: str, a: int, b: int) -> tuple[int, ...]:
    if op_name == "modulo":
        return (int(Integer(a).modulo(b)),)
    q, r = Integer(a).quotient_and_remainder(b, DIVISION_OPS[op_name])
    return int(q), int(r)


CHECKED_OPS = [
    name for name, op in CONTRACTS.operations.items()
    if op.postconditions or op.error_conditions
]


# ===================================================================
# POSTCONDITIONS
# ===================================================================

class TestPostconditions:

    @pytest.mark.parametrize("op_name", CHECKED_OPS)
    def test_exhaustive_small(self, op_name):
        op = CONTRACTS.operations[op_name]
        for a in SMALL:
            for b in SMALL:
                if any(ec.trigger(a, b) for ec in op.error_conditions):
                    continue
                result = _run(op_name, a, b)
                for post in op.postconditions:
                    assert post.check(a, b, *result), (
                        f"Postcondition '{post.name}' failed: "
                        f"{op_name}({a}, {b}) = {result}"
                    )

    @given(a=wide, b=wide)
    @settings(max_examples=300)
    def test_random_wide(self, a, b):
        for op_name in CHECKED_OPS:
            op = CONTRACTS.operations[op_name]
            if any(ec.trigger(a, b) for ec in op.error_conditions):
                continue
            result = _run(op_name, a, b)
            for post in op.postconditions:
                assert post.check(a, b, *result), (
                    f"Postcondition '{post.name}' failed: "
                    f"{op_name}({a}, {b}) = {result}"
                )


# ===================================================================
# ERROR CONDITIONS
# ===================================================================

class TestErrorConditions:

    @pytest.mark.parametrize("op_name", CHECKED_OPS)
    def test_error_conditions_raise(self, op_name):
        op = CONTRACTS.operations[op_name]
        for a in SMALL:
            for b in SMALL:
                for ec in op.error_conditions:
                    if ec.trigger(a, b):
                        with pytest.raises(ec.exception):
                            _run(op_name, a, b)


# ===================================================================
# ALGEBRAIC LAWS
# ===================================================================

LAWS = CONTRACTS.all_laws


class TestLaws:

    @pytest.mark.parametrize(
        "op_name, law", LAWS, ids=[f"{name}-{law.name}" for name, law in LAWS]
    )
    def test_law_small(self, op_name, law):
        if law.arity == 2:
            inputs = [(a, b) for a in SMALL for b in SMALL]
        else:
            inputs = [(a,) for a in SMALL]
        for args in inputs:
            assert law.check(Integer, *args), (
                f"Law '{law.name}' of {op_name} failed for {args}"
            )

    @given(a=wide, b=wide)
    @settings(max_examples=100)
    def test_laws_wide(self, a, b):
        for op_name, law in LAWS:
            args = (a, b) if law.arity == 2 else (a,)
            assert law.check(Integer, *args), (
                f"Law '{law.name}' of {op_name} failed for {args}"
            )


# ===================================================================
# CONTRACT SHAPE
# ===================================================================

class TestContractShape:

    def test_every_rounding_has_a_contract(self):
        for rounding in Rounding:
            assert f"{rounding.name.lower()}_divmod" in CONTRACTS.operations

    def test_reference_examples(self):
        assert reference_divmod(17, 5, Rounding.TRUNCATE) == (3, 2)
        assert reference_divmod(-17, 5, Rounding.FLOOR) == (-4, 3)
        assert reference_divmod(-17, 5, Rounding.CEILING) == (-3, -2)

    def test_postcondition_listing(self):
        names = {name for name, _ in CONTRACTS.all_postconditions}
        assert names == {"floor_divmod", "ceiling_divmod", "truncate_divmod", "modulo"}
