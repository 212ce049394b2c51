"""Machine-readable contracts for the integer value type.

Each operation family is described by data, not code paths:
- rounding rules: which way a quotient rounds and what sign a remainder takes
- postconditions: what must hold between inputs and outputs
- error conditions: which inputs must raise, and what
- algebraic laws: relationships that hold for every input

The division mixin dispatches on ``Rounding``.  The conformance tests and
``validation/counterexample_search.py`` iterate over ``build_contracts()``.

Layers
------
Rounding          the three division rounding conventions
RoundingRule      quotient direction and remainder sign of one convention
OperationContract per-operation contract (post/error/laws)
NumericContract   the full set, built by ``build_contracts()``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from math import gcd
from typing import Any, Callable


# ---------------------------------------------------------------------------
# Rounding conventions
# ---------------------------------------------------------------------------

class Rounding(Enum):
    FLOOR = auto()      # quotient toward -inf
    CEILING = auto()    # quotient toward +inf
    TRUNCATE = auto()   # quotient toward 0


def _sign(v: int) -> int:
    return (v > 0) - (v < 0)


@dataclass(frozen=True)
class RoundingRule:
    """What a quotient/remainder pair must look like under one convention."""

    rounding: Rounding
    quotient_direction: str
    remainder_sign: Callable[[int, int], int]   # (dividend, divisor) -> sign

    def holds(self, dividend: int, divisor: int, q: int, r: int) -> bool:
        if q * divisor + r != dividend:
            return False
        if abs(r) >= abs(divisor):
            return False
        return r == 0 or _sign(r) == self.remainder_sign(dividend, divisor)


ROUNDING_RULES: dict[Rounding, RoundingRule] = {
    Rounding.FLOOR: RoundingRule(
        Rounding.FLOOR, "toward -inf", lambda n, d: _sign(d),
    ),
    Rounding.CEILING: RoundingRule(
        Rounding.CEILING, "toward +inf", lambda n, d: -_sign(d),
    ),
    Rounding.TRUNCATE: RoundingRule(
        Rounding.TRUNCATE, "toward 0", lambda n, d: _sign(n),
    ),
}


def reference_divmod(n: int, d: int, rounding: Rounding) -> tuple[int, int]:
    """Plain-int reference quotient and remainder for ``rounding``."""
    if rounding is Rounding.FLOOR:
        return divmod(n, d)
    if rounding is Rounding.CEILING:
        q = -((-n) // d)
        return q, n - q * d
    q, r = divmod(n, d)
    # divmod rounds toward -inf; step back toward zero when signs differ.
    if r != 0 and (n < 0) != (d < 0):
        q += 1
    return q, n - q * d


# ---------------------------------------------------------------------------
# Contract building blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Postcondition:
    name: str
    description: str
    check: Callable[..., bool]


@dataclass(frozen=True)
class ErrorCondition:
    name: str
    description: str
    trigger: Callable[..., bool]
    exception: type


@dataclass(frozen=True)
class AlgebraicLaw:
    name: str
    description: str
    arity: int          # how many free integer inputs the check needs
    check: Callable[..., bool]


@dataclass(frozen=True)
class OperationContract:
    name: str
    postconditions: list[Postcondition] = field(default_factory=list)
    error_conditions: list[ErrorCondition] = field(default_factory=list)
    laws: list[AlgebraicLaw] = field(default_factory=list)


@dataclass(frozen=True)
class NumericContract:
    """Complete contract for the integer value type."""

    operations: dict[str, OperationContract]

    @property
    def all_laws(self) -> list[tuple[str, AlgebraicLaw]]:
        out: list[tuple[str, AlgebraicLaw]] = []
        for name, op in self.operations.items():
            for law in op.laws:
                out.append((name, law))
        return out

    @property
    def all_postconditions(self) -> list[tuple[str, Postcondition]]:
        out: list[tuple[str, Postcondition]] = []
        for name, op in self.operations.items():
            for post in op.postconditions:
                out.append((name, post))
        return out


# ---------------------------------------------------------------------------
# Contract builder
# ---------------------------------------------------------------------------

def _division_contract(rounding: Rounding) -> OperationContract:
    rule = ROUNDING_RULES[rounding]
    label = rounding.name.lower()

    def _qr(cls: Any, a: int, b: int) -> tuple[int, int]:
        q, r = cls(a).quotient_and_remainder(b, rounding)
        return int(q), int(r)

    return OperationContract(
        name=f"{label}_divmod",
        postconditions=[
            Postcondition(
                "identity",
                "dividend == q * divisor + r",
                lambda a, b, q, r: q * b + r == a,
            ),
            Postcondition(
                "remainder_sign",
                f"remainder follows the {label} sign rule",
                lambda a, b, q, r: rule.holds(a, b, q, r),
            ),
            Postcondition(
                "reference",
                f"matches the plain-int {label} reference",
                lambda a, b, q, r: (q, r) == reference_divmod(a, b, rounding),
            ),
        ],
        error_conditions=[
            ErrorCondition(
                "division_by_zero",
                "zero divisor raises ZeroDivisionError",
                lambda a, b: b == 0,
                ZeroDivisionError,
            ),
        ],
        laws=[
            AlgebraicLaw(
                "unit_divisor", "x / 1 == x with zero remainder", 1,
                lambda cls, a: _qr(cls, a, 1) == (a, 0),
            ),
            AlgebraicLaw(
                "self_division", "x / x == 1 for x != 0", 1,
                lambda cls, a: a == 0 or _qr(cls, a, a) == (1, 0),
            ),
        ],
    )


def build_contracts() -> NumericContract:
    """Construct the contract set for ``Integer``."""

    operations: dict[str, OperationContract] = {}
    for rounding in Rounding:
        contract = _division_contract(rounding)
        operations[contract.name] = contract

    operations["modulo"] = OperationContract(
        name="modulo",
        postconditions=[
            Postcondition(
                "non_negative",
                "0 <= result < |m|",
                lambda a, m, result: 0 <= result < abs(m),
            ),
            Postcondition(
                "congruent",
                "result == a (mod m)",
                lambda a, m, result: (a - result) % m == 0,
            ),
        ],
        error_conditions=[
            ErrorCondition(
                "division_by_zero", "zero modulus raises",
                lambda a, m: m == 0, ZeroDivisionError,
            ),
        ],
    )

    operations["add"] = OperationContract(
        name="add",
        laws=[
            AlgebraicLaw(
                "commutativity", "a + b == b + a", 2,
                lambda cls, a, b: cls(a) + cls(b) == cls(b) + cls(a),
            ),
            AlgebraicLaw(
                "self_alias", "a.add_inplace(a) doubles a", 1,
                lambda cls, a: _inplace_self(cls, a, "add_inplace") == 2 * a,
            ),
        ],
    )

    operations["sub"] = OperationContract(
        name="sub",
        laws=[
            AlgebraicLaw(
                "self_alias", "a.sub_inplace(a) is zero", 1,
                lambda cls, a: _inplace_self(cls, a, "sub_inplace") == 0,
            ),
        ],
    )

    operations["mul"] = OperationContract(
        name="mul",
        laws=[
            AlgebraicLaw(
                "self_alias", "a.mul_inplace(a) squares a", 1,
                lambda cls, a: _inplace_self(cls, a, "mul_inplace") == a * a,
            ),
        ],
    )

    operations["invert"] = OperationContract(
        name="invert",
        laws=[
            AlgebraicLaw(
                "not_identity", "~v == -(v + 1)", 1,
                lambda cls, a: ~cls(a) == -(a + 1),
            ),
        ],
    )

    operations["hamming"] = OperationContract(
        name="hamming",
        laws=[
            AlgebraicLaw(
                "zero_iff_equal", "hamming(a, b) == 0 iff a == b", 2,
                lambda cls, a, b: (
                    (a < 0) != (b < 0)
                    or (cls(a).hamming_distance(cls(b)) == 0) == (a == b)
                ),
            ),
        ],
    )

    operations["text"] = OperationContract(
        name="text",
        laws=[
            AlgebraicLaw(
                "round_trip", "parse(format(v, b), b) == v", 1,
                lambda cls, a: all(
                    cls.from_string(cls(a).to_string(b), b) == a
                    for b in (2, 8, 10, 16, 36, 62)
                ),
            ),
        ],
    )

    operations["binary"] = OperationContract(
        name="binary",
        laws=[
            AlgebraicLaw(
                "round_trip", "import(export(v)) == v", 1,
                lambda cls, a: cls.from_bytes(cls(a).to_bytes()) == a,
            ),
        ],
    )

    operations["inverse"] = OperationContract(
        name="inverse",
        laws=[
            AlgebraicLaw(
                "inverse_or_absent",
                "a * inv(a) == 1 (mod m) when gcd(a, m) == 1, else absent", 2,
                lambda cls, a, m: _inverse_holds(cls, a, m),
            ),
        ],
    )

    return NumericContract(operations=operations)


def _inplace_self(cls: Any, a: int, method: str) -> int:
    value = cls(a)
    getattr(value, method)(value)
    return int(value)


def _inverse_holds(cls: Any, a: int, m: int) -> bool:
    if m == 0:
        return True
    inv = cls(a).modular_inverse(m)
    if gcd(a, m) != 1:
        return inv is None
    return inv is not None and (a * int(inv)) % abs(m) == 1 % abs(m)
