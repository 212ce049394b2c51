"""Counterexample search: discovers gaps in the implementation or the tests.

This module runs independently of the test suite.  It checks every entry
of ``contracts.build_contracts()`` against ``Integer`` over a fixed sample
of values:

1. Postcondition violations: inputs where a division-family result breaks
   its identity, sign rule or the plain-int reference.
2. Error condition violations: inputs that should raise but don't (or
   raise the wrong exception).
3. Law violations: algebraic relationships that fail for some input
   combination.

Run directly::

    python -m validation.counterexample_search
"""
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from bigint import Integer
from contracts import NumericContract, Rounding, build_contracts

# ---------------------------------------------------------------------------
# Sample values
# ---------------------------------------------------------------------------

SMALL_VALUES: tuple[int, ...] = tuple(range(-16, 17))

EDGE_VALUES: tuple[int, ...] = (
    0, 1, -1, 2, -2, 7, -7,
    (1 << 31) - 1, -(1 << 31),
    (1 << 63) - 1, -(1 << 63), 1 << 63,
    (1 << 64) - 1, -(1 << 64) + 1, 1 << 64,
    (1 << 127) - 1, -(1 << 127),
    3**100, -(3**100),
)


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class Counterexample:
    category: str
    operation: str
    inputs: tuple
    expected: str
    actual: str
    description: str


@dataclass
class SearchReport:
    counterexamples: list[Counterexample] = field(default_factory=list)
    checks_run: int = 0

    @property
    def passed(self) -> bool:
        return len(self.counterexamples) == 0

    def summary(self) -> str:
        lines = [
            "Counterexample Search Report",
            "=" * 40,
            f"Total checks: {self.checks_run}",
            f"Counterexamples found: {len(self.counterexamples)}",
        ]
        if self.counterexamples:
            lines.append("")
            for i, cx in enumerate(self.counterexamples, 1):
                lines.append(f"  [{i}] {cx.category} / {cx.operation}")
                lines.append(f"      Inputs:   {cx.inputs}")
                lines.append(f"      Expected: {cx.expected}")
                lines.append(f"      Actual:   {cx.actual}")
                lines.append(f"      {cx.description}")
        else:
            lines.append("\nNo counterexamples found; all checks passed.")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Operation runners
# ---------------------------------------------------------------------------

_ROUNDING_BY_CONTRACT = {
    f"{rounding.name.lower()}_divmod": rounding for rounding in Rounding
}


def _runner(op_name: str) -> Callable[[int, int], tuple[int, ...]]:
    """Call the operation behind a contract and return plain-int results."""
    if op_name == "modulo":
        return lambda a, m: (int(Integer(a).modulo(m)),)
    rounding = _ROUNDING_BY_CONTRACT[op_name]

    def run(a: int, b: int) -> tuple[int, ...]:
        q, r = Integer(a).quotient_and_remainder(b, rounding)
        return int(q), int(r)

    return run


def _checked_operations(contract: NumericContract) -> Iterable[tuple[str, Any]]:
    for op_name, op in contract.operations.items():
        if op.postconditions or op.error_conditions:
            yield op_name, op


# ---------------------------------------------------------------------------
# Search functions
# ---------------------------------------------------------------------------

def search_postcondition_violations(
    contract: NumericContract,
    values: tuple[int, ...],
) -> tuple[list[Counterexample], int]:
    """Verify postconditions for every input pair."""
    cxs: list[Counterexample] = []
    checks = 0

    for op_name, op in _checked_operations(contract):
        run = _runner(op_name)
        for a in values:
            for b in values:
                checks += 1
                if any(ec.trigger(a, b) for ec in op.error_conditions):
                    continue

                try:
                    result = run(a, b)
                except Exception as e:
                    cxs.append(Counterexample(
                        category="unexpected_error",
                        operation=op_name,
                        inputs=(a, b),
                        expected="no error",
                        actual=f"{type(e).__name__}: {e}",
                        description="Operation raised an unexpected exception",
                    ))
                    continue

                for post in op.postconditions:
                    if not post.check(a, b, *result):
                        cxs.append(Counterexample(
                            category="postcondition_violation",
                            operation=op_name,
                            inputs=(a, b),
                            expected=post.description,
                            actual=f"result={result}",
                            description=f"Postcondition '{post.name}' violated",
                        ))

    return cxs, checks


def search_error_condition_violations(
    contract: NumericContract,
    values: tuple[int, ...],
) -> tuple[list[Counterexample], int]:
    """Verify every error condition triggers the right exception."""
    cxs: list[Counterexample] = []
    checks = 0

    for op_name, op in _checked_operations(contract):
        run = _runner(op_name)
        for a in values:
            for b in values:
                for ec in op.error_conditions:
                    if not ec.trigger(a, b):
                        continue
                    checks += 1
                    try:
                        result = run(a, b)
                    except ec.exception:
                        continue
                    except Exception as e:
                        cxs.append(Counterexample(
                            category="wrong_error",
                            operation=op_name,
                            inputs=(a, b),
                            expected=ec.exception.__name__,
                            actual=f"{type(e).__name__}: {e}",
                            description=f"Wrong exception type for '{ec.name}'",
                        ))
                        continue
                    cxs.append(Counterexample(
                        category="missing_error",
                        operation=op_name,
                        inputs=(a, b),
                        expected=ec.exception.__name__,
                        actual=f"result={result}",
                        description=(
                            f"Error condition '{ec.name}' should have "
                            f"triggered but didn't"
                        ),
                    ))

    return cxs, checks


def search_law_violations(
    contract: NumericContract,
    values: tuple[int, ...],
) -> tuple[list[Counterexample], int]:
    """Check every algebraic law over all input tuples of its arity."""
    cxs: list[Counterexample] = []
    checks = 0

    for op_name, law in contract.all_laws:
        if law.arity == 2:
            inputs = [(a, b) for a in values for b in values]
        else:
            inputs = [(a,) for a in values]
        for args in inputs:
            checks += 1
            try:
                holds = law.check(Integer, *args)
            except Exception as e:
                cxs.append(Counterexample(
                    category="unexpected_error",
                    operation=op_name,
                    inputs=args,
                    expected=law.description,
                    actual=f"{type(e).__name__}: {e}",
                    description=f"Law '{law.name}' raised",
                ))
                continue
            if not holds:
                cxs.append(Counterexample(
                    category="law_violation",
                    operation=op_name,
                    inputs=args,
                    expected=law.description,
                    actual="law does not hold",
                    description=f"Law '{law.name}' violated",
                ))

    return cxs, checks


# ---------------------------------------------------------------------------
# Top-level runner
# ---------------------------------------------------------------------------

def run_search(values: tuple[int, ...] = SMALL_VALUES) -> SearchReport:
    """Run the complete counterexample search over one value sample."""
    contract = build_contracts()
    report = SearchReport()

    for search_fn in (
        search_postcondition_violations,
        search_error_condition_violations,
        search_law_violations,
    ):
        cxs, checks = search_fn(contract, values)
        report.counterexamples.extend(cxs)
        report.checks_run += checks

    return report


def main() -> None:
    """Run the counterexample search over each value sample."""
    samples = [
        ("small  [-16, 16]", SMALL_VALUES),
        ("edges  (native limits, multi-limb)", EDGE_VALUES),
    ]

    all_passed = True
    for name, values in samples:
        print(f"\n--- Sample: {name} ---")
        report = run_search(values)
        print(report.summary())
        if not report.passed:
            all_passed = False

    print("\n" + "=" * 40)
    if all_passed:
        print("ALL SAMPLES PASSED")
    else:
        print("SOME SAMPLES HAD COUNTEREXAMPLES")
        sys.exit(1)


if __name__ == "__main__":
    main()
