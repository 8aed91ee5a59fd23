# mockmp/core/constraints.py
"""
Argument constraints.

A constraint is a named predicate over a single argument value.  Evaluation
is side-effect free; capture sinks are only fed by the dispatcher (for the
stub actually chosen) and by the verifier (for calls bound in a successful
match), never while candidates are being inspected.

A capture sink is any ``list`` owned by the test.  The same list may be
shared by several constraints to accumulate values across calls.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Collection, Optional, Sequence, Union

from mockmp.errors import ConstraintMixError


@dataclass(frozen=True)
class Success:
    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    reason: str

    def __bool__(self) -> bool:
        return False


MatchResult = Union[Success, Failure]

SUCCESS = Success()


class Constraint:
    """Predicate over one argument, with an optional capture sink."""

    def __init__(
        self,
        description: str,
        check: Callable[[Any], MatchResult],
        capture: Optional[list] = None,
    ):
        self.description = description
        self._check = check
        self.capture_sink = capture

    def evaluate(self, value: Any) -> MatchResult:
        return self._check(value)

    def capture(self, value: Any) -> None:
        if self.capture_sink is not None:
            self.capture_sink.append(value)

    def __repr__(self) -> str:
        return self.description


# ============================================================================
# BUILT-IN CONSTRAINTS
# ============================================================================

def is_any(capture: Optional[list] = None) -> Constraint:
    return Constraint("is_any()", lambda value: SUCCESS, capture)


def is_none(capture: Optional[list] = None) -> Constraint:
    def check(value: Any) -> MatchResult:
        if value is None:
            return SUCCESS
        return Failure(f"{value!r} is not None")

    return Constraint("is_none()", check, capture)


def is_not_none(capture: Optional[list] = None) -> Constraint:
    def check(value: Any) -> MatchResult:
        if value is not None:
            return SUCCESS
        return Failure("value is None")

    return Constraint("is_not_none()", check, capture)


def is_equal(expected: Any, capture: Optional[list] = None) -> Constraint:
    def check(value: Any) -> MatchResult:
        if value == expected:
            return SUCCESS
        return Failure(f"{value!r} != {expected!r}")

    return Constraint(f"is_equal({expected!r})", check, capture)


def is_not_equal(unexpected: Any, capture: Optional[list] = None) -> Constraint:
    def check(value: Any) -> MatchResult:
        if value != unexpected:
            return SUCCESS
        return Failure(f"{value!r} == {unexpected!r}")

    return Constraint(f"is_not_equal({unexpected!r})", check, capture)


def is_same(expected: Any, capture: Optional[list] = None) -> Constraint:
    def check(value: Any) -> MatchResult:
        if value is expected:
            return SUCCESS
        return Failure(f"{value!r} is not the same object as {expected!r}")

    return Constraint(f"is_same({expected!r})", check, capture)


def is_not_same(unexpected: Any, capture: Optional[list] = None) -> Constraint:
    def check(value: Any) -> MatchResult:
        if value is not unexpected:
            return SUCCESS
        return Failure(f"{value!r} is the same object as {unexpected!r}")

    return Constraint(f"is_not_same({unexpected!r})", check, capture)


def is_instance_of(
    expected_type: Union[type, tuple[type, ...]],
    capture: Optional[list] = None,
) -> Constraint:
    if isinstance(expected_type, tuple):
        type_name = " | ".join(t.__name__ for t in expected_type)
    else:
        type_name = expected_type.__name__

    def check(value: Any) -> MatchResult:
        if isinstance(value, expected_type):
            return SUCCESS
        return Failure(f"{type(value).__name__} is not an instance of {type_name}")

    return Constraint(f"is_instance_of({type_name})", check, capture)


def is_valid(
    check: Callable[[Any], Any],
    description: Optional[str] = None,
    capture: Optional[list] = None,
) -> Constraint:
    """
    Custom constraint.

    ``check(value)`` may return a ``Success``/``Failure``, a bool, or None
    (accepted).  An ``AssertionError`` raised by ``check`` rejects the value
    with the assertion message, so plain ``assert`` statements work.
    """
    label = description or f"is_valid({getattr(check, '__name__', 'check')})"

    def wrapped(value: Any) -> MatchResult:
        try:
            result = check(value)
        except AssertionError as e:
            return Failure(str(e) or f"{label} rejected {value!r}")
        if isinstance(result, (Success, Failure)):
            return result
        if result is None or result is True:
            return SUCCESS
        if result is False:
            return Failure(f"{label} rejected {value!r}")
        raise TypeError(
            f"{label} must return Success, Failure, a bool or None, got {type(result).__name__}"
        )

    return Constraint(label, wrapped, capture)


# ============================================================================
# COMPOSITION
# ============================================================================

def match_arguments(constraints: Sequence[Constraint], args: Sequence[Any]) -> MatchResult:
    """Positional composition: every constraint must accept its argument."""
    if len(constraints) != len(args):
        return Failure(f"expected {len(constraints)} arguments, got {len(args)}")
    for index, (constraint, value) in enumerate(zip(constraints, args)):
        result = constraint.evaluate(value)
        if not result:
            return Failure(f"argument {index}: {result.reason}")
    return SUCCESS


def capture_arguments(constraints: Sequence[Constraint], args: Sequence[Any]) -> None:
    for constraint, value in zip(constraints, args):
        constraint.capture(value)


def normalize_arguments(
    call_description: str,
    args: Sequence[Any],
    defaulted: Collection[int] = (),
) -> tuple[Constraint, ...]:
    """
    Turn the arguments of a collected call into constraints.

    Bare values become equality constraints.  A call's explicitly passed
    arguments must be all bare values or all constraints; positions filled in
    from parameter defaults are not part of that check.
    """
    explicit = [a for i, a in enumerate(args) if i not in defaulted]
    explicit_constraints = sum(1 for a in explicit if isinstance(a, Constraint))
    if 0 < explicit_constraints < len(explicit):
        raise ConstraintMixError(call_description)

    return tuple(a if isinstance(a, Constraint) else is_equal(a) for a in args)
