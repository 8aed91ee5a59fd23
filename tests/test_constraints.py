# tests/test_constraints.py
"""Tests for argument constraints in mockmp/core/constraints.py"""
import pytest

from mockmp.core.constraints import (
    SUCCESS,
    Failure,
    Success,
    is_any,
    is_equal,
    is_instance_of,
    is_none,
    is_not_equal,
    is_not_none,
    is_not_same,
    is_same,
    is_valid,
    match_arguments,
    normalize_arguments,
)
from mockmp.errors import ConstraintMixError


class _Point:
    def __init__(self, x):
        self.x = x

    def __eq__(self, other):
        return isinstance(other, _Point) and other.x == self.x

    def __hash__(self):
        return hash(self.x)


# ============================================================================
# Built-in constraints
# ============================================================================

class TestBuiltins:
    def test_is_any_accepts_everything(self):
        c = is_any()
        assert c.evaluate(None)
        assert c.evaluate(42)
        assert c.evaluate(object())

    def test_null_checks(self):
        assert is_none().evaluate(None)
        assert not is_none().evaluate(0)
        assert is_not_none().evaluate(0)
        assert not is_not_none().evaluate(None)

    def test_equality_is_by_value(self):
        assert is_equal(_Point(1)).evaluate(_Point(1))
        assert not is_equal(_Point(1)).evaluate(_Point(2))
        assert is_not_equal(_Point(1)).evaluate(_Point(2))
        assert not is_not_equal(_Point(1)).evaluate(_Point(1))

    def test_identity_is_by_reference(self):
        p = _Point(1)
        assert is_same(p).evaluate(p)
        assert not is_same(p).evaluate(_Point(1))
        assert is_not_same(p).evaluate(_Point(1))
        assert not is_not_same(p).evaluate(p)

    def test_type_check(self):
        assert is_instance_of(int).evaluate(3)
        assert not is_instance_of(int).evaluate("3")
        assert is_instance_of((int, str)).evaluate("3")

    def test_failure_carries_reason(self):
        result = is_equal(1).evaluate(2)
        assert isinstance(result, Failure)
        assert result.reason == "2 != 1"

    def test_descriptions(self):
        assert is_any().description == "is_any()"
        assert is_equal("a").description == "is_equal('a')"
        assert is_instance_of(int).description == "is_instance_of(int)"
        assert repr(is_none()) == "is_none()"


# ============================================================================
# Custom constraints
# ============================================================================

class TestIsValid:
    def test_bool_predicate(self):
        c = is_valid(lambda v: v > 0, description="positive")
        assert c.evaluate(1)
        result = c.evaluate(-1)
        assert not result
        assert "positive" in result.reason

    def test_none_means_accepted(self):
        assert is_valid(lambda v: None).evaluate("x")

    def test_explicit_results(self):
        c = is_valid(lambda v: Success() if v == "ok" else Failure(f"bad {v}"))
        assert c.evaluate("ok")
        assert c.evaluate("no") == Failure("bad no")

    def test_assertion_error_becomes_failure(self):
        def check(v):
            assert v.startswith("user-"), "id must start with user-"

        c = is_valid(check)
        assert c.evaluate("user-1")
        result = c.evaluate("admin")
        assert not result
        assert result.reason.startswith("id must start with user-")

    def test_raised_assertion_error_message_is_the_reason(self):
        def check(v):
            if v != "ok":
                raise AssertionError(f"{v} is not ok")

        assert is_valid(check).evaluate("bad") == Failure("bad is not ok")

    def test_other_exceptions_propagate(self):
        c = is_valid(lambda v: v.missing)
        with pytest.raises(AttributeError):
            c.evaluate(1)

    def test_invalid_return_type(self):
        with pytest.raises(TypeError):
            is_valid(lambda v: "yes").evaluate(1)


# ============================================================================
# Capture
# ============================================================================

class TestCapture:
    def test_evaluate_never_captures(self):
        sink = []
        c = is_any(capture=sink)
        c.evaluate(1)
        c.evaluate(2)
        assert sink == []

    def test_capture_appends_in_order(self):
        sink = []
        c = is_equal(1, capture=sink)
        c.capture(1)
        c.capture(1)
        assert sink == [1, 1]

    def test_shared_sink(self):
        sink = []
        is_any(capture=sink).capture("a")
        is_not_none(capture=sink).capture("b")
        assert sink == ["a", "b"]

    def test_no_sink_is_noop(self):
        is_any().capture(1)


# ============================================================================
# Composition
# ============================================================================

class TestMatchArguments:
    def test_all_positions_must_accept(self):
        assert match_arguments([is_equal(1), is_any()], [1, "x"]) is SUCCESS
        result = match_arguments([is_equal(1), is_none()], [1, "x"])
        assert result == Failure("argument 1: 'x' is not None")

    def test_arity_mismatch(self):
        result = match_arguments([is_any()], [1, 2])
        assert not result
        assert "expected 1 arguments, got 2" in result.reason

    def test_empty(self):
        assert match_arguments([], [])


class TestNormalizeArguments:
    def test_bare_values_become_equality(self):
        constraints = normalize_arguments("api.get(1, 'a')", [1, "a"])
        assert [c.description for c in constraints] == ["is_equal(1)", "is_equal('a')"]

    def test_explicit_constraints_are_kept(self):
        any_c = is_any()
        constraints = normalize_arguments("api.get(is_any())", [any_c])
        assert constraints == (any_c,)

    def test_mixing_is_rejected(self):
        with pytest.raises(ConstraintMixError) as exc_info:
            normalize_arguments("api.get(1, is_any())", [1, is_any()])
        assert "api.get(1, is_any())" in str(exc_info.value)
        assert exc_info.value.code == "constraint_mix"

    def test_defaulted_positions_are_not_mixed(self):
        any_c = is_any()
        constraints = normalize_arguments("api.save(is_any(), False)", [any_c, False], defaulted={1})
        assert constraints[0] is any_c
        assert constraints[1].description == "is_equal(False)"

    def test_no_arguments(self):
        assert normalize_arguments("api.version()", []) == ()
