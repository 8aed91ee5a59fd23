# tests/test_registry_and_stubs.py
"""Tests for the call log and the stub table"""
import pytest

from mockmp.core.constraints import is_any, is_equal
from mockmp.core.domain import (
    BehavioralUnit,
    CallOutcome,
    MemberSignature,
    OutcomeState,
    ReturnValue,
    StubDefinition,
)
from mockmp.core.registry import CallRegistry
from mockmp.core.stubs import StubTable
from mockmp.errors import DispatchPathMismatch, MockUsageError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

API = BehavioralUnit(uid=1, name="api")
DB = BehavioralUnit(uid=2, name="db")
GET = MemberSignature(API, "get", 1)
SAVE = MemberSignature(DB, "save", 1)


def _stub(member=GET, constraints=None, value=None, is_async=False) -> StubDefinition:
    if constraints is None:
        constraints = (is_any(),)
    return StubDefinition(member, tuple(constraints), ReturnValue(value), is_async)


# ============================================================================
# CallRegistry
# ============================================================================

class TestCallRegistry:
    def test_sequence_numbers_increase(self):
        registry = CallRegistry()
        first = registry.record(GET, (1,), False)
        second = registry.record(SAVE, (2,), False)
        assert first.seq < second.seq
        assert [c.seq for c in registry.calls()] == [first.seq, second.seq]

    def test_sequence_numbers_survive_clear(self):
        registry = CallRegistry()
        before = registry.record(GET, (1,), False)
        assert registry.clear() == 1
        after = registry.record(GET, (1,), False)
        assert after.seq > before.seq
        assert len(registry) == 1

    def test_filter_by_unit(self):
        registry = CallRegistry()
        registry.record(GET, (1,), False)
        registry.record(SAVE, (2,), False)
        registry.record(GET, (3,), True)
        assert [c.args for c in registry.calls({API})] == [(1,), (3,)]
        assert [c.args for c in registry.calls({DB})] == [(2,)]
        assert len(registry.calls()) == 3

    def test_settle_replaces_record(self):
        registry = CallRegistry()
        invocation = registry.record(GET, (1,), False)
        assert invocation.outcome.state is OutcomeState.PENDING

        settled = registry.settle(invocation, CallOutcome.returned("user"))
        assert settled.outcome.value == "user"
        assert registry.last().outcome.state is OutcomeState.RETURNED
        # the original record is immutable
        assert invocation.outcome.state is OutcomeState.PENDING

    def test_settle_after_clear_is_dropped(self):
        registry = CallRegistry()
        invocation = registry.record(GET, (1,), False)
        registry.clear()
        registry.settle(invocation, CallOutcome.returned(None))
        assert registry.calls() == []

    def test_describe(self):
        registry = CallRegistry()
        invocation = registry.record(GET, ("x",), True)
        assert invocation.describe() == f"#{invocation.seq} api.get('x') [async]"


# ============================================================================
# StubTable
# ============================================================================

class TestStubTable:
    def test_last_declaration_wins(self):
        table = StubTable()
        table.register(_stub(constraints=[is_equal(1)], value="narrow"))
        table.register(_stub(constraints=[is_any()], value="broad"))
        assert table.resolve(GET, (1,)).behavior.value == "broad"

    def test_earlier_stub_still_used_when_later_does_not_match(self):
        table = StubTable()
        table.register(_stub(constraints=[is_any()], value="broad"))
        table.register(_stub(constraints=[is_equal(1)], value="narrow"))
        assert table.resolve(GET, (1,)).behavior.value == "narrow"
        assert table.resolve(GET, (2,)).behavior.value == "broad"

    def test_no_match(self):
        table = StubTable()
        table.register(_stub(constraints=[is_equal(1)]))
        assert table.resolve(GET, (2,)) is None
        assert table.resolve(SAVE, (1,)) is None

    def test_arity_must_match_member(self):
        table = StubTable()
        with pytest.raises(MockUsageError):
            table.register(_stub(constraints=[is_any(), is_any()]))

    def test_registration_path_is_fixed_per_member(self):
        table = StubTable()
        table.register(_stub(is_async=True))
        assert table.registered_path(GET) is True
        with pytest.raises(DispatchPathMismatch) as exc_info:
            table.register(_stub(is_async=False))
        assert exc_info.value.member == GET
        assert "api.get" in str(exc_info.value)

    def test_clear(self):
        table = StubTable()
        table.register(_stub())
        table.register(_stub(member=SAVE))
        assert len(table) == 2
        assert table.clear() == 2
        assert table.registered_path(GET) is None
        assert table.stubs_for(GET) == []
