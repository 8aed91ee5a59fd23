# mockmp/errors.py
"""
Typed errors raised by the mocking engine.

Each error carries a stable ``code`` and a rendered ``detail``.  Engine
errors are always surfaced to the test that triggered them; they are never
retried or recovered internally.  Failures declared by a stub behavior are
not wrapped here: they reach the caller unchanged.
"""
from __future__ import annotations

from typing import Any, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from mockmp.core.domain import CallPattern, Invocation, MemberSignature


def format_call(member: "MemberSignature", args: Sequence[Any]) -> str:
    """Render ``unit.member(arg, ...)`` with every argument verbatim."""
    return member.describe([repr(a) for a in args])


class MockError(Exception):
    """Base class for all engine errors."""

    code: str = "mock_error"

    def __init__(self, detail: str = "Mock engine error"):
        self.detail = detail
        super().__init__(detail)


class MockUsageError(MockError):
    """Malformed stubbing or verification block."""

    code = "usage"


class UnmockedCallError(MockError):
    """A dispatched call matched no declared stub."""

    code = "unmocked_call"

    def __init__(self, member: "MemberSignature", args: Sequence[Any]):
        self.member = member
        self.args_received = tuple(args)
        super().__init__(f"Unmocked call: {format_call(member, args)}")


class ConstraintMixError(MockError):
    """A call mixes bare values with explicit constraints."""

    code = "constraint_mix"

    def __init__(self, call_description: str):
        self.call_description = call_description
        super().__init__(
            f"Cannot mix bare values and constraints in {call_description}: "
            "use either only values or only constraints"
        )


class DispatchPathMismatch(MockError):
    """A member was reached through the other (sync/async) path than it was registered on."""

    code = "dispatch_path_mismatch"

    def __init__(self, member: "MemberSignature", registered_async: bool, dispatched_async: bool):
        self.member = member
        self.registered_async = registered_async
        self.dispatched_async = dispatched_async
        registered = "asynchronous" if registered_async else "synchronous"
        used = "asynchronous" if dispatched_async else "synchronous"
        super().__init__(
            f"{member.display_name} is bound to the {registered} path "
            f"and cannot be used through the {used} path"
        )


class VerificationMismatch(MockError, AssertionError):
    """The recorded calls do not satisfy a verification block."""

    code = "verification_mismatch"

    def __init__(
        self,
        detail: str,
        unmatched: Sequence["CallPattern"] = (),
        leftovers: Sequence["Invocation"] = (),
    ):
        self.unmatched = list(unmatched)
        self.leftovers = list(leftovers)
        super().__init__(detail)
