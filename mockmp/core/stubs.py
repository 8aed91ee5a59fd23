# mockmp/core/stubs.py
from __future__ import annotations

from typing import Any, Optional, Sequence

from mockmp.core.constraints import match_arguments
from mockmp.core.domain import MemberSignature, StubDefinition
from mockmp.errors import DispatchPathMismatch, MockUsageError
from mockmp.infra.logging_config import get_logger

logger = get_logger(__name__)


class StubTable:
    """
    Declared behaviors, per member, in registration order.

    Resolution walks a member's list from the most recent declaration
    backwards and returns the first stub whose constraints accept the call,
    so a later declaration always overrides an earlier one it overlaps with,
    whatever their relative specificity.
    """

    def __init__(self):
        self._stubs: dict[MemberSignature, list[StubDefinition]] = {}

    def register(self, stub: StubDefinition) -> StubDefinition:
        member = stub.member
        if len(stub.constraints) != member.arity:
            raise MockUsageError(
                f"Stub for {member.display_name} declares {len(stub.constraints)} "
                f"constraints but the member takes {member.arity} arguments"
            )

        registered_async = self.registered_path(member)
        if registered_async is not None and registered_async != stub.is_async:
            raise DispatchPathMismatch(member, registered_async, stub.is_async)

        self._stubs.setdefault(member, []).append(stub)
        logger.debug(
            "Stub registered: %s (%d for this member)",
            member.describe([c.description for c in stub.constraints]),
            len(self._stubs[member]),
        )
        return stub

    def registered_path(self, member: MemberSignature) -> Optional[bool]:
        """True/False for the async/sync registration path, None if never stubbed."""
        stubs = self._stubs.get(member)
        if not stubs:
            return None
        return stubs[0].is_async

    def resolve(self, member: MemberSignature, args: Sequence[Any]) -> Optional[StubDefinition]:
        for stub in reversed(self._stubs.get(member, ())):
            if match_arguments(stub.constraints, args):
                return stub
        return None

    def stubs_for(self, member: MemberSignature) -> list[StubDefinition]:
        return list(self._stubs.get(member, ()))

    def clear(self) -> int:
        removed = len(self)
        self._stubs.clear()
        return removed

    def __len__(self) -> int:
        return sum(len(stubs) for stubs in self._stubs.values())
