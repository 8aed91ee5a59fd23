# mockmp/core/ports.py
from __future__ import annotations
from typing import Any, Awaitable, Protocol, Sequence, TypeVar

from mockmp.core.domain import BehavioralUnit, MemberKind

T = TypeVar("T")


# ============================================================================
# DISPATCH CONTRACT (consumed by forwarding code)
# ============================================================================

class DispatchContract(Protocol):
    """
    What a mock representation needs from the engine.

    Hand-written adapters, generated forwarding classes and the dynamic
    proxy all forward through these two calls and nothing else.
    """

    def create_unit(self, name: str | None = None) -> BehavioralUnit: ...

    def dispatch(
        self,
        unit: BehavioralUnit,
        name: str,
        args: Sequence[Any] = (),
        kind: MemberKind = MemberKind.METHOD,
    ) -> Any: ...

    def dispatch_async(
        self,
        unit: BehavioralUnit,
        name: str,
        args: Sequence[Any] = (),
    ) -> Awaitable[Any]: ...


# ============================================================================
# EXTERNAL COLLABORATORS
# ============================================================================

class FakeFactory(Protocol):
    """Produces a populated default instance of a data type (the faking generator)."""

    def __call__(self, data_type: type[T]) -> T: ...
