# mockmp/core/domain.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from mockmp.core.constraints import Constraint


# ============================================================================
# IDENTITIES
# ============================================================================

@dataclass(frozen=True)
class BehavioralUnit:
    """
    Identity of one mock instance.

    Owns no state: stubs, recorded calls and property cells all live in the
    engine, keyed by this identity.
    """
    uid: int
    name: str

    def __str__(self) -> str:
        return self.name


class MemberKind(str, Enum):
    METHOD = "method"
    GETTER = "getter"
    SETTER = "setter"


@dataclass(frozen=True)
class MemberSignature:
    """A member of a unit: name, arity and accessor kind."""
    unit: BehavioralUnit
    name: str
    arity: int
    kind: MemberKind = MemberKind.METHOD

    @property
    def display_name(self) -> str:
        return f"{self.unit.name}.{self.name}"

    def describe(self, rendered_args: Sequence[str]) -> str:
        """Render a call of this member with already-rendered arguments."""
        if self.kind is MemberKind.GETTER:
            return self.display_name
        if self.kind is MemberKind.SETTER:
            value = rendered_args[0] if rendered_args else "?"
            return f"{self.display_name} = {value}"
        return f"{self.display_name}({', '.join(rendered_args)})"


# ============================================================================
# RECORDED CALLS
# ============================================================================

class OutcomeState(str, Enum):
    PENDING = "pending"
    RETURNED = "returned"
    RAISED = "raised"


@dataclass(frozen=True)
class CallOutcome:
    state: OutcomeState = OutcomeState.PENDING
    value: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def returned(cls, value: Any) -> "CallOutcome":
        return cls(OutcomeState.RETURNED, value=value)

    @classmethod
    def raised(cls, error: BaseException) -> "CallOutcome":
        return cls(OutcomeState.RAISED, error=error)


PENDING = CallOutcome()


@dataclass(frozen=True)
class Invocation:
    """
    One recorded call against a unit's member.

    Created for every dispatch, whether or not a stub matched.  ``seq`` is
    unique and strictly increasing for the lifetime of the owning engine.
    """
    seq: int
    member: MemberSignature
    args: tuple
    is_async: bool = False
    outcome: CallOutcome = field(default=PENDING, compare=False)

    @property
    def unit(self) -> BehavioralUnit:
        return self.member.unit

    @property
    def raised(self) -> bool:
        return self.outcome.state is OutcomeState.RAISED

    def describe(self) -> str:
        call = self.member.describe([repr(a) for a in self.args])
        suffix = " [async]" if self.is_async else ""
        if self.raised:
            suffix += f" raised {type(self.outcome.error).__name__}"
        return f"#{self.seq} {call}{suffix}"


# ============================================================================
# BEHAVIORS
# ============================================================================

class Behavior:
    """What a stub does once it has been chosen for a call."""

    def run(self, args: Sequence[Any]) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class ReturnValue(Behavior):
    value: Any

    def run(self, args: Sequence[Any]) -> Any:
        return self.value


@dataclass(frozen=True)
class Compute(Behavior):
    """Call ``fn`` with the call's arguments; an awaitable result is awaited on the async path."""
    fn: Callable[..., Any]

    def run(self, args: Sequence[Any]) -> Any:
        return self.fn(*args)


@dataclass(frozen=True)
class Raise(Behavior):
    error: BaseException | type[BaseException]

    def run(self, args: Sequence[Any]) -> Any:
        raise self.error


# ============================================================================
# STUBS AND EXPECTATIONS
# ============================================================================

@dataclass(frozen=True)
class StubDefinition:
    member: MemberSignature
    constraints: tuple[Constraint, ...]
    behavior: Behavior
    is_async: bool = False


@dataclass(frozen=True)
class CallPattern:
    """
    A call collected inside a stubbing or verification block.

    ``raises`` narrows a verification expectation to calls whose behavior
    raised an instance of that type.
    """
    member: MemberSignature
    constraints: tuple[Constraint, ...]
    is_async: bool = False
    raises: Optional[type[BaseException]] = None

    def describe(self) -> str:
        call = self.member.describe([c.description for c in self.constraints])
        if self.raises is not None:
            return f"{call} raising {self.raises.__name__}"
        return call


@dataclass(frozen=True)
class VerificationBlock:
    patterns: tuple[CallPattern, ...]
    exhaustive: bool = True
    in_order: bool = True

    @property
    def units(self) -> frozenset[BehavioralUnit]:
        return frozenset(p.member.unit for p in self.patterns)

    @property
    def mode(self) -> str:
        exhaustive = "exhaustive" if self.exhaustive else "non-exhaustive"
        order = "in order" if self.in_order else "any order"
        return f"{exhaustive}, {order}"
