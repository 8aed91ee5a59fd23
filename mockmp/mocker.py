# mockmp/mocker.py
"""
Test-facing API.

One ``Mocker`` owns one call registry, one stub table and one dispatcher;
it is meant to be scoped to a single test and is not thread-safe.

Usage::

    mocker = Mocker()
    api = mocker.mock(UserApi, name="api")

    mocker.every(lambda: api.get_user_by_id(is_equal(42))).returns(user_a)
    mocker.every_suspending(lambda: api.fetch(is_any())).runs(load_user)

    service.run(api)

    with mocker.verify(exhaustive=False, in_order=True):
        api.get_user_by_id(42)
"""
from __future__ import annotations

import inspect
import itertools
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Iterable, Iterator, Optional, Sequence

from mockmp.config import MockSettings, get_settings
from mockmp.core.constraints import Constraint
from mockmp.core.dispatcher import CallCollector, Dispatcher
from mockmp.core.domain import (
    Behavior,
    BehavioralUnit,
    CallPattern,
    Compute,
    Invocation,
    MemberKind,
    MemberSignature,
    Raise,
    ReturnValue,
    StubDefinition,
    VerificationBlock,
)
from mockmp.core.properties import PropertyBacking, PropertyCell, getter_of, setter_of
from mockmp.core.registry import CallRegistry
from mockmp.core.stubs import StubTable
from mockmp.core.verifier import Verifier
from mockmp.errors import MockUsageError
from mockmp.infra.logging_config import get_logger
from mockmp.proxy import Mock, unit_of

logger = get_logger(__name__)


def _drive(result: Any, purpose: str) -> Any:
    """
    Run an awaitable returned by a block to completion without an event loop.

    Inside stubbing and verification blocks mocked calls resolve immediately,
    so the awaitable must finish on its first step.
    """
    if not inspect.isawaitable(result):
        return result
    iterator = result.__await__()
    try:
        next(iterator)
    except StopIteration as done:
        return done.value
    close = getattr(result, "close", None)
    if close is not None:
        close()
    raise MockUsageError(f"A {purpose} block must not suspend on anything but mocked calls")


class StubBuilder:
    """Completes an ``every``/``every_suspending`` declaration."""

    def __init__(self, mocker: "Mocker", pattern: CallPattern, is_async: bool):
        self._mocker = mocker
        self.pattern = pattern
        self.is_async = is_async

    def returns(self, value: Any) -> StubDefinition:
        return self._register(ReturnValue(value))

    def runs(self, fn: Callable[..., Any]) -> StubDefinition:
        """``fn`` receives the call's arguments; on the async path it may be a coroutine function."""
        return self._register(Compute(fn))

    def throws(self, error: BaseException | type[BaseException]) -> StubDefinition:
        return self._register(Raise(error))

    def _register(self, behavior: Behavior) -> StubDefinition:
        return self._mocker.register_stub(
            self.pattern.member, self.pattern.constraints, behavior, is_async=self.is_async,
        )


class UnitHandle:
    """
    Forwarding helper for hand-written or generated mock classes.

    ::

        class UserApiMock(UserApi):
            def __init__(self, mocker):
                self._mock = mocker.create_handle("api")

            def get_user_by_id(self, user_id):
                return self._mock.call("get_user_by_id", user_id)

            def fetch(self, user_id):
                return self._mock.call_async("fetch", user_id)
    """

    def __init__(self, mocker: "Mocker", unit: BehavioralUnit):
        self._mocker = mocker
        self.unit = unit

    def call(self, name: str, *args: Any) -> Any:
        return self._mocker.dispatch(self.unit, name, args)

    def call_async(self, name: str, *args: Any) -> Awaitable[Any]:
        return self._mocker.dispatch_async(self.unit, name, args)

    def get(self, name: str) -> Any:
        return self._mocker.dispatch(self.unit, name, (), kind=MemberKind.GETTER)

    def set(self, name: str, value: Any) -> None:
        self._mocker.dispatch(self.unit, name, (value,), kind=MemberKind.SETTER)

    def __repr__(self) -> str:
        return f"<UnitHandle {self.unit.name!r}>"


class Mocker:
    def __init__(self, settings: Optional[MockSettings] = None):
        self.settings = settings or get_settings()
        self._unit_ids = itertools.count(1)
        self.registry = CallRegistry()
        self.stubs = StubTable()
        self.dispatcher = Dispatcher(self.stubs, self.registry, self.settings)
        self.verifier = Verifier(self.registry, self.settings)
        self.properties = PropertyBacking(self.stubs)

    # ------------------------------------------------------------------
    # Units and mocks
    # ------------------------------------------------------------------

    def create_unit(self, name: Optional[str] = None) -> BehavioralUnit:
        uid = next(self._unit_ids)
        return BehavioralUnit(uid=uid, name=name or f"mock{uid}")

    def create_handle(self, name: Optional[str] = None) -> UnitHandle:
        return UnitHandle(self, self.create_unit(name))

    def mock(
        self,
        spec: Optional[type] = None,
        name: Optional[str] = None,
        properties: Iterable[str] = (),
    ) -> Any:
        """Dynamic proxy forwarding every attribute through this mocker."""
        if name is None and spec is not None:
            name = spec.__name__
        return Mock(self.dispatcher, self.create_unit(name), spec=spec, properties=properties)

    # ------------------------------------------------------------------
    # Dispatch contract
    # ------------------------------------------------------------------

    def dispatch(
        self,
        unit: BehavioralUnit,
        name: str,
        args: Sequence[Any] = (),
        kind: MemberKind = MemberKind.METHOD,
    ) -> Any:
        member = MemberSignature(unit, name, len(args), kind)
        return self.dispatcher.dispatch(member, tuple(args))

    def dispatch_async(
        self,
        unit: BehavioralUnit,
        name: str,
        args: Sequence[Any] = (),
    ) -> Awaitable[Any]:
        member = MemberSignature(unit, name, len(args))
        return self.dispatcher.dispatch_async(member, tuple(args))

    # ------------------------------------------------------------------
    # Stubbing
    # ------------------------------------------------------------------

    def register_stub(
        self,
        member: MemberSignature,
        constraints: Sequence[Constraint],
        behavior: Behavior,
        is_async: bool = False,
    ) -> StubDefinition:
        return self.stubs.register(StubDefinition(member, tuple(constraints), behavior, is_async))

    def every(self, block: Callable[[], Any]) -> StubBuilder:
        """Declare a behavior for the single mocked call made by ``block``."""
        return StubBuilder(self, self._collect_one(block, "every", reject_async=True), is_async=False)

    def every_suspending(self, block: Callable[[], Any]) -> StubBuilder:
        """Like ``every`` for members invoked through the asynchronous path."""
        return StubBuilder(self, self._collect_one(block, "every_suspending"), is_async=True)

    def _collect_one(
        self, block: Callable[[], Any], purpose: str, reject_async: bool = False,
    ) -> CallPattern:
        with self.dispatcher.collecting(purpose, reject_async=reject_async) as collector:
            _drive(block(), purpose)
        if len(collector.patterns) != 1:
            raise MockUsageError(
                f"A {purpose} block must make exactly one mocked call, "
                f"got {len(collector.patterns)}"
            )
        return collector.patterns[0]

    def back_property(self, target: Any, name: str, initial: Any = None) -> PropertyCell:
        """Give ``target.name`` a stored value that setter calls update."""
        return self.properties.back(unit_of(target), name, initial)

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    @contextmanager
    def verify(self, exhaustive: bool = True, in_order: bool = True) -> Iterator[CallCollector]:
        """
        Collect the expected calls made inside the ``with`` block, then
        verify them when the block exits normally.
        """
        with self.dispatcher.collecting("verify", reject_async=True) as collector:
            yield collector
        self.verify_block(VerificationBlock(tuple(collector.patterns), exhaustive, in_order))

    @asynccontextmanager
    async def verify_with_suspend(
        self, exhaustive: bool = True, in_order: bool = True,
    ) -> AsyncIterator[CallCollector]:
        """Async variant of ``verify``: expected calls may be awaited or not."""
        with self.dispatcher.collecting("verify_with_suspend") as collector:
            yield collector
        self.verify_block(VerificationBlock(tuple(collector.patterns), exhaustive, in_order))

    def verify_block(self, block: VerificationBlock) -> None:
        self.verifier.check(block)

    def called(self, block: Callable[[], Any]) -> CallPattern:
        """Expect the single call made by ``block``, whatever its outcome."""
        return self._expect(block, None)

    def threw(self, error_type: type[BaseException], block: Callable[[], Any]) -> CallPattern:
        """Expect the single call made by ``block`` to have raised ``error_type``."""
        return self._expect(block, error_type)

    def _expect(self, block: Callable[[], Any], error_type: Optional[type[BaseException]]) -> CallPattern:
        collector = self.dispatcher.collector
        if collector is None or not collector.purpose.startswith("verify"):
            raise MockUsageError("called/threw can only be used inside a verify block")
        before = len(collector.patterns)
        with collector.expecting(error_type):
            _drive(block(), collector.purpose)
        if len(collector.patterns) - before != 1:
            raise MockUsageError(
                f"called/threw blocks must make exactly one mocked call, "
                f"got {len(collector.patterns) - before}"
            )
        return collector.patterns[-1]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def calls(self) -> list[Invocation]:
        return self.registry.calls()

    def calls_to(self, target: Any) -> list[Invocation]:
        return self.registry.calls({unit_of(target)})

    def reset(self) -> None:
        """Forget every stub, backed property and recorded call."""
        stubs = self.stubs.clear()
        calls = self.registry.clear()
        self.properties.clear()
        logger.debug("Mocker reset: %d stubs, %d calls dropped", stubs, calls)

    def clear_calls(self) -> None:
        """Forget recorded calls but keep stubs."""
        self.registry.clear()

    def property_cell(self, target: Any, name: str) -> Optional[PropertyCell]:
        return self.properties.cell(unit_of(target), name)

    def getter(self, target: Any, name: str) -> MemberSignature:
        return getter_of(unit_of(target), name)

    def setter(self, target: Any, name: str) -> MemberSignature:
        return setter_of(unit_of(target), name)
