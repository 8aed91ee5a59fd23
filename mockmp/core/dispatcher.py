# mockmp/core/dispatcher.py
"""
Call interception.

Every forwarded call lands in ``Dispatcher.dispatch`` (synchronous members)
or ``Dispatcher.dispatch_async`` (members awaited by the caller).  A call is
logged before its stub is resolved, so calls that end in an error are
visible to verification and diagnostics too.

While a stubbing or verification block is open, forwarded calls are not
dispatched: they are collected as ``CallPattern`` objects instead.

Concurrency contract: a dispatcher has no internal locking and must be
driven from one thread at a time.  The async path runs the behavior inside
the awaiting task; it never schedules work of its own.
"""
from __future__ import annotations

import inspect
import threading
from contextlib import contextmanager
from typing import Any, Awaitable, Collection, Iterator, Optional

from mockmp.config import MockSettings
from mockmp.core.constraints import capture_arguments, normalize_arguments
from mockmp.core.domain import CallOutcome, CallPattern, Invocation, MemberSignature, StubDefinition
from mockmp.core.registry import CallRegistry
from mockmp.core.stubs import StubTable
from mockmp.errors import DispatchPathMismatch, MockUsageError, UnmockedCallError, format_call
from mockmp.infra.logging_config import LogContext, get_logger

logger = get_logger(__name__)


class CallCollector:
    """Calls gathered while a stubbing or verification block runs."""

    def __init__(self, purpose: str, reject_async: bool = False):
        self.purpose = purpose
        self.reject_async = reject_async
        self.patterns: list[CallPattern] = []
        self._raises: Optional[type[BaseException]] = None

    def collect(
        self,
        member: MemberSignature,
        args: tuple[Any, ...],
        defaulted: Collection[int],
        is_async: bool,
    ) -> CallPattern:
        if is_async and self.reject_async:
            raise DispatchPathMismatch(member, registered_async=True, dispatched_async=False)
        call_description = format_call(member, args)
        pattern = CallPattern(
            member=member,
            constraints=normalize_arguments(call_description, args, defaulted),
            is_async=is_async,
            raises=self._raises,
        )
        self.patterns.append(pattern)
        return pattern

    @contextmanager
    def expecting(self, error_type: Optional[type[BaseException]]) -> Iterator[None]:
        previous = self._raises
        self._raises = error_type
        try:
            yield
        finally:
            self._raises = previous


async def _resolved(value: Any) -> Any:
    return value


class Dispatcher:
    def __init__(self, stubs: StubTable, registry: CallRegistry, settings: MockSettings):
        self._stubs = stubs
        self._registry = registry
        self._settings = settings
        self._collector: Optional[CallCollector] = None
        self._owner_thread = threading.get_ident()
        self._warned_threads: set[int] = set()

    # ------------------------------------------------------------------
    # Collection mode
    # ------------------------------------------------------------------

    @property
    def collector(self) -> Optional[CallCollector]:
        return self._collector

    @contextmanager
    def collecting(self, purpose: str, reject_async: bool = False) -> Iterator[CallCollector]:
        if self._collector is not None:
            raise MockUsageError(
                f"Cannot open a {purpose} block inside a {self._collector.purpose} block"
            )
        collector = CallCollector(purpose, reject_async=reject_async)
        self._collector = collector
        try:
            yield collector
        finally:
            self._collector = None

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(
        self,
        member: MemberSignature,
        args: tuple[Any, ...],
        defaulted: Collection[int] = (),
    ) -> Any:
        """Synchronous path: resolve, run and return, or raise to the caller."""
        if self._collector is not None:
            self._collector.collect(member, tuple(args), defaulted, is_async=False)
            return None

        invocation = self._begin(member, tuple(args), is_async=False)
        stub = self._resolve(invocation)
        try:
            result = stub.behavior.run(invocation.args)
        except Exception as e:
            self._settle(invocation, CallOutcome.raised(e))
            raise
        self._settle(invocation, CallOutcome.returned(result))
        return result

    def dispatch_async(
        self,
        member: MemberSignature,
        args: tuple[Any, ...],
        defaulted: Collection[int] = (),
    ) -> Awaitable[Any]:
        """
        Asynchronous path.

        Returns an awaitable; the call is logged and resolved when it is
        awaited, inside the caller's task.  In collection mode the call is
        collected immediately and the awaitable resolves to None.
        """
        if self._collector is not None:
            self._collector.collect(member, tuple(args), defaulted, is_async=True)
            return _resolved(None)
        return self._run_async(member, tuple(args))

    async def _run_async(self, member: MemberSignature, args: tuple[Any, ...]) -> Any:
        invocation = self._begin(member, args, is_async=True)
        stub = self._resolve(invocation)
        try:
            result = stub.behavior.run(invocation.args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            self._settle(invocation, CallOutcome.raised(e))
            raise
        self._settle(invocation, CallOutcome.returned(result))
        return result

    def _begin(self, member: MemberSignature, args: tuple[Any, ...], is_async: bool) -> Invocation:
        self._check_thread(member)
        invocation = self._registry.record(member, args, is_async)
        ctx = LogContext(logger, unit=member.unit.name, member=member.name, seq=invocation.seq, is_async=is_async)
        ctx.debug("Dispatch %s", invocation.describe())

        registered_async = self._stubs.registered_path(member)
        if registered_async is not None and registered_async != is_async:
            error = DispatchPathMismatch(member, registered_async, is_async)
            self._settle(invocation, CallOutcome.raised(error))
            raise error
        return invocation

    def _resolve(self, invocation: Invocation) -> StubDefinition:
        try:
            stub = self._stubs.resolve(invocation.member, invocation.args)
        except Exception as e:
            # A custom constraint failed with something other than an assertion.
            self._settle(invocation, CallOutcome.raised(e))
            raise
        if stub is None:
            error = UnmockedCallError(invocation.member, invocation.args)
            self._settle(invocation, CallOutcome.raised(error))
            logger.info(error.detail)
            raise error
        # Sinks are fed before the behavior runs so it can read the current argument.
        capture_arguments(stub.constraints, invocation.args)
        return stub

    def _settle(self, invocation: Invocation, outcome: CallOutcome) -> None:
        if self._settings.record_outcomes:
            self._registry.settle(invocation, outcome)

    def _check_thread(self, member: MemberSignature) -> None:
        if not self._settings.warn_cross_thread:
            return
        current = threading.get_ident()
        if current == self._owner_thread or current in self._warned_threads:
            return
        self._warned_threads.add(current)
        logger.warning(
            "Mock %s dispatched from thread %s but its mocker belongs to thread %s; "
            "mockers are not synchronized",
            member.display_name, current, self._owner_thread,
            extra={"unit": member.unit.name, "member": member.name},
        )
