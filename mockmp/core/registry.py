# mockmp/core/registry.py
from __future__ import annotations

import itertools
from dataclasses import replace
from typing import Any, Collection, Iterator, Optional

from mockmp.core.domain import BehavioralUnit, CallOutcome, Invocation, MemberSignature
from mockmp.infra.logging_config import get_logger

logger = get_logger(__name__)


class CallRegistry:
    """
    Append-only log of invocations since the last clear.

    Sequence numbers come from a counter that survives ``clear()``, so a
    number is never handed out twice by the same registry.

    Not thread-safe: one registry belongs to one mocker driven by one test.
    """

    def __init__(self):
        self._calls: list[Invocation] = []
        self._positions: dict[int, int] = {}
        self._seq = itertools.count(1)

    def record(self, member: MemberSignature, args: tuple[Any, ...], is_async: bool) -> Invocation:
        invocation = Invocation(
            seq=next(self._seq),
            member=member,
            args=tuple(args),
            is_async=is_async,
        )
        self._positions[invocation.seq] = len(self._calls)
        self._calls.append(invocation)
        return invocation

    def settle(self, invocation: Invocation, outcome: CallOutcome) -> Invocation:
        """
        Attach the outcome of a finished call.

        The stored record is swapped for a settled copy.  When the log was
        cleared while the call was running the outcome is dropped.
        """
        settled = replace(invocation, outcome=outcome)
        position = self._positions.get(invocation.seq)
        if position is not None:
            self._calls[position] = settled
        return settled

    def calls(self, units: Optional[Collection[BehavioralUnit]] = None) -> list[Invocation]:
        """Recorded calls in call order, optionally restricted to some units."""
        if not units:
            return list(self._calls)
        return [c for c in self._calls if c.unit in units]

    def last(self) -> Optional[Invocation]:
        return self._calls[-1] if self._calls else None

    def clear(self) -> int:
        """Drop every recorded call. Returns the number removed."""
        removed = len(self._calls)
        self._calls.clear()
        self._positions.clear()
        if removed:
            logger.debug("Call log cleared: removed %d calls", removed)
        return removed

    def __len__(self) -> int:
        return len(self._calls)

    def __iter__(self) -> Iterator[Invocation]:
        return iter(list(self._calls))
