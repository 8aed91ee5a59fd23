# mockmp/core/verifier.py
"""
Verification of recorded calls against an expected block.

The four modes (exhaustive x in_order) share one matcher that binds
expected patterns to recorded invocations and reports what stayed
unmatched, so every mode renders the same kind of diagnostic.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from mockmp.config import MockSettings
from mockmp.core.constraints import capture_arguments, match_arguments
from mockmp.core.domain import CallPattern, Invocation, VerificationBlock
from mockmp.core.registry import CallRegistry
from mockmp.errors import VerificationMismatch
from mockmp.infra.logging_config import get_logger

logger = get_logger(__name__)


def pattern_matches(pattern: CallPattern, invocation: Invocation) -> bool:
    if pattern.member != invocation.member:
        return False
    if pattern.raises is not None:
        if not invocation.raised or not isinstance(invocation.outcome.error, pattern.raises):
            return False
    return bool(match_arguments(pattern.constraints, invocation.args))


@dataclass
class VerificationResult:
    block: VerificationBlock
    scope: list[Invocation]
    bindings: dict[int, Invocation] = field(default_factory=dict)
    unmatched: list[int] = field(default_factory=list)
    leftovers: list[Invocation] = field(default_factory=list)
    notes: dict[int, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.unmatched and not self.leftovers

    def render(self, max_calls: int = 50) -> str:
        lines = [f"Verification failed ({self.block.mode}):"]
        for index in self.unmatched:
            pattern = self.block.patterns[index]
            note = self.notes.get(index)
            line = f"  Expected call not matched: {pattern.describe()}"
            lines.append(f"{line} ({note})" if note else line)
        for invocation in self.leftovers:
            lines.append(f"  Unexpected call: {invocation.describe()}")

        if not self.scope:
            lines.append("No calls were recorded.")
        else:
            lines.append("Recorded calls:")
            for invocation in self.scope[:max_calls]:
                lines.append(f"  {invocation.describe()}")
            if len(self.scope) > max_calls:
                lines.append(f"  ... and {len(self.scope) - max_calls} more")
        return "\n".join(lines)

    def raise_for_failure(self, max_calls: int = 50) -> None:
        if self.ok:
            return
        raise VerificationMismatch(
            self.render(max_calls),
            unmatched=[self.block.patterns[i] for i in self.unmatched],
            leftovers=self.leftovers,
        )


def match_block(block: VerificationBlock, calls: Sequence[Invocation]) -> VerificationResult:
    """Bind the block's patterns to ``calls`` under the block's mode."""
    result = VerificationResult(block=block, scope=list(calls))
    patterns = block.patterns

    if block.in_order and block.exhaustive:
        for index, pattern in enumerate(patterns):
            if index >= len(calls):
                result.unmatched.append(index)
                result.notes[index] = f"position {index}: no call recorded"
            elif pattern_matches(pattern, calls[index]):
                result.bindings[index] = calls[index]
            else:
                result.unmatched.append(index)
                result.notes[index] = f"position {index}: got {calls[index].describe()}"

    elif block.in_order:
        # Earliest binding is optimal for subsequence search.
        cursor = 0
        for index, pattern in enumerate(patterns):
            position = _find(pattern, calls, cursor)
            if position is None:
                result.unmatched.append(index)
                if cursor:
                    result.notes[index] = f"after {calls[cursor - 1].describe()}"
                continue
            result.bindings[index] = calls[position]
            cursor = position + 1

    elif block.exhaustive:
        assignment = _maximum_matching(patterns, calls)
        for index in range(len(patterns)):
            position = assignment.get(index)
            if position is None:
                result.unmatched.append(index)
            else:
                result.bindings[index] = calls[position]

    else:
        for index, pattern in enumerate(patterns):
            position = _find(pattern, calls, 0)
            if position is None:
                result.unmatched.append(index)
            else:
                result.bindings[index] = calls[position]

    if block.exhaustive:
        bound = {inv.seq for inv in result.bindings.values()}
        result.leftovers = [c for c in calls if c.seq not in bound]
    return result


def _find(pattern: CallPattern, calls: Sequence[Invocation], start: int) -> Optional[int]:
    for position in range(start, len(calls)):
        if pattern_matches(pattern, calls[position]):
            return position
    return None


def _maximum_matching(patterns: Sequence[CallPattern], calls: Sequence[Invocation]) -> dict[int, int]:
    """Pattern index -> call position, maximum bipartite matching (augmenting paths)."""
    candidates = [
        [position for position, call in enumerate(calls) if pattern_matches(pattern, call)]
        for pattern in patterns
    ]
    owner: dict[int, int] = {}

    def augment(index: int, visited: set[int]) -> bool:
        for position in candidates[index]:
            if position in visited:
                continue
            visited.add(position)
            if position not in owner or augment(owner[position], visited):
                owner[position] = index
                return True
        return False

    for index in range(len(patterns)):
        augment(index, set())
    return {index: position for position, index in owner.items()}


class Verifier:
    def __init__(self, registry: CallRegistry, settings: MockSettings):
        self._registry = registry
        self._settings = settings

    def verify(self, block: VerificationBlock) -> VerificationResult:
        """
        Match ``block`` against the calls recorded since the last clear.

        Only units referenced by the block are in scope; an empty block
        covers every unit.  Capture sinks are fed only when the match
        succeeds, with the invocations bound to each pattern.
        """
        calls = self._registry.calls(block.units)
        result = match_block(block, calls)

        if result.ok:
            for index, pattern in enumerate(block.patterns):
                invocation = result.bindings[index]
                capture_arguments(pattern.constraints, invocation.args)
            logger.debug(
                "Verified %d expected calls against %d recorded (%s)",
                len(block.patterns), len(calls), block.mode,
            )
        else:
            logger.info(
                "Verification failed (%s): %d unmatched, %d unexpected",
                block.mode, len(result.unmatched), len(result.leftovers),
            )
        return result

    def check(self, block: VerificationBlock) -> None:
        """Verify and raise ``VerificationMismatch`` on failure."""
        self.verify(block).raise_for_failure(self._settings.diagnostic_max_calls)
