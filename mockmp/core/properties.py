# mockmp/core/properties.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from mockmp.core.constraints import is_any
from mockmp.core.domain import BehavioralUnit, Compute, MemberKind, MemberSignature, StubDefinition
from mockmp.core.stubs import StubTable
from mockmp.infra.logging_config import get_logger

logger = get_logger(__name__)


def getter_of(unit: BehavioralUnit, name: str) -> MemberSignature:
    return MemberSignature(unit, name, 0, MemberKind.GETTER)


def setter_of(unit: BehavioralUnit, name: str) -> MemberSignature:
    return MemberSignature(unit, name, 1, MemberKind.SETTER)


@dataclass
class PropertyCell:
    """Mutable storage behind one backed property."""
    value: Any = None

    def get(self) -> Any:
        return self.value

    def set(self, value: Any) -> None:
        self.value = value


class PropertyBacking:
    """
    Stateful properties on top of ordinary stubs.

    The getter and setter are registered as regular synchronous stubs that
    read and write a cell, so reads and writes still go through the
    dispatcher and are recorded like any other call.
    """

    def __init__(self, stubs: StubTable):
        self._stubs = stubs
        self._cells: dict[tuple[BehavioralUnit, str], PropertyCell] = {}

    def back(self, unit: BehavioralUnit, name: str, initial: Any = None) -> PropertyCell:
        cell = PropertyCell(initial)
        self._stubs.register(StubDefinition(getter_of(unit, name), (), Compute(cell.get)))
        self._stubs.register(StubDefinition(setter_of(unit, name), (is_any(),), Compute(cell.set)))
        self._cells[(unit, name)] = cell
        logger.debug("Property backed: %s.%s = %r", unit.name, name, initial)
        return cell

    def cell(self, unit: BehavioralUnit, name: str) -> Optional[PropertyCell]:
        return self._cells.get((unit, name))

    def clear(self) -> None:
        self._cells.clear()
