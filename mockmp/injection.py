# mockmp/injection.py
"""
Field injection for test classes.

Attributes annotated ``Annotated[T, MOCK]`` receive a fresh ``Mock`` of
``T``; attributes annotated ``Annotated[T, FAKE]`` receive ``fake_factory(T)``.
Running the injection again replaces every marked attribute with new
instances, so it can be called from each test's setup.
"""
from __future__ import annotations

import typing
from dataclasses import dataclass
from typing import Annotated, Any, Optional, TYPE_CHECKING

from mockmp.core.ports import FakeFactory
from mockmp.errors import MockUsageError
from mockmp.infra.logging_config import get_logger

if TYPE_CHECKING:
    from mockmp.mocker import Mocker

logger = get_logger(__name__)


@dataclass(frozen=True)
class _Marker:
    kind: str

    def __repr__(self) -> str:
        return self.kind.upper()


MOCK = _Marker("mock")
FAKE = _Marker("fake")


def injection_points(owner: type) -> dict[str, tuple[_Marker, Any]]:
    """Marked attributes of ``owner``: name -> (marker, declared type)."""
    hints = typing.get_type_hints(owner, include_extras=True)
    points: dict[str, tuple[_Marker, Any]] = {}
    for name, hint in hints.items():
        if typing.get_origin(hint) is not Annotated:
            continue
        declared, *metadata = typing.get_args(hint)
        for marker in (MOCK, FAKE):
            if marker in metadata:
                points[name] = (marker, declared)
                break
    return points


def inject_mocks(
    target: Any,
    mocker: "Mocker",
    fake_factory: Optional[FakeFactory] = None,
) -> list[str]:
    """
    Assign fresh mocks and fakes to every marked attribute of ``target``.

    Returns:
        Names of the attributes that were assigned.
    """
    assigned: list[str] = []
    for name, (marker, declared) in injection_points(type(target)).items():
        if marker is MOCK:
            spec = declared if isinstance(declared, type) else None
            value = mocker.mock(spec, name=name)
        else:
            if fake_factory is None:
                raise MockUsageError(
                    f"{type(target).__name__}.{name} is marked FAKE but no fake factory was given"
                )
            value = fake_factory(declared)
        setattr(target, name, value)
        assigned.append(name)

    logger.debug("Injected %d fields into %s", len(assigned), type(target).__name__)
    return assigned
