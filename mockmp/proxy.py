# mockmp/proxy.py
"""
Dynamic mock proxy.

A ``Mock`` turns attribute access into calls on the dispatch contract, so
no forwarding class has to be written or generated.  Given a ``spec``
class, member lookup, sync/async routing and argument binding follow the
spec's declarations.  Without one, every attribute is a synchronous method
unless it was declared as a property.
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Iterable, Optional, TYPE_CHECKING

from mockmp.core.domain import BehavioralUnit, MemberKind, MemberSignature
from mockmp.core.properties import getter_of, setter_of

if TYPE_CHECKING:
    from mockmp.core.dispatcher import Dispatcher


@dataclass(frozen=True)
class MemberInfo:
    name: str
    is_property: bool = False
    is_async: bool = False
    signature: Optional[inspect.Signature] = None


def _spec_annotations(spec: type) -> set[str]:
    names: set[str] = set()
    for klass in spec.__mro__:
        names.update(inspect.get_annotations(klass))
    return names


def describe_member(spec: type, name: str) -> Optional[MemberInfo]:
    """How ``spec`` declares ``name``; None when it does not declare it."""
    try:
        raw = inspect.getattr_static(spec, name)
    except AttributeError:
        if name in _spec_annotations(spec):
            return MemberInfo(name, is_property=True)
        return None

    if isinstance(raw, property):
        return MemberInfo(name, is_property=True)

    if isinstance(raw, staticmethod):
        func, drop_first = raw.__func__, False
    elif isinstance(raw, classmethod):
        func, drop_first = raw.__func__, True
    elif inspect.isfunction(raw):
        func, drop_first = raw, True
    elif callable(raw):
        return MemberInfo(name)
    else:
        return MemberInfo(name, is_property=True)

    signature = inspect.signature(func)
    if drop_first:
        params = list(signature.parameters.values())[1:]
        signature = signature.replace(parameters=params)
    return MemberInfo(
        name,
        is_async=inspect.iscoroutinefunction(func),
        signature=signature,
    )


def bind_arguments(
    info: MemberInfo,
    owner: str,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> tuple[tuple[Any, ...], frozenset[int]]:
    """
    Flatten a call into the ordered argument vector.

    Returns the vector and the positions that were filled from defaults.
    Binding errors surface as ``TypeError``, exactly like a real call.
    """
    if info.signature is None:
        if kwargs:
            raise TypeError(
                f"{owner}.{info.name}() got keyword arguments; mocks without a spec "
                "only accept positional arguments"
            )
        return tuple(args), frozenset()

    bound = info.signature.bind(*args, **kwargs)
    explicit = set(bound.arguments)
    bound.apply_defaults()

    vector: list[Any] = []
    defaulted: set[int] = set()
    for param in info.signature.parameters.values():
        value = bound.arguments[param.name]
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            vector.extend(value)
            continue
        if param.name not in explicit:
            defaulted.add(len(vector))
        vector.append(dict(value) if param.kind is inspect.Parameter.VAR_KEYWORD else value)
    return tuple(vector), frozenset(defaulted)


class Mock:
    """Attribute-level forwarder onto a mocker's dispatcher."""

    def __init__(
        self,
        dispatcher: "Dispatcher",
        unit: BehavioralUnit,
        spec: Optional[type] = None,
        properties: Iterable[str] = (),
    ):
        object.__setattr__(self, "_mockmp_dispatcher", dispatcher)
        object.__setattr__(self, "_mockmp_unit", unit)
        object.__setattr__(self, "_mockmp_spec", spec)
        object.__setattr__(self, "_mockmp_properties", frozenset(properties))
        object.__setattr__(self, "_mockmp_members", {})

    def _mockmp_member(self, name: str) -> MemberInfo:
        members: dict[str, MemberInfo] = self._mockmp_members
        info = members.get(name)
        if info is not None:
            return info

        spec = self._mockmp_spec
        if spec is None:
            info = MemberInfo(name, is_property=name in self._mockmp_properties)
        else:
            info = describe_member(spec, name)
            if info is None:
                raise AttributeError(f"{spec.__name__} has no member {name!r}")
        members[name] = info
        return info

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") or name.startswith("_mockmp_"):
            raise AttributeError(name)

        info = self._mockmp_member(name)
        dispatcher = self._mockmp_dispatcher
        unit = self._mockmp_unit

        if info.is_property:
            return dispatcher.dispatch(getter_of(unit, name), ())

        def forward(*args: Any, **kwargs: Any) -> Any:
            vector, defaulted = bind_arguments(info, unit.name, args, kwargs)
            member = MemberSignature(unit, name, len(vector), MemberKind.METHOD)
            if info.is_async:
                return dispatcher.dispatch_async(member, vector, defaulted)
            return dispatcher.dispatch(member, vector, defaulted)

        forward.__name__ = name
        forward.__qualname__ = f"{unit.name}.{name}"
        return forward

    def __setattr__(self, name: str, value: Any) -> None:
        if self._mockmp_spec is not None and not self._mockmp_member(name).is_property:
            raise AttributeError(f"Cannot assign to method {self._mockmp_unit.name}.{name}")
        self._mockmp_dispatcher.dispatch(setter_of(self._mockmp_unit, name), (value,))

    def __repr__(self) -> str:
        spec = self._mockmp_spec
        kind = f" of {spec.__name__}" if spec is not None else ""
        return f"<Mock{kind} {self._mockmp_unit.name!r}>"


def unit_of(target: Any) -> BehavioralUnit:
    """The behavioral unit behind a mock, a handle or a bare unit."""
    if isinstance(target, BehavioralUnit):
        return target
    if isinstance(target, Mock):
        return object.__getattribute__(target, "_mockmp_unit")
    unit = getattr(target, "unit", None)
    if isinstance(unit, BehavioralUnit):
        return unit
    raise TypeError(f"{target!r} is not a mock")
