"""Reading what producers and callbacks declare.

Everything the registry knows about a callable comes from its annotations:
the return annotation names the abstraction(s) a producer provides, and the
parameter annotations name the abstractions it needs.
"""

from __future__ import annotations

import functools
import inspect
import typing
from dataclasses import dataclass
from typing import Any, Protocol, get_origin, get_type_hints


_NOT_DECLARED = inspect.Parameter.empty


@dataclass(frozen=True)
class Dependency:
    name: str
    kind: inspect._ParameterKind
    abstraction: Any  # _NOT_DECLARED when the parameter carries no annotation
    default: Any

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty


def get_hints(obj: Any) -> dict[str, Any]:
    """Evaluated annotations of a callable.

    Classes contribute the hints of their `__init__`, or none when those
    cannot be read. Raises NameError when annotations name unknown types.
    """
    target = _hint_target(obj)
    if inspect.isclass(obj):
        try:
            return get_type_hints(target)
        except TypeError:
            return {}
    return get_type_hints(target)


def _hint_target(obj: Any) -> Any:
    if inspect.isclass(obj):
        return inspect.getattr_static(obj, "__init__")
    if isinstance(obj, functools.partial):
        return _hint_target(obj.func)
    if inspect.isroutine(obj):
        return obj
    # callable instance
    return type(obj).__call__


def returned_abstractions(obj: Any, hints: dict[str, Any]) -> tuple[list[Any], bool]:
    """Abstractions a producer declares, in positional order.

    A class provides itself. A function provides its return annotation, or
    each element of a fixed-length `tuple[...]` return annotation. The flag
    is True when the result has to be unpacked by position.
    """
    if inspect.isclass(obj):
        return [obj], False

    ret = hints.get("return", _NOT_DECLARED)
    if ret is _NOT_DECLARED or ret is None or ret is type(None):
        return [], False

    if get_origin(ret) is tuple:
        args = typing.get_args(ret)
        if Ellipsis in args:
            return [ret], False
        # tuple[()] is reported as ((),) on older interpreters
        return [arg for arg in args if arg != ()], True

    return [ret], False


def declared_dependencies(obj: Any, hints: dict[str, Any]) -> list[Dependency]:
    sig = inspect.signature(obj)
    deps = []
    for name, p in sig.parameters.items():
        # variadic parameters are never injected
        if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
            continue
        deps.append(
            Dependency(
                name=name,
                kind=p.kind,
                abstraction=hints.get(name, _NOT_DECLARED),
                default=p.default,
            )
        )
    return deps


def undeclared(dep: Dependency) -> bool:
    """True when nothing can ever be injected into `dep`."""
    return dep.abstraction is _NOT_DECLARED and not dep.has_default


def is_protocol(tp: Any) -> bool:
    if get_origin(tp) is not None or not inspect.isclass(tp):
        return False
    if hasattr(typing, "is_protocol"):
        # https://docs.python.org/3/library/typing.html#typing.is_protocol
        return typing.is_protocol(tp)
    return bool(getattr(tp, "_is_protocol", False)) and tp is not Protocol


def is_runtime_checkable_protocol(tp: Any) -> bool:
    if not is_protocol(tp):
        return False

    try:
        isinstance(None, tp)
    except TypeError:
        return False
    else:
        return True


def protocol_members(proto_cls: type) -> set[str]:
    members: set[str] = set()
    for base in proto_cls.__mro__:
        if base in (Protocol, typing.Generic, object) or not is_protocol(base):
            continue
        members.update(n for n in inspect.get_annotations(base) if not n.startswith("_"))
        for name, attr in base.__dict__.items():
            if name.startswith("_"):
                continue
            if inspect.isfunction(attr) or isinstance(attr, (property, classmethod, staticmethod)):
                members.add(name)
    return members


def conformance_problem(abstraction: Any, concrete: object) -> str | None:
    """Describe why `concrete` cannot satisfy `abstraction`, or None.

    Only class abstractions are checked: plain classes and runtime checkable
    protocols with isinstance, other protocols by member presence.
    """
    if abstraction is Any or get_origin(abstraction) is not None or not inspect.isclass(abstraction):
        return None

    kind = type(concrete).__name__
    if not is_protocol(abstraction):
        if not isinstance(concrete, abstraction):
            return f"{kind} is not an instance of {abstraction.__name__}"
        return None

    if is_runtime_checkable_protocol(abstraction):
        if not isinstance(concrete, abstraction):
            return f"{kind} does not implement runtime protocol {abstraction.__name__}"
        return None

    missing = sorted(name for name in protocol_members(abstraction) if not hasattr(concrete, name))
    if missing:
        return f"{kind} does not structurally conform to protocol {abstraction.__name__}: missing members: {', '.join(missing)}"
    return None
