from __future__ import annotations

from typing import Any, Generic, TypeVar, get_args


T = TypeVar("T")

_EMPTY: Any = object()


class Ref(Generic[T]):
    """A caller-owned slot that `Registry.fill` writes a concrete into.

    The abstraction is taken either from the constructor argument or from the
    subscripted type:

      shape = Ref(Shape)
      shape = Ref[Shape]()

    A slot created as plain `Ref()` is untyped and cannot be filled.
    """

    def __init__(self, abstraction: Any = None) -> None:
        self._abstraction = abstraction
        self._value: Any = _EMPTY

    @property
    def abstraction(self) -> Any:
        if self._abstraction is not None:
            return self._abstraction
        # set by typing on instances created through Ref[X]()
        orig = getattr(self, "__orig_class__", None)
        args = get_args(orig) if orig is not None else ()
        if args and not isinstance(args[0], TypeVar):
            return args[0]
        return None

    @property
    def filled(self) -> bool:
        return self._value is not _EMPTY

    @property
    def value(self) -> T:
        if self._value is _EMPTY:
            msg = f"{self!r} has not been filled"
            raise ValueError(msg)
        return self._value

    @value.setter
    def value(self, concrete: T) -> None:
        self._value = concrete

    def __repr__(self) -> str:
        abstraction = self.abstraction
        name = getattr(abstraction, "__name__", None) or repr(abstraction)
        return f"Ref[{name}]" if abstraction is not None else "Ref[?]"
