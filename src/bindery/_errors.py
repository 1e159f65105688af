from __future__ import annotations

from typing import Any, get_origin


def describe(obj: Any) -> str:
    """Qualified, human readable name of an abstraction or callable."""
    if get_origin(obj) is not None:
        # parametrised generics proxy the attributes of their origin
        return repr(obj)
    if isinstance(obj, type) or callable(obj):
        module = getattr(obj, "__module__", None)
        qualname = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None)
        if qualname is not None:
            if module and module != "builtins":
                return f"{module}.{qualname}"
            return qualname
    return repr(obj)


class RegistryError(RuntimeError):
    pass


class InvalidProducerError(RegistryError, TypeError):
    pass


class InvalidReceiverError(RegistryError, TypeError):
    pass


class UnresolvableReceiverError(RegistryError, TypeError):
    pass


class ConcreteTypeError(RegistryError, TypeError):
    pass


class UnboundAbstractionError(RegistryError, LookupError):
    """No binding exists for the requested abstraction."""

    def __init__(self, abstraction: Any, msg: str | None = None) -> None:
        self.abstraction = abstraction
        if msg is None:
            msg = f"no concrete found for the abstraction {describe(abstraction)}"
        super().__init__(msg)


class UnresolvedDependencyError(UnboundAbstractionError):
    """A producer declares a dependency that has no binding."""

    def __init__(self, abstraction: Any, producer: Any) -> None:
        self.producer = producer
        msg = (
            f"no concrete found for the abstraction {describe(abstraction)} "
            f"(required by producer {describe(producer)})"
        )
        super().__init__(abstraction, msg)
