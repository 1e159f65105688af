from __future__ import annotations

import inspect
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._errors import (
    ConcreteTypeError,
    InvalidProducerError,
    InvalidReceiverError,
    UnboundAbstractionError,
    UnresolvableReceiverError,
    UnresolvedDependencyError,
    describe,
)
from ._ref import Ref
from ._signature import (
    Dependency,
    conformance_problem,
    declared_dependencies,
    get_hints,
    returned_abstractions,
    undeclared,
)


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable

    T = TypeVar("T")
    F = TypeVar("F", bound=Callable[..., Any])

_ABSENT: Any = object()


class Lifecycle(Enum):
    SINGLETON = "singleton"
    TRANSIENT = "transient"


@dataclass
class Binding:
    producer: Callable[..., Any]
    lifecycle: Lifecycle
    dependencies: list[Dependency]
    index: int | None = None  # position in a multi-value return
    cached_instance: Any = field(default=_ABSENT, repr=False)  # singleton only

    @property
    def cached(self) -> bool:
        return self.cached_instance is not _ABSENT


class Registry:
    """Maps abstractions to the producers that build their concretes.

    - register producers as singleton or transient bindings
    - fill a `Ref` slot with the concrete of its abstraction
    - invoke a callback with every annotated parameter resolved
    - producers' own annotated parameters are resolved first, depth-first.
    """

    def __init__(self) -> None:
        self._bindings: dict[Any, Binding] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, abstraction: object) -> bool:
        return self.is_bound(abstraction)

    def is_bound(self, abstraction: object) -> bool:
        return abstraction in self._bindings

    def register_singleton(self, producer: F) -> F:
        """Bind the producer's return abstraction(s); the first concrete is reused.

        Example:
          def make_shape() -> Shape:
              return Circle(5)

          registry.register_singleton(make_shape)

        Lambdas cannot carry annotations and are rejected.

        """
        self._bind(producer, Lifecycle.SINGLETON)
        return producer

    def register_transient(self, producer: F) -> F:
        """Bind the producer's return abstraction(s); every resolve builds a new concrete."""
        self._bind(producer, Lifecycle.TRANSIENT)
        return producer

    def clear(self) -> None:
        """Drop every binding together with cached singleton instances."""
        with self._lock:
            self._bindings = {}
        logger.debug("registry cleared")

    def resolve(self, receiver: object) -> None:
        """Resolve into a `Ref` slot, or inject and call a callback.

        The return value of a callback is discarded; use `invoke` to keep it.
        """
        if receiver is None:
            msg = "cannot detect type of the receiver, make sure you are passing a Ref of the abstraction"
            raise UnresolvableReceiverError(msg)

        if isinstance(receiver, Ref):
            self.fill(receiver)
            return

        if callable(receiver):
            self.invoke(receiver)
            return

        msg = "the receiver must be either a Ref or a callback"
        raise InvalidReceiverError(msg)

    def fill(self, ref: Ref[T]) -> Ref[T]:
        if not isinstance(ref, Ref):
            msg = f"the receiver must be a Ref, got {type(ref).__name__}"
            raise InvalidReceiverError(msg)

        abstraction = ref.abstraction
        if abstraction is None:
            msg = "cannot detect type of the receiver, the Ref carries no abstraction"
            raise UnresolvableReceiverError(msg)

        with self._lock:
            instance = self._resolve(abstraction)
        if instance is _ABSENT:
            raise UnboundAbstractionError(abstraction)

        ref.value = instance
        return ref

    def invoke(self, callback: Callable[..., T]) -> T:
        """Call `callback` with each annotated parameter resolved, left to right."""
        if not callable(callback):
            msg = f"the receiver must be a callback, got {type(callback).__name__}"
            raise InvalidReceiverError(msg)

        try:
            dependencies = declared_dependencies(callback, get_hints(callback))
        except (NameError, TypeError, ValueError) as e:
            msg = f"cannot read the parameters of {describe(callback)}: {e}"
            raise UnresolvableReceiverError(msg) from e

        for dep in dependencies:
            if undeclared(dep):
                msg = f"parameter '{dep.name}' of {describe(callback)} has no annotation to resolve"
                raise UnresolvableReceiverError(msg)

        with self._lock:
            args, kwargs = self._arguments(dependencies, on_missing=UnboundAbstractionError)
        return callback(*args, **kwargs)

    @overload
    def make(self, abstraction: type[T]) -> T: ...

    @overload
    def make(self, abstraction: object) -> Any: ...

    def make(self, abstraction: Any) -> Any:
        """Return the concrete bound to `abstraction`."""
        with self._lock:
            instance = self._resolve(abstraction)
        if instance is _ABSENT:
            raise UnboundAbstractionError(abstraction)
        return instance

    def _bind(self, producer: Any, lifecycle: Lifecycle) -> None:
        if not callable(producer):
            msg = "the producer must be a callable"
            raise InvalidProducerError(msg)

        try:
            hints = get_hints(producer)
            abstractions, unpack = returned_abstractions(producer, hints)
            dependencies = declared_dependencies(producer, hints)
        except (NameError, TypeError, ValueError) as e:
            msg = f"cannot read the annotations of producer {describe(producer)}: {e}"
            raise InvalidProducerError(msg) from e

        if not abstractions:
            msg = f"producer {describe(producer)} must declare the abstraction it returns"
            raise InvalidProducerError(msg)

        for dep in dependencies:
            if undeclared(dep):
                msg = f"parameter '{dep.name}' of producer {describe(producer)} has neither annotation nor default"
                raise InvalidProducerError(msg)

        bindings = {
            abstraction: Binding(
                producer=producer,
                lifecycle=lifecycle,
                dependencies=dependencies,
                index=i if unpack else None,
            )
            for i, abstraction in enumerate(abstractions)
        }

        with self._lock:
            self._bindings.update(bindings)

        for abstraction in bindings:
            logger.debug("bound %s to %s (%s)", describe(abstraction), describe(producer), lifecycle.value)

    def _resolve(self, abstraction: Any) -> Any:
        binding = self._bindings.get(abstraction)
        if binding is None:
            return _ABSENT

        if binding.cached:
            return binding.cached_instance

        args, kwargs = self._arguments(
            binding.dependencies,
            on_missing=lambda missing: UnresolvedDependencyError(missing, binding.producer),
        )

        logger.debug("producing %s (%s)", describe(abstraction), binding.lifecycle.value)
        instance = binding.producer(*args, **kwargs)
        if binding.index is not None:
            try:
                instance = instance[binding.index]
            except (IndexError, KeyError, TypeError) as e:
                msg = f"producer {describe(binding.producer)} did not return a value for {describe(abstraction)}"
                raise ConcreteTypeError(msg) from e

        problem = conformance_problem(abstraction, instance)
        if problem is not None:
            msg = f"producer {describe(binding.producer)} returned an invalid concrete: {problem}"
            raise ConcreteTypeError(msg)

        if binding.lifecycle is Lifecycle.SINGLETON:
            binding.cached_instance = instance

        return instance

    def _arguments(
        self,
        dependencies: list[Dependency],
        on_missing: Callable[[Any], Exception],
    ) -> tuple[list[Any], dict[str, Any]]:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for dep in dependencies:
            value = _ABSENT
            if dep.abstraction is not inspect.Parameter.empty:
                value = self._resolve(dep.abstraction)

            if value is _ABSENT:
                if not dep.has_default:
                    raise on_missing(dep.abstraction)
                if dep.kind is not inspect.Parameter.POSITIONAL_ONLY:
                    continue
                value = dep.default

            if dep.kind is inspect.Parameter.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[dep.name] = value

        return args, kwargs
