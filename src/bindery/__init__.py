"""Minimal dependency injection registry.

This package maps abstractions (protocols, ABCs or base classes) to producer
functions whose annotations declare what they return and what they need.
Bindings are lazy and either singleton or transient; resolution fills a `Ref`
slot or injects the parameters of a callback.

Exports:
- `Registry`: the binding map with `register_singleton`, `register_transient`,
  `clear` and the `resolve` / `fill` / `invoke` / `make` entry points.
- `Ref`: caller-owned slot typed with the abstraction it should receive.
- `Lifecycle`: Enum selecting singleton or transient bindings.
- `Binding`: the record stored per abstraction.
- Errors, all deriving from `RegistryError`.
"""

from ._errors import (
    ConcreteTypeError,
    InvalidProducerError,
    InvalidReceiverError,
    RegistryError,
    UnboundAbstractionError,
    UnresolvableReceiverError,
    UnresolvedDependencyError,
)
from ._ref import Ref
from ._registry import Binding, Lifecycle, Registry


__all__ = [
    "Binding",
    "ConcreteTypeError",
    "InvalidProducerError",
    "InvalidReceiverError",
    "Lifecycle",
    "Ref",
    "Registry",
    "RegistryError",
    "UnboundAbstractionError",
    "UnresolvableReceiverError",
    "UnresolvedDependencyError",
]
