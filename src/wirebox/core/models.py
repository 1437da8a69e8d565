"""Definition variants and read models used by the service container."""

from __future__ import annotations

import enum
import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias

from .interfaces import InvalidDefinition, ServiceId

if TYPE_CHECKING:
    from .container import ServiceContainer


@dataclass(slots=True, frozen=True)
class FactoryDefinition:
    """A callable invoked with the container to produce an instance."""

    factory: Callable[..., Any]
    shared: bool = True

    kind = "factory"


@dataclass(slots=True, frozen=True)
class TypeDefinition:
    """A class constructed by introspecting its constructor."""

    cls: type
    shared: bool = True

    kind = "type"


@dataclass(slots=True, frozen=True)
class InstanceDefinition:
    """An already-built object returned as is."""

    instance: Any
    shared: bool = True

    kind = "instance"


@dataclass(slots=True, frozen=True)
class ExtendedDefinition:
    """A definition decorated by ``ServiceContainer.extend``."""

    inner: Definition
    extender: Callable[[Any, ServiceContainer], Any]
    shared: bool = True

    kind = "extended"


Definition: TypeAlias = (
    FactoryDefinition | TypeDefinition | InstanceDefinition | ExtendedDefinition
)


def is_constructible(cls: type) -> bool:
    """Return whether ``cls`` can be instantiated without caller-supplied arguments."""
    if inspect.isabstract(cls) or issubclass(cls, enum.Enum):
        return False
    # typing.Protocol sets _is_protocol only on the protocol classes themselves.
    if getattr(cls, "_is_protocol", False):
        return False
    # A C-level __new__ without an __init__ (datetime, Decimal) has no readable signature.
    if cls.__init__ is object.__init__ and cls.__new__ is not object.__new__:
        return inspect.isfunction(cls.__new__)
    return True


def classify_definition(
    service_id: ServiceId | None, definition: Any, *, shared: bool
) -> Definition:
    """Wrap a raw registration value in the matching definition variant.

    Classes are checked before plain callables because every class is callable.
    """
    if definition is None:
        raise InvalidDefinition(service_id, definition, "None is not a service definition")
    if isinstance(definition, type):
        return TypeDefinition(definition, shared=shared)
    if callable(definition):
        return FactoryDefinition(definition, shared=shared)
    return InstanceDefinition(definition, shared=shared)


@dataclass(slots=True)
class ServiceDescriptor:
    """Summary of one registered service, used for introspection and the CLI."""

    service_id: ServiceId
    kind: str
    shared: bool
    cached: bool
    aliases: tuple[ServiceId, ...]


__all__ = [
    "Definition",
    "ExtendedDefinition",
    "FactoryDefinition",
    "InstanceDefinition",
    "ServiceDescriptor",
    "TypeDefinition",
    "classify_definition",
    "is_constructible",
]
