"""Protocol interfaces and error types shared by the container and its collaborators."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Sequence
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias

if TYPE_CHECKING:
    from .container import ServiceContainer

ServiceId: TypeAlias = Hashable


def format_service_id(service_id: ServiceId) -> str:
    """Return a readable label for a service id (classes render by qualified name)."""
    if isinstance(service_id, type):
        return f"{service_id.__module__}.{service_id.__qualname__}"
    return str(service_id)


class ContainerError(RuntimeError):
    """Base class for every error raised by the service container."""


class ServiceNotFound(ContainerError, LookupError):
    """Raised when an id has neither a definition nor a cached instance."""

    def __init__(self, service_id: ServiceId) -> None:
        self.service_id = service_id
        super().__init__(f"Service '{format_service_id(service_id)}' not found")


class UnresolvableParameter(ContainerError, TypeError):
    """Raised when a constructor or callable parameter has no resolution path."""

    def __init__(self, parameter: str, target: str) -> None:
        self.parameter = parameter
        self.target = target
        super().__init__(f"Cannot resolve parameter '{parameter}' for {target}")


class InvalidDefinition(ContainerError, TypeError):
    """Raised when a definition is neither a factory, a constructible class, nor an instance."""

    def __init__(self, service_id: ServiceId | None, definition: Any, reason: str) -> None:
        self.service_id = service_id
        self.definition = definition
        label = format_service_id(service_id) if service_id is not None else "<anonymous>"
        super().__init__(f"Invalid definition for '{label}': {reason}")


class CircularDependency(ContainerError):
    """Raised when resolution re-enters an id already on the resolution stack."""

    def __init__(self, chain: Sequence[ServiceId]) -> None:
        self.chain = tuple(chain)
        rendered = " -> ".join(format_service_id(item) for item in self.chain)
        super().__init__(f"Circular dependency detected: {rendered}")


class ServiceProvider(Protocol):
    """A bundle of related registrations applied to a container as a unit."""

    def register(self, container: ServiceContainer) -> None:
        """Register definitions and aliases on ``container``."""
        raise NotImplementedError

    def provides(self) -> Iterable[ServiceId]:
        """Return the service ids this provider registers."""
        raise NotImplementedError

    def is_deferred(self) -> bool:
        """Return ``True`` when registration may wait until a provided id is requested."""
        raise NotImplementedError


__all__ = [
    "CircularDependency",
    "ContainerError",
    "InvalidDefinition",
    "ServiceId",
    "ServiceNotFound",
    "ServiceProvider",
    "UnresolvableParameter",
    "format_service_id",
]
