"""Base class for service providers."""

from __future__ import annotations

from collections.abc import Iterable

from wirebox.core.container import ServiceContainer
from wirebox.core.interfaces import ServiceId
from wirebox.core.interfaces import ServiceProvider as ServiceProviderProtocol


class BaseServiceProvider(ServiceProviderProtocol):
    """Provider with eager loading and no advertised ids.

    Subclasses implement :meth:`register`; deferred providers override
    :meth:`is_deferred` and list their ids in :meth:`provides`.
    """

    def register(self, container: ServiceContainer) -> None:
        raise NotImplementedError

    def provides(self) -> Iterable[ServiceId]:
        return ()

    def is_deferred(self) -> bool:
        return False


__all__ = ["BaseServiceProvider"]
