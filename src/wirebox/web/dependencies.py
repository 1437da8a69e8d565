"""FastAPI integration: container lifespan and request-scoped injection helpers."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request

from wirebox.core.container import ServiceContainer
from wirebox.core.interfaces import ServiceId

LOGGER = logging.getLogger(__name__)


def container_lifespan(
    container: ServiceContainer, *, warm: bool = True
) -> Callable[[FastAPI], Any]:
    """Build a FastAPI lifespan that installs ``container`` on the application.

    Shared services are resolved at startup when ``warm`` is set, so request
    handlers only read the instance cache. The container is cleared on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.container = container
        if warm:
            warmed = container.warm()
            LOGGER.info("Container ready with %d warmed service(s)", len(warmed))
        try:
            yield
        finally:
            container.clear()
            LOGGER.info("Container released")

    return lifespan


def get_container(request: Request) -> ServiceContainer:
    """Dependency returning the container installed on the running application."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("No service container installed on this application")
    return container


def inject(service_id: ServiceId) -> Callable[[Request], Any]:
    """Return a dependency resolving ``service_id``; use as ``Depends(inject("db"))``."""

    def resolve(request: Request) -> Any:
        return get_container(request).get(service_id)

    return resolve


__all__ = ["container_lifespan", "get_container", "inject"]
