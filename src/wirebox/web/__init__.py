"""FastAPI helpers for serving a container to request handlers."""

from .dependencies import container_lifespan, get_container, inject

__all__ = ["container_lifespan", "get_container", "inject"]
