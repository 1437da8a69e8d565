"""Core utilities for configuration, logging, and dependency wiring."""

from .config import AppSettings, ContainerSettings, LoggingSettings, load_app_settings
from .container import ServiceContainer
from .interfaces import (
    CircularDependency,
    ContainerError,
    InvalidDefinition,
    ServiceNotFound,
    ServiceProvider,
    UnresolvableParameter,
)
from .logging import configure_logging

__all__ = [
    "AppSettings",
    "CircularDependency",
    "ContainerError",
    "ContainerSettings",
    "InvalidDefinition",
    "LoggingSettings",
    "ServiceContainer",
    "ServiceNotFound",
    "ServiceProvider",
    "UnresolvableParameter",
    "configure_logging",
    "load_app_settings",
]
