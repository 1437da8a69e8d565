"""Service container with constructor introspection, aliases and providers."""

from wirebox.core import (
    AppSettings,
    CircularDependency,
    ContainerError,
    ContainerSettings,
    InvalidDefinition,
    ServiceContainer,
    ServiceNotFound,
    ServiceProvider,
    UnresolvableParameter,
)
from wirebox.providers import BaseServiceProvider, SettingsServiceProvider

__all__ = [
    "AppSettings",
    "BaseServiceProvider",
    "CircularDependency",
    "ContainerError",
    "ContainerSettings",
    "InvalidDefinition",
    "ServiceContainer",
    "ServiceNotFound",
    "ServiceProvider",
    "SettingsServiceProvider",
    "UnresolvableParameter",
]
