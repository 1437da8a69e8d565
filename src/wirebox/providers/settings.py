"""Provider exposing loaded settings as container services."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from wirebox.core.config import (
    AppSettings,
    ContainerSettings,
    LoggingSettings,
    load_app_settings,
)
from wirebox.core.container import ServiceContainer
from wirebox.core.interfaces import ServiceId

from .base import BaseServiceProvider


class SettingsServiceProvider(BaseServiceProvider):
    """Register ``settings`` and its sections, loading them on first use."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        env_file: Path | str | None = None,
    ) -> None:
        self._settings = settings
        self._env_file = env_file

    def register(self, container: ServiceContainer) -> None:
        container.singleton("settings", self._load)
        container.singleton(
            "settings.container", lambda c: c.get("settings").container
        )
        container.singleton("settings.logging", lambda c: c.get("settings").logging)

        container.alias(AppSettings, "settings")
        container.alias(ContainerSettings, "settings.container")
        container.alias(LoggingSettings, "settings.logging")

    def provides(self) -> Iterable[ServiceId]:
        return (
            "settings",
            "settings.container",
            "settings.logging",
            AppSettings,
            ContainerSettings,
            LoggingSettings,
        )

    def is_deferred(self) -> bool:
        return True

    def _load(self) -> AppSettings:
        if self._settings is not None:
            return self._settings
        return load_app_settings(env_file=self._env_file)


__all__ = ["SettingsServiceProvider"]
