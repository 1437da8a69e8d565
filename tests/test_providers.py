"""Tests for eager, deferred and settings service providers."""

from __future__ import annotations

from collections.abc import Iterable

import pytest

from wirebox.core import (
    AppSettings,
    ContainerSettings,
    LoggingSettings,
    ServiceContainer,
    ServiceNotFound,
)
from wirebox.providers import BaseServiceProvider, SettingsServiceProvider


class FakeDb:
    def __init__(self, config: dict[str, str]) -> None:
        self.config = config


class DatabaseProvider(BaseServiceProvider):
    """Registers a database handle and its short aliases."""

    def __init__(self, deferred: bool = False) -> None:
        self.deferred = deferred
        self.calls = 0

    def register(self, container: ServiceContainer) -> None:
        self.calls += 1
        container.singleton("database.config", {"host": "localhost"})
        container.singleton(
            "database", lambda c: FakeDb(c.get("database.config"))
        )
        container.alias(FakeDb, "database")
        container.alias("db", "database")

    def provides(self) -> Iterable[object]:
        return ("database.config", "database", FakeDb, "db")

    def is_deferred(self) -> bool:
        return self.deferred


class SilentDeferredProvider(BaseServiceProvider):
    def __init__(self) -> None:
        self.calls = 0

    def register(self, container: ServiceContainer) -> None:
        self.calls += 1
        container.singleton("silent", "here")

    def is_deferred(self) -> bool:
        return True


def test_eager_provider_registers_immediately() -> None:
    container = ServiceContainer()
    provider = DatabaseProvider()

    container.register(provider)

    assert provider.calls == 1
    assert container.providers == (provider,)
    assert container.get("db") is container.get(FakeDb)
    assert container.get("db").config == {"host": "localhost"}


def test_deferred_provider_waits_for_first_request() -> None:
    """Deferred providers run once, when one of their ids is first requested."""

    container = ServiceContainer()
    provider = DatabaseProvider(deferred=True)

    container.register(provider)

    assert provider.calls == 0
    assert container.providers == (provider,)
    assert set(container.deferred_ids) == {"database.config", "database", FakeDb, "db"}

    db = container.get("db")

    assert provider.calls == 1
    assert isinstance(db, FakeDb)
    assert container.deferred_ids == ()
    assert container.get("database") is db
    assert provider.calls == 1


def test_has_loads_deferred_provider() -> None:
    container = ServiceContainer()
    provider = DatabaseProvider(deferred=True)
    container.register(provider)

    assert container.has(FakeDb) is True
    assert provider.calls == 1


def test_deferred_ids_are_listed_before_loading() -> None:
    container = ServiceContainer()
    provider = DatabaseProvider(deferred=True)
    container.register(provider)

    assert "db" in container.get_service_ids()
    assert provider.calls == 0


def test_explicit_registration_wins_over_deferred_provider() -> None:
    container = ServiceContainer()
    provider = DatabaseProvider(deferred=True)
    container.register(provider)
    container.singleton("database", "override")

    assert container.get("database") == "override"
    assert provider.calls == 0


def test_deferred_provider_without_ids_loads_eagerly() -> None:
    container = ServiceContainer()
    provider = SilentDeferredProvider()

    container.register(provider)

    assert provider.calls == 1
    assert container.get("silent") == "here"


def test_deferral_can_be_disabled() -> None:
    container = ServiceContainer(settings=ContainerSettings(defer_providers=False))
    provider = DatabaseProvider(deferred=True)

    container.register(provider)

    assert provider.calls == 1
    assert container.deferred_ids == ()


def test_warm_loads_deferred_providers() -> None:
    container = ServiceContainer()
    provider = DatabaseProvider(deferred=True)
    container.register(provider)

    warmed = container.warm()

    assert provider.calls == 1
    assert warmed == ["database.config", "database"]


def test_clear_drops_pending_providers() -> None:
    container = ServiceContainer()
    provider = DatabaseProvider(deferred=True)
    container.register(provider)

    container.clear()

    assert container.providers == ()
    with pytest.raises(ServiceNotFound):
        container.get("db")
    assert provider.calls == 0


def test_base_provider_requires_register() -> None:
    with pytest.raises(NotImplementedError):
        BaseServiceProvider().register(ServiceContainer())


def test_settings_provider_exposes_sections() -> None:
    settings = AppSettings(logging=LoggingSettings(level="DEBUG"))
    container = ServiceContainer()

    container.register(SettingsServiceProvider(settings))

    assert container.get(AppSettings) is settings
    assert container.get("settings.logging").level == "DEBUG"
    assert container.get(ContainerSettings) is settings.container


def test_settings_provider_feeds_constructor_injection() -> None:
    class NeedsLogging:
        def __init__(self, logging_settings: LoggingSettings) -> None:
            self.logging_settings = logging_settings

    settings = AppSettings()
    container = ServiceContainer()
    container.register(SettingsServiceProvider(settings))

    assert container.make(NeedsLogging).logging_settings is settings.logging
