"""Service container: registry, alias table and constructor-introspecting resolver."""

from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import AbstractContextManager, contextmanager, nullcontext
from typing import Any, TypeVar

from .config import ContainerSettings
from .interfaces import (
    CircularDependency,
    InvalidDefinition,
    ServiceId,
    ServiceNotFound,
    ServiceProvider,
    UnresolvableParameter,
    format_service_id,
)
from .introspection import (
    ParameterSpec,
    describe_target,
    inspect_parameters,
    positional_capacity,
)
from .models import (
    Definition,
    ExtendedDefinition,
    FactoryDefinition,
    InstanceDefinition,
    ServiceDescriptor,
    TypeDefinition,
    classify_definition,
    is_constructible,
)

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


class ServiceContainer:
    """Registers service definitions and resolves them into instances.

    A definition is a factory taking the container, a class wired by
    introspecting its constructor, or a ready-made instance. Shared
    definitions are cached after the first resolution; transient ones are
    rebuilt on every ``get``. Aliases add one level of indirection in front
    of the registry.
    """

    def __init__(
        self,
        definitions: Mapping[ServiceId, Any] | None = None,
        settings: ContainerSettings | None = None,
    ) -> None:
        """Initialise container storage and register any initial definitions as shared."""
        self._settings = settings or ContainerSettings()
        self._lock: AbstractContextManager[Any] = (
            threading.RLock() if self._settings.thread_safe else nullcontext()
        )
        self._definitions: dict[ServiceId, Definition] = {}
        self._instances: dict[ServiceId, Any] = {}
        self._aliases: dict[ServiceId, ServiceId] = {}
        self._providers: list[ServiceProvider] = []
        self._deferred: dict[ServiceId, ServiceProvider] = {}
        self._resolving: list[tuple[bool, ServiceId]] = []

        for service_id, definition in (definitions or {}).items():
            self.set(service_id, definition)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def set(
        self, service_id: ServiceId, definition: Any, shared: bool = True
    ) -> ServiceContainer:
        """Store a definition under ``service_id``, replacing any previous one.

        Ids are not validated; re-registering an id keeps the last definition
        and drops any instance cached for it.
        """
        record = classify_definition(service_id, definition, shared=shared)
        with self._lock:
            if service_id in self._definitions:
                LOGGER.debug("Replacing definition for %s", service_id)
            self._definitions[service_id] = record
            self._instances.pop(service_id, None)
        LOGGER.debug(
            "Registered %s definition for %s (shared=%s)", record.kind, service_id, shared
        )
        return self

    def singleton(self, service_id: ServiceId, definition: Any) -> ServiceContainer:
        """Register a shared definition."""
        return self.set(service_id, definition, shared=True)

    def factory(self, service_id: ServiceId, definition: Any) -> ServiceContainer:
        """Register a transient definition, rebuilt on every resolution."""
        return self.set(service_id, definition, shared=False)

    def alias(self, alias_id: ServiceId, target_id: ServiceId) -> ServiceContainer:
        """Make ``alias_id`` resolve to ``target_id``; the target may not exist yet."""
        with self._lock:
            self._aliases[alias_id] = target_id
        LOGGER.debug("Aliased %s -> %s", alias_id, target_id)
        return self

    def register(self, provider: ServiceProvider) -> ServiceContainer:
        """Apply a provider, or park it until one of its ids is requested if deferred."""
        name = type(provider).__name__
        with self._lock:
            provided = tuple(provider.provides())
            if self._settings.defer_providers and provider.is_deferred() and provided:
                for service_id in provided:
                    self._deferred[service_id] = provider
                self._providers.append(provider)
                LOGGER.info(
                    "Deferred provider %s for %d service(s)", name, len(provided)
                )
                return self

            provider.register(self)
            self._providers.append(provider)
        LOGGER.info("Registered provider %s", name)
        return self

    def extend(
        self, service_id: ServiceId, extender: Callable[..., Any]
    ) -> ServiceContainer:
        """Decorate an existing definition.

        The replacement resolves the original definition, then returns
        ``extender(instance, container)``. The sharing flag is kept and any
        cached instance is discarded.
        """
        with self._lock:
            canonical = self._prepare(service_id)
            record = self._definitions.get(canonical)
            if record is None:
                raise ServiceNotFound(canonical)
            self._definitions[canonical] = ExtendedDefinition(
                record, extender, shared=record.shared
            )
            if self._instances.pop(canonical, _MISSING) is not _MISSING:
                LOGGER.debug("Invalidated cached instance for %s", canonical)
        LOGGER.debug("Extended definition for %s", canonical)
        return self

    def clear(self) -> None:
        """Forget every definition, instance, alias and provider."""
        with self._lock:
            self._definitions.clear()
            self._instances.clear()
            self._aliases.clear()
            self._providers.clear()
            self._deferred.clear()
            self._resolving.clear()
        LOGGER.info("Container cleared")

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def has(self, service_id: ServiceId) -> bool:
        """Return whether ``get(service_id)`` would find a definition or instance."""
        with self._lock:
            canonical = self._prepare(service_id)
            return canonical in self._definitions or canonical in self._instances

    def __contains__(self, service_id: object) -> bool:
        return self.has(service_id)

    def get(self, service_id: ServiceId) -> Any:
        """Resolve ``service_id`` to an instance, caching it when shared."""
        with self._lock:
            canonical = self._prepare(service_id)
            if canonical in self._instances:
                return self._instances[canonical]

            record = self._definitions.get(canonical)
            if record is None:
                raise ServiceNotFound(canonical)

            with self._guard(canonical):
                instance = self._build(record, canonical)

            if record.shared:
                self._instances[canonical] = instance
                LOGGER.debug("Cached shared instance for %s", canonical)
            return instance

    def try_get(self, service_id: ServiceId, default: Any = None) -> Any:
        """Resolve ``service_id``, returning ``default`` if it is not registered.

        A missing dependency of a registered service still raises.
        """
        with self._lock:
            try:
                return self.get(service_id)
            except ServiceNotFound as exc:
                if exc.service_id != self._aliases.get(service_id, service_id):
                    raise
                return default

    def is_shared(self, service_id: ServiceId) -> bool:
        """Return the sharing flag of the definition behind ``service_id``."""
        with self._lock:
            canonical = self._prepare(service_id)
            record = self._definitions.get(canonical)
            if record is None:
                raise ServiceNotFound(canonical)
            return record.shared

    def make(self, cls: type[T], overrides: Mapping[str, Any] | None = None) -> T:
        """Construct a fresh ``cls`` without reading or writing the instance cache.

        ``overrides`` supplies values for parameters by name; everything else
        is resolved as for a registered class.
        """
        if not isinstance(cls, type):
            raise InvalidDefinition(None, cls, "make() expects a class")
        with self._lock, self._guard(cls, direct=True):
            return self._construct(cls, dict(overrides or {}), owner=None)

    def call(
        self, function: Callable[..., T], overrides: Mapping[str, Any] | None = None
    ) -> T:
        """Invoke ``function`` with its parameters resolved from the container."""
        with self._lock:
            specs = inspect_parameters(function)
            args, kwargs = self._resolve_arguments(
                specs, dict(overrides or {}), describe_target(function)
            )
        return function(*args, **kwargs)

    def warm(self, service_ids: Iterable[ServiceId] | None = None) -> list[ServiceId]:
        """Resolve services ahead of use so later lookups only read the cache.

        Without ``service_ids`` every deferred provider is loaded and every
        shared definition is resolved.
        """
        with self._lock:
            if service_ids is None:
                for provider in list(dict.fromkeys(self._deferred.values())):
                    self._load_provider(provider)
                targets = [
                    service_id
                    for service_id, record in self._definitions.items()
                    if record.shared
                ]
            else:
                targets = list(service_ids)

            warmed: list[ServiceId] = []
            for service_id in targets:
                self.get(service_id)
                warmed.append(service_id)
        LOGGER.info("Warmed %d service(s)", len(warmed))
        return warmed

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def get_service_ids(self) -> list[ServiceId]:
        """Return every known id: definitions, cached instances, aliases and pending deferred ids."""
        with self._lock:
            return list(
                dict.fromkeys(
                    [
                        *self._definitions,
                        *self._instances,
                        *self._aliases,
                        *self._deferred,
                    ]
                )
            )

    def describe(self) -> list[ServiceDescriptor]:
        """Summarise each registered definition."""
        with self._lock:
            return [
                ServiceDescriptor(
                    service_id=service_id,
                    kind=record.kind,
                    shared=record.shared,
                    cached=service_id in self._instances,
                    aliases=tuple(
                        source
                        for source, target in self._aliases.items()
                        if target == service_id
                    ),
                )
                for service_id, record in self._definitions.items()
            ]

    @property
    def providers(self) -> tuple[ServiceProvider, ...]:
        """Registered providers in registration order."""
        return tuple(self._providers)

    @property
    def deferred_ids(self) -> tuple[ServiceId, ...]:
        """Ids advertised by deferred providers that have not been loaded yet."""
        return tuple(self._deferred)

    @property
    def settings(self) -> ContainerSettings:
        return self._settings

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _prepare(self, service_id: ServiceId) -> ServiceId:
        """Load any deferred provider for ``service_id`` and follow one alias hop."""
        if (
            service_id in self._deferred
            and service_id not in self._definitions
            and service_id not in self._aliases
        ):
            self._load_provider(self._deferred[service_id])
        canonical = self._aliases.get(service_id, service_id)
        if canonical in self._deferred and canonical not in self._definitions:
            self._load_provider(self._deferred[canonical])
        return canonical

    def _load_provider(self, provider: ServiceProvider) -> None:
        for service_id in [
            key for key, pending in self._deferred.items() if pending is provider
        ]:
            del self._deferred[service_id]
        provider.register(self)
        LOGGER.info("Loaded deferred provider %s", type(provider).__name__)

    @contextmanager
    def _guard(self, key: ServiceId, *, direct: bool = False) -> Iterator[None]:
        """Track ``key`` on the resolution stack, failing fast on re-entry."""
        entry = (direct, key)
        if entry in self._resolving:
            start = self._resolving.index(entry)
            chain = [item for _, item in self._resolving[start:]]
            raise CircularDependency([*chain, key])
        self._resolving.append(entry)
        try:
            yield
        finally:
            self._resolving.pop()

    def _build(self, record: Definition, service_id: ServiceId) -> Any:
        match record:
            case InstanceDefinition(instance=instance):
                return instance
            case FactoryDefinition(factory=factory):
                if positional_capacity(factory) == 0:
                    return factory()
                return factory(self)
            case TypeDefinition(cls=cls):
                return self._construct(cls, {}, owner=service_id)
            case ExtendedDefinition(inner=inner, extender=extender):
                instance = self._build(inner, service_id)
                if positional_capacity(extender) == 1:
                    return extender(instance)
                return extender(instance, self)
            case _:
                raise InvalidDefinition(service_id, record, "unrecognised definition")

    def _construct(
        self, cls: type[T], overrides: dict[str, Any], owner: ServiceId | None
    ) -> T:
        name = describe_target(cls)
        if not is_constructible(cls):
            abstract = inspect.isabstract(cls) or getattr(cls, "_is_protocol", False)
            reason = "is abstract" if abstract else "needs constructor arguments"
            raise InvalidDefinition(
                owner, cls, f"{name} {reason} and cannot be instantiated"
            )
        target = name if owner is None else f"{format_service_id(owner)} ({name})"
        specs = inspect_parameters(cls)
        args, kwargs = self._resolve_arguments(specs, overrides, target)
        return cls(*args, **kwargs)

    def _resolve_arguments(
        self,
        specs: Iterable[ParameterSpec],
        overrides: dict[str, Any],
        target: str,
    ) -> tuple[list[Any], dict[str, Any]]:
        """Resolve parameters left to right into positional and keyword arguments."""
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        accepts_kwargs = False
        for spec in specs:
            if spec.is_variadic:
                accepts_kwargs |= spec.kind is inspect.Parameter.VAR_KEYWORD
                continue
            if spec.name in overrides:
                value = overrides.pop(spec.name)
            else:
                value = self._resolve_parameter(spec, target)
            if spec.kind is inspect.Parameter.KEYWORD_ONLY:
                kwargs[spec.name] = value
            else:
                args.append(value)

        if overrides and accepts_kwargs:
            kwargs.update(overrides)
        elif overrides:
            LOGGER.debug("Ignoring unused overrides %s for %s", sorted(overrides), target)
        return args, kwargs

    def _resolve_parameter(self, spec: ParameterSpec, target: str) -> Any:
        """Registry, then direct construction, then default, then ``None`` if nullable."""
        service_type = spec.service_type
        if service_type is not None:
            if self.has(service_type):
                return self.get(service_type)
            if service_type in type(self).__mro__:
                return self
            if is_constructible(service_type):
                try:
                    with self._guard(service_type, direct=True):
                        return self._construct(service_type, {}, owner=None)
                except UnresolvableParameter:
                    if not (spec.has_default or spec.nullable):
                        raise
                    LOGGER.debug(
                        "Falling back for parameter '%s' of %s", spec.name, target
                    )

        if spec.has_default:
            return spec.default
        if spec.nullable:
            return None
        raise UnresolvableParameter(spec.name, target)


__all__ = ["ServiceContainer"]
