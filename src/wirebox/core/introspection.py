"""Signature introspection used to wire constructor and callable parameters."""

from __future__ import annotations

import inspect
import logging
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

LOGGER = logging.getLogger(__name__)

_EMPTY = inspect.Parameter.empty
_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(slots=True, frozen=True)
class ParameterSpec:
    """One declared parameter, with its annotation reduced to a resolvable class."""

    name: str
    kind: inspect._ParameterKind
    service_type: type | None
    nullable: bool
    default: Any = _EMPTY

    @property
    def has_default(self) -> bool:
        """Whether the parameter declares a default value."""
        return self.default is not _EMPTY

    @property
    def is_variadic(self) -> bool:
        """Whether the parameter collects ``*args`` or ``**kwargs``."""
        return self.kind in _VARIADIC


def describe_target(target: Any) -> str:
    """Return a readable name for a class or callable."""
    name = getattr(target, "__qualname__", None) or getattr(target, "__name__", None)
    if name is None:
        return type(target).__qualname__
    return name


def inspect_parameters(target: Callable[..., Any]) -> tuple[ParameterSpec, ...]:
    """Return the declared parameters of a class constructor or a callable, in order.

    Classes without their own ``__init__`` (or whose signature cannot be read)
    report no parameters.
    """
    if isinstance(target, type):
        init = target.__init__
        if init is object.__init__:
            return ()
        function: Any = init
        skip_first = True
    else:
        function = target
        skip_first = False

    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        LOGGER.debug("No readable signature for %s", describe_target(target))
        return ()

    parameters = list(signature.parameters.values())
    if skip_first and parameters:
        parameters = parameters[1:]
    hints = _type_hints(
        function, parameters, target if isinstance(target, type) else None
    )

    specs: list[ParameterSpec] = []
    for parameter in parameters:
        annotation = hints.get(parameter.name, parameter.annotation)
        service_type, nullable = _reduce_annotation(annotation)
        specs.append(
            ParameterSpec(
                name=parameter.name,
                kind=parameter.kind,
                service_type=service_type,
                nullable=nullable,
                default=parameter.default,
            )
        )
    return tuple(specs)


def _type_hints(
    function: Any,
    parameters: list[inspect.Parameter],
    owner: type | None = None,
) -> dict[str, Any]:
    """Evaluate annotations, one parameter at a time when the whole set fails."""
    hint_source = function
    if not (inspect.isfunction(function) or inspect.ismethod(function)):
        hint_source = getattr(function, "__call__", function)
    try:
        return typing.get_type_hints(hint_source)
    except (NameError, SyntaxError, TypeError, AttributeError) as exc:
        LOGGER.debug(
            "Evaluating annotations one by one for %s: %s",
            describe_target(function),
            exc,
        )

    globalns = getattr(inspect.unwrap(hint_source), "__globals__", {})
    localns: dict[str, Any] = {}
    if owner is not None:
        localns.update(vars(owner))
        localns[owner.__name__] = owner

    hints: dict[str, Any] = {}
    for parameter in parameters:
        annotation = parameter.annotation
        if not isinstance(annotation, str):
            hints[parameter.name] = annotation
            continue
        try:
            hints[parameter.name] = eval(annotation, globalns, localns)
        except (NameError, SyntaxError, TypeError, AttributeError) as exc:
            LOGGER.debug(
                "Leaving parameter '%s' of %s untyped: %s",
                parameter.name,
                describe_target(function),
                exc,
            )
    return hints


def _reduce_annotation(annotation: Any) -> tuple[type | None, bool]:
    """Reduce an annotation to ``(service class or None, nullable)``."""
    if annotation is _EMPTY or annotation is Any or isinstance(annotation, str):
        return None, False

    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        members = typing.get_args(annotation)
        nullable = type(None) in members
        remaining = [member for member in members if member is not type(None)]
        if len(remaining) == 1:
            service_type, _ = _reduce_annotation(remaining[0])
            return service_type, nullable
        return None, nullable
    if origin is not None:
        return None, False

    if annotation is None or annotation is type(None):
        return None, True
    if isinstance(annotation, type) and not is_primitive(annotation):
        return annotation, False
    return None, False


def is_primitive(cls: type) -> bool:
    """Builtin types never name a service."""
    return cls.__module__ == "builtins"


def positional_capacity(function: Callable[..., Any]) -> int | None:
    """Return how many positional arguments ``function`` accepts.

    ``None`` means unlimited (``*args``) or an unreadable signature.
    """
    try:
        parameters = inspect.signature(function).parameters.values()
    except (TypeError, ValueError):
        return None
    count = 0
    for parameter in parameters:
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if parameter.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return count


__all__ = [
    "ParameterSpec",
    "describe_target",
    "inspect_parameters",
    "is_primitive",
    "positional_capacity",
]
