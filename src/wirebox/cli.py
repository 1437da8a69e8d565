"""Command-line entry point for inspecting and checking a container."""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

from wirebox.core import (
    ServiceContainer,
    configure_logging,
    load_app_settings,
)
from wirebox.core.interfaces import format_service_id


class TargetError(RuntimeError):
    """Raised when a ``module:attribute`` target cannot produce a container."""


def build_parser() -> argparse.ArgumentParser:
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(description="Inspect a wirebox service container")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file containing configuration overrides.",
    )
    parser.add_argument(
        "command",
        choices=["list", "check"],
        help="Operation to execute.",
    )
    parser.add_argument(
        "target",
        help=(
            "Container to load as module:attribute; the attribute is a container "
            "or a zero-argument callable returning one."
        ),
    )
    return parser


def load_container(target: str) -> ServiceContainer:
    """Import ``module:attribute`` and return the container it names."""
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise TargetError(f"Target '{target}' must look like module:attribute")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise TargetError(f"Cannot import module '{module_name}': {exc}") from exc
    try:
        candidate = getattr(module, attribute)
    except AttributeError as exc:
        raise TargetError(f"Module '{module_name}' has no attribute '{attribute}'") from exc

    if callable(candidate) and not isinstance(candidate, ServiceContainer):
        candidate = candidate()
    if not isinstance(candidate, ServiceContainer):
        raise TargetError(f"Target '{target}' did not produce a ServiceContainer")
    return candidate


def execute(args: argparse.Namespace, container: ServiceContainer) -> int:
    """Execute the requested command and return the process exit code."""
    if args.command == "list":
        _run_list(container)
        return 0
    return _run_check(container)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_app_settings(env_file=args.env_file)
    configure_logging(settings.logging)
    try:
        container = load_container(args.target)
    except TargetError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    return execute(args, container)


def _run_list(container: ServiceContainer) -> None:
    """Print one row per registered definition, then pending deferred ids."""
    descriptors = container.describe()
    pending = container.deferred_ids
    if not descriptors and not pending:
        print("No services registered.")
        return

    print(f"Showing {len(descriptors)} service(s):")
    header = f"{'Service':<40}  {'Kind':<9}  {'Lifecycle':<9}  {'Cached':<6}  Aliases"
    print(header)
    print("-" * len(header))
    for descriptor in descriptors:
        lifecycle = "shared" if descriptor.shared else "transient"
        cached = "yes" if descriptor.cached else "-"
        aliases = ", ".join(format_service_id(alias) for alias in descriptor.aliases)
        print(
            f"{format_service_id(descriptor.service_id):<40}  {descriptor.kind:<9}  "
            f"{lifecycle:<9}  {cached:<6}  {aliases or '-'}"
        )

    if pending:
        print(f"Deferred (not loaded): {', '.join(format_service_id(i) for i in pending)}")


def _run_check(container: ServiceContainer) -> int:
    """Resolve every known id and report failures; returns 1 if any failed."""
    service_ids = container.get_service_ids()
    failures = 0
    for service_id in service_ids:
        label = format_service_id(service_id)
        try:
            container.get(service_id)
        except Exception as exc:
            failures += 1
            print(f"FAIL  {label}: {type(exc).__name__}: {exc}")
            continue
        print(f"ok    {label}")

    total = len(service_ids)
    print(f"{total - failures}/{total} service(s) resolved.")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
