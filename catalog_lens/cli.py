"""Command-line interface for catalog lens."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from enum import IntEnum
from pathlib import Path
from typing import Optional

from catalog_lens.config import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    LensConfig,
    load_config,
)
from catalog_lens.manifest import collect_hints, iter_catalog_dependencies, load_manifest
from catalog_lens.resolver import is_catalog_reference
from catalog_lens.store import CatalogStore
from catalog_lens.watcher import WorkspaceWatcher


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1
    FILE_SYSTEM_ERROR = 2
    NOT_FOUND = 3


def _get_root(args: argparse.Namespace) -> Path:
    return Path(args.root) if args.root else Path.cwd()


def _get_config(args: argparse.Namespace) -> LensConfig:
    """Load config from --config, else from the project root, else defaults."""
    if args.config:
        return load_config(args.config)
    return load_config(_get_root(args) / DEFAULT_CONFIG_PATH)


def _setup_logging(config: LensConfig) -> None:
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )


def _open_store(args: argparse.Namespace) -> tuple[LensConfig, CatalogStore]:
    config = _get_config(args)
    _setup_logging(config)
    return config, CatalogStore(_get_root(args), filename=config.workspace_filename)


def _positive_float(value: str) -> float:
    """argparse type for poll intervals."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value}")
    if not number > 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def _no_workspace(store: CatalogStore) -> int:
    print(f"No {store.filename} found in {store.project_root}", file=sys.stderr)
    return ExitCode.FILE_SYSTEM_ERROR


def cmd_status(args: argparse.Namespace) -> int:
    """Show whether the project has catalogs."""
    _, store = _open_store(args)

    document = store.locate_document()
    if document is None:
        print(f"Workspace document: NOT FOUND (expected {store.project_root / store.filename})")
        return ExitCode.SUCCESS

    print(f"Workspace document: {document}")
    data = store.current_data()
    if data is None:
        print("  Catalogs: unavailable (empty or invalid document)")
        return ExitCode.SUCCESS

    print(f"  Default catalog: {len(data.default_catalog)} entries")
    print(f"  Named catalogs: {len(data.named_catalogs)}")
    for name, entries in data.named_catalogs.items():
        print(f"    {name}: {len(entries)} entries")
    return ExitCode.SUCCESS


def cmd_show(args: argparse.Namespace) -> int:
    """Print the catalogs."""
    _, store = _open_store(args)

    if not store.has_catalog_document():
        return _no_workspace(store)

    default_catalog = store.get_default_catalog()
    named_catalogs = store.get_named_catalogs()
    if default_catalog is None or named_catalogs is None:
        print("Catalogs unavailable (empty or invalid document)", file=sys.stderr)
        return ExitCode.NOT_FOUND

    if args.json:
        print(json.dumps(
            {
                "catalog": dict(default_catalog),
                "catalogs": {name: dict(entries) for name, entries in named_catalogs.items()},
            },
            indent=2,
        ))
        return ExitCode.SUCCESS

    print("catalog:")
    for package_name, version in default_catalog.items():
        print(f"  {package_name}: {version}")
    for name, entries in named_catalogs.items():
        print(f"catalog:{name}")
        for package_name, version in entries.items():
            print(f"  {package_name}: {version}")
    return ExitCode.SUCCESS


def cmd_resolve(args: argparse.Namespace) -> int:
    """Resolve one catalog reference."""
    _, store = _open_store(args)

    if not is_catalog_reference(args.reference):
        print(f"Not a catalog reference: {args.reference}", file=sys.stderr)
        return ExitCode.NOT_FOUND

    version = store.resolve_version(args.package, args.reference)
    if version is None:
        print(f"Unresolved: {args.package} {args.reference}", file=sys.stderr)
        return ExitCode.NOT_FOUND

    print(version)
    return ExitCode.SUCCESS


def cmd_locate(args: argparse.Namespace) -> int:
    """Print where a referenced catalog entry is declared."""
    _, store = _open_store(args)

    if not store.has_catalog_document():
        return _no_workspace(store)

    location = store.locate_entry(args.package, args.reference)
    if location is None:
        print(f"No catalog entry for: {args.package} {args.reference}", file=sys.stderr)
        return ExitCode.NOT_FOUND

    print(location)
    return ExitCode.SUCCESS


def cmd_hints(args: argparse.Namespace) -> int:
    """Show resolved versions for the catalog dependencies of a package.json."""
    config, store = _open_store(args)

    manifest = load_manifest(args.manifest)
    if manifest is None:
        print(f"Cannot load manifest: {args.manifest}", file=sys.stderr)
        return ExitCode.FILE_SYSTEM_ERROR

    hints = collect_hints(store, manifest, config.dependency_sections)
    for hint in hints:
        dep = hint.dependency
        print(f"{dep.section} {dep.package_name} {dep.reference} -> {hint.text}")

    total = sum(1 for _ in iter_catalog_dependencies(manifest, config.dependency_sections))
    if len(hints) < total:
        print(f"{total - len(hints)} catalog reference(s) unresolved", file=sys.stderr)
    return ExitCode.SUCCESS


def cmd_watch(args: argparse.Namespace) -> int:
    """Report catalog changes until interrupted."""
    config, store = _open_store(args)
    interval = args.interval if args.interval is not None else config.poll_interval

    def report() -> None:
        data = store.current_data()
        if data is None:
            print("catalogs: unavailable", flush=True)
        else:
            print(
                f"catalog: {len(data.default_catalog)} entries, "
                f"catalogs: {len(data.named_catalogs)}",
                flush=True,
            )

    watcher = WorkspaceWatcher(store, poll_interval=interval)
    report()
    try:
        while True:
            time.sleep(interval)
            if watcher.check():
                report()
    except KeyboardInterrupt:
        pass
    return ExitCode.SUCCESS


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="catalog-lens",
        description="Resolve pnpm catalog references from pnpm-workspace.yaml",
    )
    parser.add_argument("--root", "-r", help="Project root (default: current directory)")
    parser.add_argument(
        "--config",
        "-c",
        help=f"Path to config file (default: <root>/{DEFAULT_CONFIG_PATH})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Show workspace document status")

    show_parser = subparsers.add_parser("show", help="Print default and named catalogs")
    show_parser.add_argument("--json", action="store_true", help="Print as JSON")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve a catalog reference")
    resolve_parser.add_argument("package", help="Package name, e.g. react")
    resolve_parser.add_argument("reference", help="Catalog reference, e.g. catalog:react17")

    locate_parser = subparsers.add_parser("locate", help="Find a catalog entry in the document")
    locate_parser.add_argument("package", help="Package name, e.g. react")
    locate_parser.add_argument("reference", help="Catalog reference, e.g. catalog:")

    hints_parser = subparsers.add_parser("hints", help="Resolve catalog dependencies of a package.json")
    hints_parser.add_argument("manifest", help="Path to package.json")

    watch_parser = subparsers.add_parser("watch", help="Report catalog changes until interrupted")
    watch_parser.add_argument("--interval", type=_positive_float, help="Poll interval in seconds")

    args = parser.parse_args(argv)

    commands = {
        "status": cmd_status,
        "show": cmd_show,
        "resolve": cmd_resolve,
        "locate": cmd_locate,
        "hints": cmd_hints,
        "watch": cmd_watch,
    }

    try:
        return commands[args.command](args)
    except ConfigError as e:
        print(json.dumps(e.to_json()), file=sys.stderr)
        return ExitCode.CONFIG_ERROR


if __name__ == "__main__":
    sys.exit(main())
