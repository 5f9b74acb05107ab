"""
filerecord CLI — inspect the record types declared in filerecord.yaml.

Commands:
- filerecord types              — List record types with their patterns
- filerecord ls TYPE            — List records (optionally --where k=v)
- filerecord show TYPE SELECTOR — Print a record's body
- filerecord count TYPE         — Count records
- filerecord path TYPE k=v ...  — Path a record with these attributes would have
- filerecord check              — Validate config and base directories
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Dict, List, Optional

from filerecord.engine.errors import FileRecordError

logger = logging.getLogger("filerecord.cli")


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="filerecord",
        description="filerecord — directory trees as record stores",
    )
    parser.add_argument("--config", default=None, help="Path to filerecord.yaml (default: auto-discover)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("types", help="List configured record types")

    ls_parser = subparsers.add_parser("ls", help="List records of a type")
    ls_parser.add_argument("record_type", help="Record type name")
    ls_parser.add_argument(
        "--where", action="append", default=[], metavar="KEY=VALUE",
        help="Attribute equality condition (repeatable)",
    )
    ls_parser.add_argument("--json", action="store_true", help="Emit JSON instead of paths")

    show_parser = subparsers.add_parser("show", help="Print a record's body")
    show_parser.add_argument("record_type", help="Record type name")
    show_parser.add_argument("selector", help="Path, identifier or path fragment")

    count_parser = subparsers.add_parser("count", help="Count records of a type")
    count_parser.add_argument("record_type", help="Record type name")

    path_parser = subparsers.add_parser("path", help="Path for a set of attributes")
    path_parser.add_argument("record_type", help="Record type name")
    path_parser.add_argument("attributes", nargs="*", metavar="KEY=VALUE")

    subparsers.add_parser("check", help="Validate configuration and base directories")

    args = parser.parse_args(argv)

    commands = {
        "types": cmd_types,
        "ls": cmd_ls,
        "show": cmd_show,
        "count": cmd_count,
        "path": cmd_path,
        "check": cmd_check,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    from filerecord.engine.logging import shutdown_logging

    try:
        return handler(args)
    except FileRecordError as e:
        print(f"[ERROR] {e.message}", file=sys.stderr)
        return 1
    finally:
        shutdown_logging()


def _parse_pairs(pairs: List[str]) -> Dict[str, str]:
    result = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise FileRecordError(f"Expected KEY=VALUE, got '{pair}'")
        result[key] = value
    return result


def _boot(args: argparse.Namespace):
    from filerecord.engine.config import bootstrap, load_config
    from filerecord.engine.registry import schema_registry

    config = load_config(args.config)
    bootstrap(config)
    return schema_registry


def _store(args: argparse.Namespace):
    return _boot(args).resolve_or_raise(args.record_type)


def cmd_types(args: argparse.Namespace) -> int:
    """List record types with glob/match patterns."""
    registry = _boot(args)
    if registry.count == 0:
        print("[WARN] No record types configured.")
        return 0
    for store in registry.get_all():
        info = store.describe()
        kind = "dir " if info["directory"] else "file"
        print(f"{info['name']:<20} {kind} {info['glob']:<30} {info['match']}")
        print(f"{'':<20}      base={info['base_directory']} attributes={info['attributes']}")
    return 0


def cmd_ls(args: argparse.Namespace) -> int:
    """List records, optionally filtered."""
    store = _store(args)
    records = store.find_all(_parse_pairs(args.where))
    if args.json:
        print(json.dumps([r.to_dict() for r in records], indent=2))
    else:
        for record in records:
            print(record.path)
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Print the body of one record."""
    from filerecord.helpers import find_by_id

    store = _store(args)
    record = find_by_id(store, args.selector)
    if record is None:
        print(f"[ERROR] No single {store.name} matches '{args.selector}'", file=sys.stderr)
        return 1
    sys.stdout.write(record.body.decode("utf-8", errors="replace"))
    return 0


def cmd_count(args: argparse.Namespace) -> int:
    """Count records of a type."""
    print(_store(args).count())
    return 0


def cmd_path(args: argparse.Namespace) -> int:
    """Print the path synthesized from attributes."""
    store = _store(args)
    print(store.path_for(_parse_pairs(args.attributes)))
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """
    Validate configuration: every record type compiles and has a usable base directory.

    Read-only: missing base directories are reported, not created.
    """
    from filerecord.core.location import compile_location
    from filerecord.engine.config import get_project_root, load_config, resolve_base_directory

    config = load_config(args.config)
    root = get_project_root()
    errors = 0
    for type_config in config.record_types:
        try:
            compiled = compile_location(type_config.location)
        except FileRecordError as e:
            print(f"[ERROR] {type_config.name}: {e.message}")
            errors += 1
            continue

        base = resolve_base_directory(type_config, config, root)
        if base.exists() and not base.is_dir():
            print(f"[ERROR] {type_config.name}: {base} is not a directory")
            errors += 1
            continue
        if not base.exists():
            print(f"[WARN] {type_config.name}: {base} does not exist yet (created on first use)")
        print(f"[OK] {type_config.name}: {compiled.glob_pattern}")

    print(f"\n{'All record types valid!' if errors == 0 else f'{errors} error(s) found.'}")
    return 1 if errors else 0


if __name__ == "__main__":
    sys.exit(main())
