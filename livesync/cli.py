"""livesync CLI.

Entry point for the ``livesync`` command-line tool.

Usage:
    livesync diff <old> <new> [--format json|text] [--entries] [-v]

Exits with status 1 when the documents differ, 2 when a file cannot be read.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

import yaml

from .core.document import prepare_document
from .core.json_diff import json_diff
from .core.reconcile import iter_entries, reconcile
from .core.types import (
    AddCommand,
    Command,
    DeleteCommand,
    DiffEntry,
    DiffType,
    LiveSyncError,
    dotted,
)
from .importer import import_document
from .storage.workspace import WorkspaceStore

# ---------------------------------------------------------------------------
# Text formatter
# ---------------------------------------------------------------------------


def _compact(value: Any) -> str:
    text = json.dumps(value, default=str)
    if len(text) > 40:
        text = text[:37] + "..."
    return text


def _format_entry(entry: DiffEntry) -> str:
    path = dotted(entry.path)
    if entry.type == DiffType.CHANGE:
        return f"{entry.type.value} {path}: {_compact(entry.old_value)} -> {_compact(entry.value)}"
    if entry.type == DiffType.CREATE:
        return f"{entry.type.value} {path}: {_compact(entry.value)}"
    return f"{entry.type.value} {path}: {_compact(entry.old_value)}"


def _format_command(command: Command) -> str:
    if isinstance(command, AddCommand):
        label = command.entity.get("path") or command.entity.get("name") or command.entity.get("url")
        suffix = f" {label}" if label else ""
        return f"add {command.kind.value}{suffix} ({command.entity['uid'][:8]})"
    if isinstance(command, DeleteCommand):
        return f"delete {command.kind.value} ({command.uid[:8]})"
    return f"edit {command.kind.value} ({command.uid[:8]}) {command.field}: {_compact(command.value)}"


def _format_text(items: List[str], title: str) -> str:
    if not items:
        return "No changes"
    lines = [f"{title}: {len(items)}"]
    lines.extend(f"  {item}" for item in items)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _load_document(path: str) -> Any:
    try:
        with open(path, encoding="utf-8") as fh:
            document = yaml.safe_load(fh)
    except OSError as exc:
        print(f"Error: cannot read '{path}': {exc.strerror}", file=sys.stderr)
        sys.exit(2)
    except yaml.YAMLError as exc:
        print(f"Error: '{path}' is not valid YAML or JSON: {exc}", file=sys.stderr)
        sys.exit(2)
    return prepare_document(document)


def _cmd_diff(args: argparse.Namespace) -> None:
    old = _load_document(args.old)
    new = _load_document(args.new)
    diff = json_diff(old, new)

    if args.entries:
        entries = list(iter_entries(diff))
        if args.format == "json":
            print(json.dumps([e.to_dict() for e in entries], indent=2, default=str))
        else:
            print(_format_text([_format_entry(e) for e in entries], "Diff entries"))
        changed = bool(entries)
    else:
        store = WorkspaceStore()
        try:
            collection_uid = import_document(old, store)
        except LiveSyncError as exc:
            print(f"Error: cannot import '{args.old}': {exc}", file=sys.stderr)
            sys.exit(2)
        commands = reconcile(diff, store, collection_uid, apply=store.apply)
        if args.format == "json":
            print(json.dumps([c.to_dict() for c in commands], indent=2, default=str))
        else:
            print(_format_text([_format_command(c) for c in commands], "Commands"))
        changed = bool(commands)

    if changed:
        sys.exit(1)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="livesync",
        description="livesync: reconcile OpenAPI document changes into workspace commands",
    )
    subparsers = parser.add_subparsers(dest="command")

    diff_parser = subparsers.add_parser(
        "diff", help="Plan the commands between two document versions"
    )
    diff_parser.add_argument("old", help="Previous document (YAML or JSON)")
    diff_parser.add_argument("new", help="Current document (YAML or JSON)")
    diff_parser.add_argument(
        "--format",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)",
    )
    diff_parser.add_argument(
        "--entries",
        action="store_true",
        help="Print the combined diff entries instead of commands",
    )
    diff_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log dropped diff entries"
    )
    diff_parser.set_defaults(func=_cmd_diff)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
