"""Core types and logic for livesync."""

from .canon import canon, document_hash, sha256_hex
from .document import dereference, prepare_document, stringify_keys
from .find import find_resource
from .json_diff import json_diff
from .parse import ParsedDiff, parse_diff
from .payloads import (
    build_request,
    diff_to_collection_payload,
    diff_to_request_payload,
    diff_to_security_scheme_payload,
    diff_to_server_payload,
    diff_to_tag_payload,
    normalize_security_scheme,
)
from .reconcile import SyncPolicy, build_commands, iter_entries, reconcile, route
from .rename import combine_rename_diffs
from .resolve import narrow_union, resolve_path
from .shapes import ParseResult, ShapeValidationError, parse, safe_parse
from .types import (
    AddCommand,
    Command,
    DeleteCommand,
    DiffEntry,
    DiffType,
    EditCommand,
    EntityKind,
    LiveSyncError,
)

__all__ = [
    # Core types
    "DiffEntry",
    "DiffType",
    "EntityKind",
    "AddCommand",
    "EditCommand",
    "DeleteCommand",
    "Command",
    # Errors
    "LiveSyncError",
    "ShapeValidationError",
    # Canonicalization
    "canon",
    "sha256_hex",
    "document_hash",
    # Document preparation
    "stringify_keys",
    "dereference",
    "prepare_document",
    # Diff
    "json_diff",
    "combine_rename_diffs",
    # Shapes
    "ParseResult",
    "parse",
    "safe_parse",
    "resolve_path",
    "narrow_union",
    "ParsedDiff",
    "parse_diff",
    "find_resource",
    # Payload builders
    "build_request",
    "diff_to_collection_payload",
    "diff_to_request_payload",
    "diff_to_server_payload",
    "diff_to_tag_payload",
    "diff_to_security_scheme_payload",
    "normalize_security_scheme",
    # Reconciliation
    "SyncPolicy",
    "route",
    "iter_entries",
    "build_commands",
    "reconcile",
]
