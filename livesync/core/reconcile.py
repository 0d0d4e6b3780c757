"""
Reconciliation of a document diff into workspace mutation commands.

Pipeline:
1. Combine rename pairs under ``paths`` into explicit CHANGE entries.
2. Expand sections created or removed wholesale into per-item entries.
3. Route every entry by its first path segment to a payload builder.
4. Hand each command to ``apply`` (when given) before the next entry is built,
   so that later lookups see earlier renames and array edits.

A failing entry produces no command and never stops the pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Protocol, Sequence

from .payloads import (
    diff_to_collection_payload,
    diff_to_request_payload,
    diff_to_security_scheme_payload,
    diff_to_server_payload,
    diff_to_tag_payload,
)
from .rename import OPERATIONS_SECTION, combine_rename_diffs
from .types import Command, DiffEntry, DiffType, EntityKind, dotted

logger = logging.getLogger("livesync.core.reconcile")

Entity = Dict[str, Any]


class Workspace(Protocol):
    """Read access to the entity tables of a workspace."""

    collections: Mapping[str, Entity]
    requests: Mapping[str, Entity]
    servers: Mapping[str, Entity]
    tags: Mapping[str, Entity]
    security_schemes: Mapping[str, Entity]


# =============================================================================
# Policy
# =============================================================================


@dataclass(frozen=True)
class SyncPolicy:
    """
    Configuration for reconciliation.

    Attributes:
        fallback_method: HTTP method used when an added operation is keyed by
            something that is not an HTTP method
        detect_renames: If True, adjacent remove/add pairs under ``paths`` are
            treated as renames
        link_operation_servers: If True, operation servers are linked to the
            collection servers with the same url
    """

    fallback_method: str = "get"
    detect_renames: bool = True
    link_operation_servers: bool = True

    @classmethod
    def default(cls) -> "SyncPolicy":
        """Create default sync policy."""
        return cls()


# =============================================================================
# Routing
# =============================================================================

SECURITY_SCHEMES_PATH = ("components", "securitySchemes")


def route(entry: DiffEntry) -> EntityKind:
    """Entity kind responsible for a diff entry."""
    head = entry.path[0] if entry.path else None
    if head == OPERATIONS_SECTION:
        return EntityKind.REQUEST
    if head == "servers":
        return EntityKind.SERVER
    if head == "tags":
        return EntityKind.TAG
    if tuple(entry.path[:2]) == SECURITY_SCHEMES_PATH and len(entry.path) > 2:
        return EntityKind.SECURITY_SCHEME
    return EntityKind.COLLECTION


def expand_sections(entry: DiffEntry) -> List[DiffEntry]:
    """Split a wholesale CREATE/REMOVE of a section into one entry per item.

    List items are removed from the last index down so that every removal
    still addresses an existing position.
    """
    if entry.type == DiffType.CHANGE:
        return [entry]

    path = tuple(entry.path)
    payload = entry.value if entry.type == DiffType.CREATE else entry.old_value

    def item(key: Any, value: Any) -> DiffEntry:
        if entry.type == DiffType.CREATE:
            return DiffEntry.create(path + (key,), value)
        return DiffEntry.remove(path + (key,), value)

    if path in (("servers",), ("tags",)) and isinstance(payload, list):
        indices = list(range(len(payload)))
        if entry.type == DiffType.REMOVE:
            indices.reverse()
        return [item(i, payload[i]) for i in indices]

    if path in ((OPERATIONS_SECTION,), SECURITY_SCHEMES_PATH) and isinstance(
        payload, dict
    ):
        return [item(key, value) for key, value in payload.items()]

    return [entry]


def build_commands(
    entry: DiffEntry,
    workspace: Workspace,
    collection: Entity,
    policy: Optional[SyncPolicy] = None,
) -> List[Command]:
    """Commands for a single (already combined) diff entry."""
    active = policy or SyncPolicy.default()
    kind = route(entry)

    if kind == EntityKind.REQUEST:
        return diff_to_request_payload(
            entry,
            collection,
            workspace.requests,
            workspace.servers,
            fallback_method=active.fallback_method,
            link_servers=active.link_operation_servers,
        )

    command: Optional[Command]
    if kind == EntityKind.SERVER:
        command = diff_to_server_payload(entry, collection, workspace.servers)
    elif kind == EntityKind.TAG:
        command = diff_to_tag_payload(entry, collection, workspace.tags)
    elif kind == EntityKind.SECURITY_SCHEME:
        command = diff_to_security_scheme_payload(
            entry, collection, workspace.security_schemes
        )
    else:
        command = diff_to_collection_payload(entry, collection)
    return [command] if command is not None else []


def iter_entries(
    diff: Sequence[DiffEntry], policy: Optional[SyncPolicy] = None
) -> Iterator[DiffEntry]:
    """Combined and expanded entries in the order they are reconciled."""
    active = policy or SyncPolicy.default()
    for combined in combine_rename_diffs(diff, detect_renames=active.detect_renames):
        if not combined.path:
            continue
        yield from expand_sections(combined)


def reconcile(
    diff: Sequence[DiffEntry],
    workspace: Workspace,
    collection_uid: str,
    *,
    policy: Optional[SyncPolicy] = None,
    apply: Optional[Callable[[Command], Any]] = None,
) -> List[Command]:
    """Translate a document diff into ordered mutation commands.

    Args:
        diff: Entries from ``json_diff(old_document, new_document)``
        workspace: Entity tables; the collection is re-read before each entry
        collection_uid: Collection the document belongs to
        policy: Sync configuration (default policy when omitted)
        apply: Called with every command as soon as it is built. Without it
            commands are only planned, and entries that depend on an earlier
            rename or array edit see the unchanged snapshots.

    Returns:
        Commands in source order; rename expansions sit at the rename position.
    """
    commands: List[Command] = []
    for entry in iter_entries(diff, policy):
        collection = workspace.collections[collection_uid]
        built = build_commands(entry, workspace, collection, policy)
        if not built:
            logger.debug("No command for %s %s", entry.type.value, dotted(entry.path))
        for command in built:
            if apply is not None:
                apply(command)
            commands.append(command)
    return commands
