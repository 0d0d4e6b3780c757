"""
In-memory normalized workspace.

Holds every entity in its own table keyed by uid. A collection references its
requests, servers, tags and security schemes through uid lists. All changes
go through ``apply`` with the commands produced by the reconciler.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from ..core.nested import set_nested_value
from ..core.types import (
    AddCommand,
    Command,
    DeleteCommand,
    EditCommand,
    EntityKind,
    LiveSyncError,
    PathSegment,
    dotted,
)

logger = logging.getLogger("livesync.storage.workspace")

Entity = Dict[str, Any]

# Collection field holding the uids of each child kind
_PARENT_LIST = {
    EntityKind.REQUEST: "requests",
    EntityKind.SERVER: "servers",
    EntityKind.TAG: "tags",
    EntityKind.SECURITY_SCHEME: "securitySchemes",
}


class UnknownEntityError(LiveSyncError):
    """Raised when a command addresses a uid the workspace does not hold."""

    def __init__(self, kind: EntityKind, uid: str):
        super().__init__(f"No {kind.value} with uid '{uid}'")
        self.kind = kind
        self.uid = uid


@dataclass
class WorkspaceStore:
    collections: Dict[str, Entity] = field(default_factory=dict)
    requests: Dict[str, Entity] = field(default_factory=dict)
    servers: Dict[str, Entity] = field(default_factory=dict)
    tags: Dict[str, Entity] = field(default_factory=dict)
    security_schemes: Dict[str, Entity] = field(default_factory=dict)

    def table(self, kind: EntityKind) -> Dict[str, Entity]:
        return {
            EntityKind.COLLECTION: self.collections,
            EntityKind.REQUEST: self.requests,
            EntityKind.SERVER: self.servers,
            EntityKind.TAG: self.tags,
            EntityKind.SECURITY_SCHEME: self.security_schemes,
        }[kind]

    def get(self, kind: EntityKind, uid: str) -> Entity:
        entity = self.table(kind).get(uid)
        if entity is None:
            raise UnknownEntityError(kind, uid)
        return entity

    def apply(self, command: Command) -> None:
        """Apply a single mutation command."""
        if isinstance(command, AddCommand):
            self.add(command.kind, command.entity, command.parent_uid)
        elif isinstance(command, EditCommand):
            self.edit(command.kind, command.uid, command.path, command.value)
        elif isinstance(command, DeleteCommand):
            self.delete(command.kind, command.uid, command.parent_uid)
        else:
            raise TypeError(f"Unknown command: {command!r}")

    def add(
        self, kind: EntityKind, entity: Entity, parent_uid: Optional[str] = None
    ) -> Entity:
        stored = copy.deepcopy(entity)
        self.table(kind)[stored["uid"]] = stored
        if parent_uid is not None and kind in _PARENT_LIST:
            parent = self.get(EntityKind.COLLECTION, parent_uid)
            parent.setdefault(_PARENT_LIST[kind], []).append(stored["uid"])
        logger.debug("Added %s %s", kind.value, stored["uid"])
        return stored

    def edit(
        self,
        kind: EntityKind,
        uid: str,
        path: Sequence[PathSegment],
        value: Any,
    ) -> Entity:
        entity = self.get(kind, uid)
        set_nested_value(entity, tuple(path), copy.deepcopy(value))
        logger.debug("Edited %s %s at %s", kind.value, uid, dotted(path))
        return entity

    def delete(
        self, kind: EntityKind, uid: str, parent_uid: Optional[str] = None
    ) -> None:
        self.get(kind, uid)
        del self.table(kind)[uid]
        if kind in _PARENT_LIST:
            parents = (
                [self.get(EntityKind.COLLECTION, parent_uid)]
                if parent_uid is not None
                else list(self.collections.values())
            )
            for parent in parents:
                owned = parent.get(_PARENT_LIST[kind], [])
                if uid in owned:
                    owned.remove(uid)
        logger.debug("Deleted %s %s", kind.value, uid)

    def children(self, collection_uid: str, kind: EntityKind) -> list:
        """Entities of ``kind`` owned by a collection, in collection order."""
        collection = self.get(EntityKind.COLLECTION, collection_uid)
        table = self.table(kind)
        return [table[uid] for uid in collection.get(_PARENT_LIST[kind], []) if uid in table]
