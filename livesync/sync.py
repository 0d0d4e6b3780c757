"""
Live sync of a collection with the document it was imported from.

``LiveSync.update`` is handed the latest document (fetching is the caller's
business). The document is compared by hash with the cached copy for the
collection's ``documentUrl``; when it changed, the structural diff is
reconciled into commands that are applied to the workspace as they are built.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from .core.canon import document_hash
from .core.document import prepare_document
from .core.json_diff import json_diff
from .core.reconcile import SyncPolicy, reconcile
from .core.types import Command, EntityKind, LiveSyncError
from .storage.store import CachedDocument, MemoryDocumentCache
from .storage.workspace import WorkspaceStore

logger = logging.getLogger("livesync.sync")


class DocumentCache(Protocol):
    def load(self, url: str) -> Optional[CachedDocument]: ...

    def save(self, url: str, document: Any) -> CachedDocument: ...


class SyncStatus(str, Enum):
    STORED = "stored"
    UNCHANGED = "unchanged"
    SYNCED = "synced"


@dataclass(frozen=True)
class SyncResult:
    """
    Outcome of a single update.

    Attributes:
        url: Document url of the collection
        status: stored (first document seen), unchanged (same hash) or synced
        hash: Hash of the document passed in
        commands: Commands applied to the workspace, in order
    """

    url: str
    status: SyncStatus
    hash: str
    commands: List[Command] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.commands)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "status": self.status.value,
            "hash": self.hash,
            "commands": [c.to_dict() for c in self.commands],
        }


@dataclass
class LiveSync:
    workspace: WorkspaceStore
    cache: DocumentCache = field(default_factory=MemoryDocumentCache)
    policy: SyncPolicy = field(default_factory=SyncPolicy.default)

    def update(self, collection_uid: str, document: Any) -> SyncResult:
        """Bring the collection in line with ``document``.

        Raises:
            UnknownEntityError: If the collection does not exist
            LiveSyncError: If the collection has no document url or has live
                sync turned off
        """
        collection = self.workspace.get(EntityKind.COLLECTION, collection_uid)
        url = collection.get("documentUrl")
        if not url:
            raise LiveSyncError(f"Collection '{collection_uid}' has no documentUrl")
        if not collection.get("liveSync"):
            raise LiveSyncError(f"Live sync is off for collection '{collection_uid}'")

        document = prepare_document(document)

        new_hash = document_hash(document)
        cached = self.cache.load(url)

        if cached is None:
            self.cache.save(url, document)
            logger.info("Stored first document for %s", url)
            return SyncResult(url, SyncStatus.STORED, new_hash)

        if cached.hash == new_hash:
            logger.debug("Document at %s is unchanged", url)
            return SyncResult(url, SyncStatus.UNCHANGED, new_hash)

        diff = json_diff(cached.document, document)
        commands = reconcile(
            diff,
            self.workspace,
            collection_uid,
            policy=self.policy,
            apply=self.workspace.apply,
        )
        self.cache.save(url, document)
        logger.info(
            "Synced %s: %d diff entries, %d commands", url, len(diff), len(commands)
        )
        return SyncResult(url, SyncStatus.SYNCED, new_hash, commands)
