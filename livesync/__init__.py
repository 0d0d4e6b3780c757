from .core import (
    # Core types
    AddCommand,
    Command,
    DeleteCommand,
    DiffEntry,
    DiffType,
    EditCommand,
    EntityKind,
    # Errors
    LiveSyncError,
    ShapeValidationError,
    # Reconciliation
    SyncPolicy,
    combine_rename_diffs,
    document_hash,
    json_diff,
    reconcile,
)
from .importer import import_document
from .storage import (
    CachedDocument,
    MemoryDocumentCache,
    SQLiteDocumentCache,
    UnknownEntityError,
    WorkspaceStore,
)
from .sync import LiveSync, SyncResult, SyncStatus
from .version import CACHE_SCHEMA_VERSION, LIVESYNC_VERSION

__all__ = [
    # Version
    "LIVESYNC_VERSION",
    "CACHE_SCHEMA_VERSION",
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
    "UnknownEntityError",
    # Diff and reconciliation
    "json_diff",
    "combine_rename_diffs",
    "document_hash",
    "SyncPolicy",
    "reconcile",
    # Storage
    "WorkspaceStore",
    "CachedDocument",
    "MemoryDocumentCache",
    "SQLiteDocumentCache",
    # Import and live sync
    "import_document",
    "LiveSync",
    "SyncResult",
    "SyncStatus",
]
