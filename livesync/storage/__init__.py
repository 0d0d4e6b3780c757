"""Storage implementations for livesync."""

from .store import CachedDocument, MemoryDocumentCache, SQLiteDocumentCache
from .workspace import UnknownEntityError, WorkspaceStore

__all__ = [
    "CachedDocument",
    "MemoryDocumentCache",
    "SQLiteDocumentCache",
    "UnknownEntityError",
    "WorkspaceStore",
]
