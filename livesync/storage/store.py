from __future__ import annotations

import json
import os
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..core.canon import document_hash
from ..core.document import stringify_keys
from ..version import CACHE_SCHEMA_VERSION, LIVESYNC_VERSION


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class CachedDocument:
    """Last document seen for a url."""

    url: str
    hash: str
    document: Any
    updated_at: str

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "hash": self.hash,
            "document": self.document,
            "updated_at": self.updated_at,
        }


@dataclass
class MemoryDocumentCache:
    entries: Dict[str, CachedDocument] = field(default_factory=dict)

    def load(self, url: str) -> Optional[CachedDocument]:
        return self.entries.get(url)

    def save(self, url: str, document: Any) -> CachedDocument:
        cached = CachedDocument(
            url=url,
            hash=document_hash(document),
            document=stringify_keys(document),
            updated_at=_utc_now(),
        )
        self.entries[url] = cached
        return cached

    def delete(self, url: str) -> None:
        self.entries.pop(url, None)


@dataclass
class SQLiteDocumentCache:
    path: str = "livesync.db"

    def __post_init__(self) -> None:
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    url TEXT PRIMARY KEY,
                    hash TEXT NOT NULL,
                    document_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    livesync_version TEXT,
                    schema_version TEXT
                )
                """
            )

    def load(self, url: str) -> Optional[CachedDocument]:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT url, hash, document_json, updated_at
                FROM documents WHERE url = ?
                """,
                (url,),
            ).fetchone()
        if row is None:
            return None
        return CachedDocument(
            url=row["url"],
            hash=row["hash"],
            document=json.loads(row["document_json"]),
            updated_at=row["updated_at"],
        )

    def save(self, url: str, document: Any) -> CachedDocument:
        cached = CachedDocument(
            url=url,
            hash=document_hash(document),
            document=stringify_keys(document),
            updated_at=_utc_now(),
        )
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO documents
                (url, hash, document_json, updated_at, livesync_version, schema_version)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    url,
                    cached.hash,
                    json.dumps(cached.document, sort_keys=True, default=str),
                    cached.updated_at,
                    LIVESYNC_VERSION,
                    CACHE_SCHEMA_VERSION,
                ),
            )
        return cached

    def delete(self, url: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM documents WHERE url = ?", (url,))
