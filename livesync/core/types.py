"""Diff entries, typed paths, entity kinds and workspace commands."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple, Union

PathSegment = Union[str, int]
Path = Tuple[PathSegment, ...]


class LiveSyncError(Exception):
    """Base exception for livesync errors."""

    pass


def is_index(segment: Any) -> bool:
    """True for list indices. ``bool`` is an ``int`` subclass but never an index."""
    return isinstance(segment, int) and not isinstance(segment, bool)


def dotted(path: Iterable[PathSegment]) -> str:
    return ".".join(str(segment) for segment in path)


class DiffType(str, Enum):
    """Kind of a single structural difference."""

    CREATE = "CREATE"
    REMOVE = "REMOVE"
    CHANGE = "CHANGE"


@dataclass(frozen=True)
class DiffEntry:
    """
    One structural difference between two document versions.

    Attributes:
        type: CREATE, REMOVE or CHANGE
        path: Keys and indices from the document root
        value: New value (None for REMOVE)
        old_value: Previous value (None for CREATE)
    """

    type: DiffType
    path: Path
    value: Any = None
    old_value: Any = None

    @classmethod
    def create(cls, path: Iterable[PathSegment], value: Any) -> "DiffEntry":
        return cls(DiffType.CREATE, tuple(path), value=value)

    @classmethod
    def remove(cls, path: Iterable[PathSegment], old_value: Any) -> "DiffEntry":
        return cls(DiffType.REMOVE, tuple(path), old_value=old_value)

    @classmethod
    def change(
        cls, path: Iterable[PathSegment], old_value: Any, value: Any
    ) -> "DiffEntry":
        return cls(DiffType.CHANGE, tuple(path), value=value, old_value=old_value)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.type.value, "path": list(self.path)}
        if self.type != DiffType.CREATE:
            result["oldValue"] = self.old_value
        if self.type != DiffType.REMOVE:
            result["value"] = self.value
        return result


# =============================================================================
# Mutation commands
# =============================================================================


class EntityKind(str, Enum):
    """Entity tables of the normalized workspace."""

    COLLECTION = "collection"
    REQUEST = "request"
    SERVER = "server"
    TAG = "tag"
    SECURITY_SCHEME = "securityScheme"


@dataclass(frozen=True)
class AddCommand:
    kind: EntityKind
    entity: Dict[str, Any]
    parent_uid: str

    method = "add"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "kind": self.kind.value,
            "entity": self.entity,
            "parentUid": self.parent_uid,
        }


@dataclass(frozen=True)
class EditCommand:
    """Replace the value at ``path`` inside entity ``uid``."""

    kind: EntityKind
    uid: str
    path: Path
    value: Any

    method = "edit"

    @property
    def field(self) -> str:
        return dotted(self.path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "kind": self.kind.value,
            "uid": self.uid,
            "path": self.field,
            "value": self.value,
        }


@dataclass(frozen=True)
class DeleteCommand:
    kind: EntityKind
    uid: str
    parent_uid: Optional[str] = None

    method = "delete"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "kind": self.kind.value,
            "uid": self.uid,
            "parentUid": self.parent_uid,
        }


Command = Union[AddCommand, EditCommand, DeleteCommand]
