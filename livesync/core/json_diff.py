"""Deterministic structural diff for JSON-like documents.

Produces a stable, ordered list of DiffEntry records for two values.

Ordering guarantees:
- dict: removed keys (sorted), then added keys (sorted), then common keys (sorted, recursed)
- list: by index; removals at the tail (last index first), then additions at the tail
- dict keys become str path segments; int segments always mean list indices
- Type mismatch: CHANGE of the whole node
- int vs float treated as compatible numeric type; bool is not numeric

Array additions and removals only ever happen at the tail. Interior inserts
show up as element-wise CHANGE entries followed by a tail CREATE.
"""
from __future__ import annotations

from typing import Any, List

from .types import DiffEntry, Path


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _sort_key(key: Any) -> str:
    return str(key)


def _segment(key: Any) -> str:
    # mapping keys are always field names, never array indices
    return key if isinstance(key, str) else str(key)


def json_diff(old: Any, new: Any, path: Path = ()) -> List[DiffEntry]:
    """Produce a deterministic diff between two values."""
    entries: List[DiffEntry] = []

    if old is None and new is None:
        return entries

    if type(old) is not type(new):
        if _is_number(old) and _is_number(new):
            if old != new:
                entries.append(DiffEntry.change(path, old, new))
            return entries
        entries.append(DiffEntry.change(path, old, new))
        return entries

    if isinstance(old, dict):
        old_keys = set(old.keys())
        new_keys = set(new.keys())
        for k in sorted(old_keys - new_keys, key=_sort_key):
            entries.append(DiffEntry.remove(path + (_segment(k),), old[k]))
        for k in sorted(new_keys - old_keys, key=_sort_key):
            entries.append(DiffEntry.create(path + (_segment(k),), new[k]))
        for k in sorted(old_keys & new_keys, key=_sort_key):
            entries.extend(json_diff(old[k], new[k], path + (_segment(k),)))
        return entries

    if isinstance(old, list):
        min_len = min(len(old), len(new))
        for i in range(min_len):
            entries.extend(json_diff(old[i], new[i], path + (i,)))
        if len(old) > len(new):
            for i in range(len(old) - 1, len(new) - 1, -1):
                entries.append(DiffEntry.remove(path + (i,), old[i]))
        elif len(new) > len(old):
            for i in range(len(old), len(new)):
                entries.append(DiffEntry.create(path + (i,), new[i]))
        return entries

    if old != new:
        entries.append(DiffEntry.change(path, old, new))
    return entries
