"""Rename combining for operation diffs.

A renamed path or method shows up in a structural diff as a REMOVE of the old
node immediately followed by a CREATE of the new one. ``combine_rename_diffs``
turns such pairs into explicit CHANGE entries:

    REMOVE paths./pets.get  +  CREATE paths./pets.post
        -> CHANGE paths./pets.method  get -> post

    REMOVE paths./pets  +  CREATE paths./animals
        -> CHANGE paths.path  /pets -> /animals

At the outermost level the old and new bodies are diffed as well, so that a
renamed operation whose summary also changed keeps that change as an ordinary
entry prefixed with the new location.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from .json_diff import json_diff
from .types import DiffEntry, DiffType, Path, PathSegment, is_index

OPERATIONS_SECTION = "paths"
PATH_RENAME_KEY = "path"
METHOD_RENAME_KEY = "method"


def _is_keyed_node(path: Path) -> bool:
    """A path item (paths./x) or an operation (paths./x.get)."""
    return len(path) in (2, 3) and path[0] == OPERATIONS_SECTION


def _is_rename_pair(current: DiffEntry, nxt: Optional[DiffEntry]) -> bool:
    if nxt is None:
        return False
    if current.type != DiffType.REMOVE or nxt.type != DiffType.CREATE:
        return False
    if not (_is_keyed_node(current.path) and _is_keyed_node(nxt.path)):
        return False
    if len(current.path) != len(nxt.path):
        return False
    # Operations can only be renamed within the same path item
    if len(current.path) == 3 and current.path[1] != nxt.path[1]:
        return False
    return True


def _is_deep_field(path: Path) -> bool:
    return len(path) > 3 and not is_index(path[-1])


def _combine_pair(
    removed: DiffEntry,
    created: DiffEntry,
    nested: bool,
    detect_renames: bool,
) -> List[DiffEntry]:
    old_path = removed.path[1]
    new_path = created.path[1]
    old_method = removed.path[2] if len(removed.path) > 2 else None
    new_method = created.path[2] if len(created.path) > 2 else None
    nested_prefix: List[PathSegment] = [OPERATIONS_SECTION, new_path]
    combined: List[DiffEntry] = []

    if old_path != new_path:
        combined.append(
            DiffEntry.change((OPERATIONS_SECTION, PATH_RENAME_KEY), old_path, new_path)
        )

    if old_method is not None and new_method is not None:
        if old_method != new_method:
            combined.append(
                DiffEntry.change(
                    (OPERATIONS_SECTION, new_path, METHOD_RENAME_KEY),
                    old_method,
                    new_method,
                )
            )
        nested_prefix.append(new_method)

    # Only go one level deep
    if not nested:
        inner = json_diff(removed.old_value, created.value)
        if inner:
            combined.extend(
                combine_rename_diffs(
                    inner, nested_prefix, detect_renames=detect_renames
                )
            )

    return combined


def combine_rename_diffs(
    diff: Sequence[DiffEntry],
    path_prefix: Sequence[PathSegment] = (),
    *,
    detect_renames: bool = True,
) -> List[DiffEntry]:
    """Combine adjacent REMOVE/CREATE pairs under ``paths`` into rename changes.

    Args:
        diff: Raw diff entries in document order
        path_prefix: Prepended to every entry; set on the recursive call that
            diffs the bodies of a renamed node
        detect_renames: When False only the deep add/remove simplification runs

    Returns:
        New list of entries; the input is not mutated.

    Deep additions and removals (more than three segments, not ending in an
    array index) become CHANGE entries with the missing side left as None.
    """
    nested = bool(path_prefix)
    prefix = tuple(path_prefix)
    entries = [
        DiffEntry(d.type, prefix + tuple(d.path), d.value, d.old_value) if nested else d
        for d in diff
    ]

    combined: List[DiffEntry] = []
    skip_next = False

    for i, current in enumerate(entries):
        if skip_next:
            skip_next = False
            continue

        # Only operations take part at the top level
        if not nested and (not current.path or current.path[0] != OPERATIONS_SECTION):
            combined.append(current)
            continue

        nxt = entries[i + 1] if i + 1 < len(entries) else None

        if detect_renames and _is_rename_pair(current, nxt):
            combined.extend(_combine_pair(current, nxt, nested, detect_renames))
            skip_next = True
        elif current.type == DiffType.CREATE and _is_deep_field(current.path):
            combined.append(DiffEntry.change(current.path, None, current.value))
        elif current.type == DiffType.REMOVE and _is_deep_field(current.path):
            combined.append(DiffEntry.change(current.path, current.old_value, None))
        else:
            combined.append(current)

    return combined
