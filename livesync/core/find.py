"""Lookup of an entity through a list of uids owned by its parent."""
from __future__ import annotations

from typing import Callable, Iterable, Mapping, Optional, TypeVar

T = TypeVar("T")


def find_resource(
    keys: Iterable[str],
    table: Mapping[str, T],
    predicate: Callable[[T], bool],
) -> Optional[T]:
    """Like a list search over ``keys`` but returns the entity, not the uid.

    Keys missing from ``table`` are skipped. Returns None when nothing matches.
    """
    for uid in keys:
        resource = table.get(uid)
        if resource is None:
            continue
        if predicate(resource):
            return resource
    return None
