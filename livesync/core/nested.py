"""Read and write values inside entity snapshots by segment path."""

from __future__ import annotations

from typing import Any, Sequence

from .types import PathSegment, is_index


def _child(container: Any, segment: PathSegment) -> Any:
    if isinstance(container, dict):
        return container.get(segment)
    if isinstance(container, list) and is_index(segment):
        if 0 <= segment < len(container):
            return container[segment]
    return None


def get_nested_value(obj: Any, path: Sequence[PathSegment]) -> Any:
    """Value at ``path`` or None when any step is missing."""
    current = obj
    for segment in path:
        current = _child(current, segment)
        if current is None:
            return None
    return current


def set_nested_value(obj: Any, path: Sequence[PathSegment], value: Any) -> None:
    """Write ``value`` at ``path`` in place.

    Missing intermediate objects are created. A value of None removes the
    key, or the list element, at the end of the path. An index equal to the
    list length appends.

    Raises:
        ValueError: If the path is empty
        TypeError: If a step does not address a dict key or list index
        IndexError: If a list index is past the end of the list
    """
    if not path:
        raise ValueError("Cannot set a value at an empty path")

    current = obj
    for segment, nxt in zip(path[:-1], path[1:]):
        child = _child(current, segment)
        if child is None:
            child = [] if is_index(nxt) else {}
            _assign(current, segment, child)
        current = child

    last = path[-1]
    if value is None:
        _remove(current, last)
    else:
        _assign(current, last, value)


def _assign(container: Any, segment: PathSegment, value: Any) -> None:
    if isinstance(container, dict):
        container[segment] = value
        return
    if isinstance(container, list) and is_index(segment):
        if segment == len(container):
            container.append(value)
            return
        if 0 <= segment < len(container):
            container[segment] = value
            return
        raise IndexError(f"Index {segment} out of range")
    raise TypeError(f"Cannot address {segment!r} inside {type(container).__name__}")


def _remove(container: Any, segment: PathSegment) -> None:
    if isinstance(container, dict):
        container.pop(segment, None)
    elif isinstance(container, list) and is_index(segment):
        if 0 <= segment < len(container):
            del container[segment]
    else:
        raise TypeError(f"Cannot address {segment!r} inside {type(container).__name__}")
