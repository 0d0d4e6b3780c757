"""Schema path resolution and union narrowing.

``resolve_path`` is the single authority on whether a diff path is a
structurally legal location inside an entity. It only looks at shapes, never
at values. Fields whose shape depends on a sibling value (the OAuth2 flow
type, the security scheme type) are narrowed first with ``narrow_union``.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from .shapes import (
    AnyShape,
    ArrayShape,
    LiteralShape,
    ObjectShape,
    RecordShape,
    Shape,
    UnionShape,
    unwrap,
)
from .types import PathSegment, is_index


def _step(shape: Shape, segment: PathSegment) -> Optional[Shape]:
    if isinstance(shape, ObjectShape):
        if isinstance(segment, str) and segment in shape.fields:
            return shape.fields[segment]
        return None

    if isinstance(shape, ArrayShape):
        if is_index(segment):
            return shape.element
        if isinstance(segment, str):
            # A string key addresses a property of the array elements
            element = shape.element
            if isinstance(element, ObjectShape) and segment in element.fields:
                return element.fields[segment]
        return None

    if isinstance(shape, RecordShape):
        return shape.value

    return None


def resolve_path(shape: Shape, path: Sequence[PathSegment]) -> Optional[Shape]:
    """Return the shape expected at ``path`` or None if the path does not exist.

    Optional and default wrappers are stripped before every step and once more
    at the end. An AnyShape accepts every remaining path.
    """
    current: Shape = shape
    for segment in path:
        current = unwrap(current)
        if isinstance(current, AnyShape):
            return current
        nxt = _step(current, segment)
        if nxt is None:
            return None
        current = nxt
    return unwrap(current)


def narrow_union(shape: Shape, key: str, value: Any) -> Optional[Shape]:
    """Pick the union variant whose ``key`` field is the literal ``value``.

    Variants are scanned in declaration order. Returns None when ``shape`` is
    not a union or no variant matches.
    """
    current = unwrap(shape)
    if not isinstance(current, UnionShape):
        return None
    for variant in current.variants:
        if not isinstance(variant, ObjectShape):
            continue
        discriminator = variant.fields.get(key)
        if isinstance(discriminator, LiteralShape) and discriminator.value == value:
            return variant
    return None
