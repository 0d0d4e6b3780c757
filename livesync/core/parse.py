"""Diff value parser.

Checks a diff entry against an entity shape: the path must exist in the shape
and, for CREATE and CHANGE, the new value must satisfy the shape found there.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .resolve import resolve_path
from .shapes import Shape, safe_parse
from .types import DiffEntry, DiffType, Path, dotted

logger = logging.getLogger("livesync.core.parse")


@dataclass(frozen=True)
class ParsedDiff:
    """
    A diff whose path and value have been checked against a shape.

    Attributes:
        segments: Path checked against the shape
        parent_segments: Path without its last item, addresses the owning
            array when an element is added or removed
        value: Parsed value (None for REMOVE)
    """

    segments: Path
    parent_segments: Path
    value: Any = None

    @property
    def path(self) -> str:
        return dotted(self.segments)

    @property
    def path_minus_one(self) -> str:
        return dotted(self.parent_segments)


def parse_diff(shape: Shape, diff: DiffEntry) -> Optional[ParsedDiff]:
    """Resolve the diff path inside ``shape`` and validate its value.

    Returns None when the path does not exist in the shape or the value does
    not satisfy the shape found there. REMOVE entries carry no value and are
    not validated.
    """
    target = resolve_path(shape, diff.path)
    if target is None:
        logger.debug("Unresolvable path %s", dotted(diff.path))
        return None

    segments = tuple(diff.path)
    parent_segments = segments[:-1]

    if diff.type == DiffType.REMOVE:
        return ParsedDiff(segments, parent_segments, None)

    result = safe_parse(target, diff.value)
    if not result.success:
        logger.debug("Invalid value at %s: %s", dotted(diff.path), result.errors)
        return None

    return ParsedDiff(segments, parent_segments, result.value)
