"""
Preparation of loaded OpenAPI documents before they are hashed, diffed or
imported.

YAML loaders hand back mapping keys typed as the scalar they look like, so
``responses: {200: ...}`` arrives with an ``int`` key. Every mapping key is
turned into a string here, which keeps typed path segments unambiguous (an
``int`` segment is always an array index).

Local references (``{"$ref": "#/components/parameters/Limit"}``) are then
replaced by the value they point at. Sibling keys next to ``$ref`` are kept on
top of the resolved value. References that point outside the document, do
not resolve, or refer back to themselves are left as written.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Tuple

logger = logging.getLogger("livesync.core.document")


def stringify_keys(value: Any) -> Any:
    """Copy of ``value`` with every mapping key converted to ``str``."""
    if isinstance(value, dict):
        return {_key(k): stringify_keys(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [stringify_keys(v) for v in value]
    return value


def _key(key: Any) -> str:
    # YAML 1.1 reads `true:` as a bool key; JSON spells it lowercase
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    return str(key)


# ---------------------------------------------------------------------------
# Local references
# ---------------------------------------------------------------------------


class _Unresolved(Exception):
    pass


def _decode_pointer_token(token: str) -> str:
    # RFC 6901 escaping
    return token.replace("~1", "/").replace("~0", "~")


def _pointer_get(document: Any, ref: str) -> Any:
    pointer = ref[1:]
    if pointer == "":
        return document
    if not pointer.startswith("/"):
        raise _Unresolved(ref)
    current = document
    for raw in pointer[1:].split("/"):
        token = _decode_pointer_token(raw)
        if isinstance(current, list):
            try:
                current = current[int(token)]
            except (ValueError, IndexError) as exc:
                raise _Unresolved(ref) from exc
        elif isinstance(current, dict) and token in current:
            current = current[token]
        else:
            raise _Unresolved(ref)
    return current


def dereference(document: Any) -> Any:
    """Resolve local ``#/...`` references against ``document`` itself.

    Returns a new document; the input is not modified.
    """
    return _resolve(document, document, ())


def _resolve(value: Any, root: Any, stack: Tuple[str, ...]) -> Any:
    if isinstance(value, list):
        return [_resolve(v, root, stack) for v in value]
    if not isinstance(value, dict):
        return value

    ref = value.get("$ref")
    if isinstance(ref, str) and ref.startswith("#"):
        if ref in stack:
            return copy.deepcopy(value)
        try:
            target = _pointer_get(root, ref)
        except _Unresolved:
            logger.debug("Leaving unresolved reference %s", ref)
        else:
            resolved = _resolve(target, root, stack + (ref,))
            siblings = {k: v for k, v in value.items() if k != "$ref"}
            if not siblings:
                return resolved
            if isinstance(resolved, dict):
                merged = dict(resolved)
                merged.update(_resolve(siblings, root, stack))
                return merged
            return resolved

    return {k: _resolve(v, root, stack) for k, v in value.items()}


def prepare_document(document: Any) -> Any:
    """Stringify keys, then resolve local references."""
    return dereference(stringify_keys(document))
