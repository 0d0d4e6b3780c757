"""Entity payload builders.

Each builder turns one diff entry into mutation commands for one entity kind,
reading the current snapshots but never mutating them. Entries whose path or
value does not fit the entity shape produce no command.

Array additions and removals are always at the tail of the array (see
``json_diff``), so they are applied as a push or pop on a copy of the current
array and emitted as one edit replacing the whole array.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .find import find_resource
from .nested import get_nested_value
from .parse import ParsedDiff, parse_diff
from .rename import METHOD_RENAME_KEY, PATH_RENAME_KEY
from .resolve import narrow_union
from .schemas import (
    COLLECTION,
    HTTP_METHODS,
    OAUTH_FLOW,
    OAUTH_FLOW_TYPES,
    REQUEST,
    SECURITY_SCHEME,
    SERVER,
    TAG,
    is_http_method,
)
from .shapes import safe_parse
from .types import (
    AddCommand,
    Command,
    DeleteCommand,
    DiffEntry,
    DiffType,
    EditCommand,
    EntityKind,
    Path,
    dotted,
    is_index,
)

logger = logging.getLogger("livesync.core.payloads")

Entity = Dict[str, Any]
Table = Mapping[str, Entity]


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _with_path(diff: DiffEntry, path: Sequence[Any]) -> DiffEntry:
    return DiffEntry(diff.type, tuple(path), diff.value, diff.old_value)


def _is_array_tail(diff: DiffEntry, keys: Path) -> bool:
    return diff.type != DiffType.CHANGE and bool(keys) and is_index(keys[-1])


def _array_tail_edit(
    kind: EntityKind,
    entity: Entity,
    parsed: ParsedDiff,
    diff_type: DiffType,
) -> Optional[EditCommand]:
    """Push onto or pop off the array owning the diffed element."""
    if not parsed.parent_segments:
        return None
    current = get_nested_value(entity, parsed.parent_segments)
    if current is None:
        items: List[Any] = []
    elif isinstance(current, list):
        items = list(current)
    else:
        return None

    if diff_type == DiffType.CREATE:
        items.append(parsed.value)
    elif items:
        items.pop()
    return EditCommand(kind, entity["uid"], parsed.parent_segments, items)


def _field_edit(
    kind: EntityKind, uid: str, parsed: Optional[ParsedDiff], value: Any = None
) -> Optional[EditCommand]:
    if parsed is None or not parsed.segments:
        return None
    return EditCommand(kind, uid, parsed.segments, value)


def _as_field_removal(diff: DiffEntry) -> DiffEntry:
    """A CHANGE to nothing is the removal of that field."""
    if (
        diff.type == DiffType.CHANGE
        and diff.value is None
        and diff.old_value is not None
    ):
        return DiffEntry(DiffType.REMOVE, diff.path, old_value=diff.old_value)
    return diff


def _entity_at(owned: Sequence[str], index: Any) -> Optional[str]:
    if is_index(index) and 0 <= index < len(owned):
        return owned[index]
    return None


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


def diff_to_collection_payload(
    diff: DiffEntry, collection: Entity
) -> Optional[EditCommand]:
    """Generates the collection edit for an info/security/other document diff."""
    parsed = parse_diff(COLLECTION, diff)
    if parsed is None:
        return None

    if _is_array_tail(diff, diff.path):
        return _array_tail_edit(EntityKind.COLLECTION, collection, parsed, diff.type)

    return _field_edit(EntityKind.COLLECTION, collection["uid"], parsed, parsed.value)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


def _normalize_requirement(requirement: Any) -> Any:
    # {} marks the requirement as optional and is kept as is
    if isinstance(requirement, dict) and requirement:
        key = next(iter(requirement))
        return {key: requirement[key]}
    return requirement


def _link_servers(
    operation_servers: Any, collection: Entity, servers: Optional[Table]
) -> List[str]:
    """Uids of collection servers matching the operation servers by url."""
    if not isinstance(operation_servers, list) or not servers:
        return []
    linked: List[str] = []
    for entry in operation_servers:
        url = entry.get("url") if isinstance(entry, dict) else None
        server = find_resource(
            collection.get("servers", []), servers, lambda s: s.get("url") == url
        )
        if server is None:
            logger.debug("Operation server %r is not part of the collection", url)
            continue
        linked.append(server["uid"])
    return linked


def build_request(
    path: str,
    method: Any,
    operation: Any,
    collection: Entity,
    servers: Optional[Table] = None,
    *,
    fallback_method: str = "get",
    link_servers: bool = True,
) -> Optional[Entity]:
    """Build and validate a request entity from an OpenAPI operation.

    Operation level security replaces the document level requirements, so it
    is copied as a normalized list: each requirement keeps a single scheme.

    Returns:
        The parsed request, or None if the operation does not fit the shape
    """
    if not isinstance(operation, dict):
        return None

    payload: Entity = {k: v for k, v in operation.items() if k != "security"}
    payload["method"] = method.lower() if is_http_method(method) else fallback_method
    payload["path"] = path
    payload["parameters"] = operation.get("parameters") or []
    payload["servers"] = (
        _link_servers(operation.get("servers"), collection, servers)
        if link_servers
        else []
    )

    security = operation.get("security")
    if isinstance(security, list) and security:
        payload["security"] = [_normalize_requirement(s) for s in security]

    result = safe_parse(REQUEST, payload)
    if not result.success:
        logger.debug("Invalid operation %s %s: %s", method, path, result.errors)
        return None
    return result.value


def _owned_requests(collection: Entity, requests: Table) -> List[str]:
    return [uid for uid in collection.get("requests", []) if uid in requests]


def diff_to_request_payload(
    diff: DiffEntry,
    collection: Entity,
    requests: Table,
    servers: Optional[Table] = None,
    *,
    fallback_method: str = "get",
    link_servers: bool = True,
) -> List[Command]:
    """Generates the request commands for one ``paths`` diff.

    A changed path fans out to every request under it, hence the list. Path
    segments are ``paths, <path>, <method>, ...keys``.
    """
    path = diff.path[1] if len(diff.path) > 1 else None
    method = diff.path[2] if len(diff.path) > 2 else None
    keys: Path = tuple(diff.path[3:])

    # Path has changed
    if path == PATH_RENAME_KEY and diff.type == DiffType.CHANGE:
        if not isinstance(diff.value, str):
            return []
        return [
            EditCommand(EntityKind.REQUEST, uid, ("path",), diff.value)
            for uid in _owned_requests(collection, requests)
            if requests[uid].get("path") == diff.old_value
        ]

    # Method has changed
    if method == METHOD_RENAME_KEY and diff.type == DiffType.CHANGE:
        if diff.value not in HTTP_METHODS:
            return []
        return [
            EditCommand(EntityKind.REQUEST, uid, ("method",), diff.value)
            for uid in _owned_requests(collection, requests)
            if requests[uid].get("method") == diff.old_value
            and requests[uid].get("path") == path
        ]

    def locate() -> Optional[Entity]:
        return find_resource(
            collection.get("requests", []),
            requests,
            lambda r: r.get("path") == path and r.get("method") == method,
        )

    # Adding or removing at the end of an array
    if _is_array_tail(diff, keys):
        request = locate()
        parsed = parse_diff(REQUEST, _with_path(diff, keys))
        if request is None or parsed is None:
            return []
        command = _array_tail_edit(EntityKind.REQUEST, request, parsed, diff.type)
        return [command] if command else []

    # Add
    if diff.type == DiffType.CREATE and not keys:
        if method is None:
            # A whole path item: one request per operation
            item = diff.value if isinstance(diff.value, dict) else {}
            operations = [(m, op) for m, op in item.items() if is_http_method(m)]
        else:
            operations = [(method, diff.value)]

        commands: List[Command] = []
        for op_method, operation in operations:
            request = build_request(
                path,
                op_method,
                operation,
                collection,
                servers,
                fallback_method=fallback_method,
                link_servers=link_servers,
            )
            if request is not None:
                commands.append(
                    AddCommand(EntityKind.REQUEST, request, collection["uid"])
                )
        return commands

    # Delete
    if diff.type == DiffType.REMOVE and not keys:
        if method is None:
            return [
                DeleteCommand(EntityKind.REQUEST, uid, collection["uid"])
                for uid in _owned_requests(collection, requests)
                if requests[uid].get("path") == path
            ]
        request = locate()
        if request is None:
            return []
        return [DeleteCommand(EntityKind.REQUEST, request["uid"], collection["uid"])]

    # Edit: a field inside the operation was added, changed or removed
    if keys:
        request = locate()
        parsed = parse_diff(REQUEST, _with_path(_as_field_removal(diff), keys))
        if request is None or parsed is None:
            return []
        command = _field_edit(EntityKind.REQUEST, request["uid"], parsed, parsed.value)
        return [command] if command else []

    return []


# ---------------------------------------------------------------------------
# Servers and tags
# ---------------------------------------------------------------------------


def diff_to_server_payload(
    diff: DiffEntry, collection: Entity, servers: Table
) -> Optional[Command]:
    """Generates the server command for one ``servers`` diff."""
    index = diff.path[1] if len(diff.path) > 1 else None
    keys: Path = tuple(diff.path[2:])
    server_uid = _entity_at(collection.get("servers", []), index)

    # Edit: update properties
    if keys:
        server = servers.get(server_uid) if server_uid else None
        parsed = parse_diff(SERVER, _with_path(diff, keys))
        if server is None or parsed is None:
            return None

        if _is_array_tail(diff, keys):
            return _array_tail_edit(EntityKind.SERVER, server, parsed, diff.type)

        # Removing all variables leaves an empty map behind
        remove_variables = diff.type == DiffType.REMOVE and keys[-1] == "variables"
        value = {} if remove_variables else parsed.value
        return _field_edit(EntityKind.SERVER, server["uid"], parsed, value)

    # Delete whole object
    if diff.type == DiffType.REMOVE:
        if server_uid is None:
            return None
        return DeleteCommand(EntityKind.SERVER, server_uid, collection["uid"])

    # Add whole object
    if diff.type == DiffType.CREATE:
        result = safe_parse(SERVER, diff.value)
        if result.success:
            return AddCommand(EntityKind.SERVER, result.value, collection["uid"])
        logger.debug("Invalid server at %s: %s", dotted(diff.path), result.errors)

    return None


def diff_to_tag_payload(
    diff: DiffEntry, collection: Entity, tags: Table
) -> Optional[Command]:
    """Generates the tag command for one ``tags`` diff."""
    index = diff.path[1] if len(diff.path) > 1 else None
    keys: Path = tuple(diff.path[2:])
    tag_uid = _entity_at(collection.get("tags", []), index)
    tag = tags.get(tag_uid) if tag_uid else None

    if keys:
        parsed = parse_diff(TAG, _with_path(diff, keys))
        if tag is None or parsed is None:
            return None
        if _is_array_tail(diff, keys):
            return _array_tail_edit(EntityKind.TAG, tag, parsed, diff.type)
        return _field_edit(EntityKind.TAG, tag["uid"], parsed, parsed.value)

    if diff.type == DiffType.REMOVE:
        if tag is None:
            return None
        return DeleteCommand(EntityKind.TAG, tag["uid"], collection["uid"])

    if diff.type == DiffType.CREATE:
        result = safe_parse(TAG, diff.value)
        if result.success:
            return AddCommand(EntityKind.TAG, result.value, collection["uid"])
        logger.debug("Invalid tag at %s: %s", dotted(diff.path), result.errors)

    return None


# ---------------------------------------------------------------------------
# Security schemes
# ---------------------------------------------------------------------------


def normalize_security_scheme(name: str, value: Any) -> Any:
    """Turn an OpenAPI security scheme object into the entity form.

    The document key becomes ``nameKey`` and the first entry of an OAuth2
    ``flows`` map becomes the single ``flow``, tagged with its type.
    """
    if not isinstance(value, dict):
        return value
    scheme = {k: v for k, v in value.items() if k != "flows"}
    scheme.setdefault("nameKey", name)

    flows = value.get("flows")
    if value.get("type") == "oauth2" and isinstance(flows, dict):
        for flow_type, flow in flows.items():
            if flow_type in OAUTH_FLOW_TYPES and isinstance(flow, dict):
                scheme["flow"] = {**flow, "type": flow_type}
                break
    return scheme


def _scopes_edit(
    diff: DiffEntry, scheme: Entity, sub_path: Path
) -> Optional[EditCommand]:
    flow = scheme.get("flow") or {}
    scopes = dict(flow.get("scopes") or {})

    if len(sub_path) == 1:
        replacement = {} if diff.type == DiffType.REMOVE else diff.value
        if not isinstance(replacement, dict):
            return None
        scopes = dict(replacement)
    elif diff.type in (DiffType.CREATE, DiffType.CHANGE):
        scopes[sub_path[1]] = diff.value
    else:
        scopes.pop(sub_path[1], None)

    return EditCommand(
        EntityKind.SECURITY_SCHEME, scheme["uid"], ("flow", "scopes"), scopes
    )


def diff_to_security_scheme_payload(
    diff: DiffEntry, collection: Entity, security_schemes: Table
) -> Optional[Command]:
    """Generates the security scheme command for one
    ``components.securitySchemes`` diff.

    Edits narrow the scheme union by the current scheme type (and the flow
    union by the current flow type) before parsing, since plain path
    resolution cannot see sibling values.
    """
    name = diff.path[2] if len(diff.path) > 2 else None
    keys: Path = tuple(diff.path[3:])

    scheme = security_schemes.get(name) if isinstance(name, str) else None
    if scheme is None:
        scheme = find_resource(
            collection.get("securitySchemes", []),
            security_schemes,
            lambda s: s.get("nameKey") == name,
        )

    # Edit: update properties
    if keys:
        if scheme is None:
            return None

        is_oauth2 = scheme.get("type") == "oauth2"
        in_flows = keys[0] == "flows"
        if in_flows and is_oauth2:
            flow_type = (scheme.get("flow") or {}).get("type")
            shape = narrow_union(OAUTH_FLOW, "type", flow_type)
            # Drop "flows" and the flow kind
            sub_path = keys[2:]
        else:
            shape = narrow_union(SECURITY_SCHEME, "type", scheme.get("type"))
            sub_path = keys

        # Scopes are a free-form map
        if sub_path and sub_path[0] == "scopes" and is_oauth2:
            return _scopes_edit(diff, scheme, sub_path)

        if shape is None:
            return None

        parsed = parse_diff(shape, _with_path(diff, sub_path))
        if parsed is None:
            return None

        path = ("flow",) + sub_path if in_flows else parsed.segments
        if not path:
            return None
        return EditCommand(EntityKind.SECURITY_SCHEME, scheme["uid"], path, parsed.value)

    # Delete whole object
    if diff.type == DiffType.REMOVE:
        if scheme is None:
            return None
        return DeleteCommand(EntityKind.SECURITY_SCHEME, scheme["uid"], collection["uid"])

    # Add whole object
    if diff.type == DiffType.CREATE and isinstance(name, str):
        result = safe_parse(SECURITY_SCHEME, normalize_security_scheme(name, diff.value))
        if result.success:
            return AddCommand(EntityKind.SECURITY_SCHEME, result.value, collection["uid"])
        logger.debug("Invalid security scheme %s: %s", name, result.errors)

    return None
