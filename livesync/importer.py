"""
Decompose an OpenAPI document into normalized workspace entities.

The collection is created last, once the uids of everything it owns are
known. Requests go through ``build_request``, the same construction used when
an operation is added by a sync, so imported and synced requests look alike.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .core.document import prepare_document
from .core.payloads import build_request, normalize_security_scheme
from .core.reconcile import SyncPolicy
from .core.schemas import COLLECTION, SECURITY_SCHEME, SERVER, TAG, is_http_method
from .core.shapes import Shape, parse, safe_parse
from .core.types import EntityKind, LiveSyncError
from .storage.workspace import WorkspaceStore

logger = logging.getLogger("livesync.importer")

# Document keys copied onto the collection as they are
_COLLECTION_KEYS = (
    "openapi",
    "jsonSchemaDialect",
    "info",
    "security",
    "externalDocs",
    "webhooks",
)


def _import_list(
    items: Any, shape: Shape, kind: EntityKind, store: WorkspaceStore
) -> List[str]:
    uids: List[str] = []
    if not isinstance(items, list):
        return uids
    for position, item in enumerate(items):
        result = safe_parse(shape, item)
        if not result.success:
            logger.warning("Skipping invalid %s at index %d", kind.value, position)
            continue
        uids.append(store.add(kind, result.value)["uid"])
    return uids


def _import_security_schemes(components: Any, store: WorkspaceStore) -> List[str]:
    schemes = components.get("securitySchemes") if isinstance(components, dict) else None
    if not isinstance(schemes, dict):
        return []
    uids: List[str] = []
    for name, value in schemes.items():
        result = safe_parse(SECURITY_SCHEME, normalize_security_scheme(name, value))
        if not result.success:
            logger.warning("Skipping invalid security scheme %r", name)
            continue
        uids.append(store.add(EntityKind.SECURITY_SCHEME, result.value)["uid"])
    return uids


def _collection_payload(
    document: Dict[str, Any], document_url: Optional[str], live_sync: bool
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        key: document[key] for key in _COLLECTION_KEYS if key in document
    }
    components = document.get("components")
    if isinstance(components, dict):
        payload["components"] = {
            k: v for k, v in components.items() if k != "securitySchemes"
        }
    if document_url is not None:
        payload["documentUrl"] = document_url
    payload["liveSync"] = live_sync
    return payload


def import_document(
    document: Dict[str, Any],
    store: WorkspaceStore,
    document_url: Optional[str] = None,
    live_sync: bool = False,
    policy: Optional[SyncPolicy] = None,
) -> str:
    """Import ``document`` into ``store`` as a new collection.

    Args:
        document: Parsed OpenAPI document
        store: Workspace receiving the entities
        document_url: Where the document was fetched from; required later by
            ``LiveSync``
        live_sync: Flag stored on the collection
        policy: Supplies the fallback method and server linking

    Returns:
        The uid of the new collection

    Raises:
        LiveSyncError: If the document is not a mapping
        ShapeValidationError: If the collection fields are invalid
    """
    if not isinstance(document, dict):
        raise LiveSyncError("An OpenAPI document must be a mapping")
    document = prepare_document(document)
    active = policy or SyncPolicy.default()

    # Validated up front so a bad document leaves the store untouched
    collection = parse(COLLECTION, _collection_payload(document, document_url, live_sync))

    server_uids = _import_list(document.get("servers"), SERVER, EntityKind.SERVER, store)
    tag_uids = _import_list(document.get("tags"), TAG, EntityKind.TAG, store)
    scheme_uids = _import_security_schemes(document.get("components"), store)

    # Server linking only needs the server uids of the collection
    owner = {"servers": server_uids}
    request_uids: List[str] = []
    paths = document.get("paths")
    for path, item in (paths.items() if isinstance(paths, dict) else ()):
        if not isinstance(item, dict):
            continue
        for method, operation in item.items():
            if not is_http_method(method):
                continue
            request = build_request(
                path,
                method,
                operation,
                owner,
                store.servers,
                fallback_method=active.fallback_method,
                link_servers=active.link_operation_servers,
            )
            if request is None:
                logger.warning("Skipping invalid operation %s %s", method.upper(), path)
                continue
            request_uids.append(store.add(EntityKind.REQUEST, request)["uid"])

    collection.update(
        servers=server_uids,
        tags=tag_uids,
        securitySchemes=scheme_uids,
        requests=request_uids,
    )

    collection = store.add(EntityKind.COLLECTION, collection)
    logger.info(
        "Imported collection %s: %d requests, %d servers, %d tags, %d security schemes",
        collection["uid"],
        len(request_uids),
        len(server_uids),
        len(tag_uids),
        len(scheme_uids),
    )
    return collection["uid"]
