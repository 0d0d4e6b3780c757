"""Deterministic canonicalization and hashing of OpenAPI documents.

A document hash only changes when the document content changes:
- Dict key order is irrelevant (sorted internally)
- Unicode is NFC-normalized
- Newlines are normalized to LF
- Floats use repr-level precision; -0.0 collapses to 0.0
"""
from __future__ import annotations

import hashlib
import json
import math
import unicodedata
from typing import Any


def canon(value: Any) -> bytes:
    """Canonical UTF-8 JSON bytes of a JSON-like value."""
    return json.dumps(
        _normalize_value(value),
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Compute SHA-256 hex digest of bytes."""
    return hashlib.sha256(data).hexdigest()


def document_hash(document: Any) -> str:
    """Hash used to detect that a fetched document changed."""
    return sha256_hex(canon(document))


def _canon_str(s: str) -> str:
    s = unicodedata.normalize("NFC", s)
    return s.replace("\r\n", "\n").replace("\r", "\n")


def _normalize_value(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int)):
        return value
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        normalized = float(f"{value:.17g}")
        if normalized == 0.0:
            normalized = 0.0
        return normalized
    if isinstance(value, str):
        return _canon_str(value)
    if isinstance(value, dict):
        return {str(k): _normalize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_value(v) for v in value]
    # YAML loaders produce dates and datetimes
    return str(value)
