from __future__ import annotations

import json
from collections.abc import Iterable
from hashlib import sha1
from typing import Any

from flask import request

from .errors import PreconditionFailed


def document_etag(kind: str, document: Any) -> str:
    """Weak ETag over the canonical JSON form: ``W/"<kind>:<sha1>"``."""
    raw = json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode()
    return f'W/"{kind}:{sha1(raw).hexdigest()}"'


def _normalize_tag(tag: str) -> str:
    t = tag.strip()
    if not t or t == "*":
        return t
    # Strip weak prefix
    if t.lower().startswith("w/"):
        t = t[2:].lstrip()
    if t.startswith('"') and t.endswith('"') and len(t) >= 2:
        t = t[1:-1]
    return t


def parse_if_match(header_value: str | None) -> set[str]:
    """Parse If-Match into normalized tags; empty set when missing or blank."""
    if not header_value:
        return set()
    parts: Iterable[str] = (p for p in header_value.split(","))
    tags: set[str] = set()
    for p in parts:
        n = _normalize_tag(p)
        if n:
            tags.add(n)
    return tags


def check_if_match(current: str | None) -> None:
    """Raise PreconditionFailed when the request's If-Match names another version.

    Without an If-Match header writes keep last-writer-wins semantics.
    ``current`` is None when no document is stored yet.
    """
    tags = parse_if_match(request.headers.get("If-Match"))
    if not tags or ("*" in tags and current is not None):
        return
    if current is None or _normalize_tag(current) not in tags:
        raise PreconditionFailed("If-Match did not match", expected_etag=current)


__all__ = ["check_if_match", "document_etag", "parse_if_match"]
