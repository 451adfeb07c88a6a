"""Deterministic stable IDs for graph nodes."""

from __future__ import annotations

import hashlib
import re
import uuid


_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_.-]+")


def stable_digest(*parts: str, size: int = 12) -> str:
    """Return a short sha256 hex digest over `parts`."""

    raw = "|".join(parts).encode("utf-8", errors="replace")
    return hashlib.sha256(raw).hexdigest()[:size]


def path_slug(path: str) -> str:
    """Render a path as a filesystem-safe ID segment.

    Separators become `_`, drive colons are dropped and any other unsafe run
    collapses to a single `_`.
    """

    p = path.replace("\\", "/").replace(":", "")
    p = p.replace("/", "_")
    return _UNSAFE_RE.sub("_", p)


def path_node_id(type_name: str, path: str) -> str:
    """ID for values keyed by a path.

    The digest keeps IDs distinct when two paths share a slug ("a/b" vs "a_b").
    """

    return f"{type_name}_{path_slug(path)}-{stable_digest(path)}"


def name_node_id(type_name: str, name: str) -> str:
    return f"{type_name}_{name}"


def random_node_id(type_name: str) -> str:
    return f"{type_name}_{uuid.uuid4()}"


def random_edge_id() -> str:
    return str(uuid.uuid4())
