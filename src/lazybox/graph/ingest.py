"""Generic IR -> GLPG ingestion.

Traversal is depth-first and driven by `describe()`:
- records become exactly one node;
- EMBED fields are flattened into the owner's property bag;
- NODE/SEQUENCE fields become child nodes linked by an edge labelled with the
  field name (a sequence of N records yields N parallel edges);
- PROPERTY fields are stored as scalars, one-level dicts or primitive maps.

Ingestion is fail-fast: any error aborts with the offending field/index.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import PurePath
from typing import Any, Optional

import structlog

from lazybox.core.stable_ids import (
    name_node_id,
    path_node_id,
    random_edge_id,
    random_node_id,
)
from lazybox.graph.describe import (
    FieldRole,
    GraphField,
    describe,
    extra_labels,
    is_record,
    is_sequence,
)
from lazybox.graph.store import GraphEdge, GraphNode, GraphStore
from lazybox.observability.tracing import get_tracer


logger = structlog.get_logger(__name__)
tracer = get_tracer(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_MISSING = object()


class IngestionError(Exception):
    """Raised when a value cannot be converted into graph nodes."""

    def __init__(self, message: str, *, field: Optional[str] = None, index: Optional[int] = None) -> None:
        super().__init__(message)
        self.field = field
        self.index = index


def format_timestamp(value: datetime) -> str:
    # Naive datetimes are taken as UTC.
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(TIMESTAMP_FORMAT)


def to_scalar(value: Any) -> Any:
    """Property representation of a primitive value, or `_MISSING`."""

    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, PurePath):
        return value.as_posix()
    return _MISSING


def _flatten_record(value: Any) -> dict:
    # One level only: nested records/sequences inside are dropped.
    out: dict = {}
    for f in describe(value):
        if f.role is FieldRole.SKIP or f.value is None:
            continue
        scalar = to_scalar(f.value)
        if scalar is not _MISSING:
            out[f.name] = scalar
    return out


def _flatten_mapping(value: Mapping) -> dict:
    out: dict = {}
    for k, v in value.items():
        key = to_scalar(k)
        val = to_scalar(v)
        if key is _MISSING or val is _MISSING:
            continue
        out[str(key)] = val
    return out


def _scalar_list(value: Any) -> Any:
    items = [to_scalar(v) for v in value if v is not None]
    if not items or any(v is _MISSING for v in items):
        return _MISSING
    return items


def property_value(value: Any) -> Any:
    """Convert a PROPERTY field value; `_MISSING` means the property is dropped."""

    scalar = to_scalar(value)
    if scalar is not _MISSING:
        return scalar
    if is_record(value):
        return _flatten_record(value) or _MISSING
    if isinstance(value, Mapping):
        return _flatten_mapping(value) or _MISSING
    if is_sequence(value):
        return _scalar_list(value)
    return _MISSING


def _natural_key(fields: list[GraphField], key: str) -> Optional[str]:
    for f in fields:
        if f.role is not FieldRole.SKIP and f.name == key:
            text = to_scalar(f.value) if isinstance(f.value, (str, PurePath)) else None
            if text:
                return text
    # Promoted from embedded records, like the owner's own fields.
    for f in fields:
        if f.role is FieldRole.EMBED and is_record(f.value):
            found = _natural_key(
                [sub for sub in describe(f.value) if sub.role is not FieldRole.EMBED], key
            )
            if found:
                return found
    return None


def node_id_for(type_name: str, fields: list[GraphField]) -> str:
    """Path-derived ID, else name-derived ID, else a random one."""

    path = _natural_key(fields, "path")
    if path:
        return path_node_id(type_name, path)
    name = _natural_key(fields, "name")
    if name:
        return name_node_id(type_name, name)
    return random_node_id(type_name)


class _Ingestor:
    def __init__(self, store: GraphStore) -> None:
        self.store = store
        # Records on the current ancestor path, by object identity -> node id.
        self._active: dict[int, str] = {}

    def ingest(self, value: Any, parent_id: Optional[str] = None, label: Optional[str] = None) -> None:
        if value is None:
            return
        if is_sequence(value):
            for i, item in enumerate(value):
                try:
                    self.ingest(item, parent_id, label)
                except Exception as e:
                    raise IngestionError(
                        f"error ingesting element {i}: {e}", field=label, index=i
                    ) from e
            return
        if not is_record(value):
            # Primitives inside sequences carry no node.
            return
        self._ingest_record(value, parent_id, label)

    def _ingest_record(self, value: Any, parent_id: Optional[str], label: Optional[str]) -> None:
        key = id(value)
        if key in self._active:
            # Back-reference to an ancestor: link it, do not traverse again.
            self._link(parent_id, self._active[key], label)
            return

        type_name = type(value).__name__
        try:
            fields = describe(value)
        except Exception as e:
            raise IngestionError(f"cannot describe {type_name}: {e}") from e

        properties: dict[str, Any] = {}
        nested: list[GraphField] = []
        for f in fields:
            if f.role is FieldRole.SKIP or f.value is None:
                continue
            try:
                if f.role is FieldRole.EMBED:
                    self._embed(properties, f)
                elif f.role in (FieldRole.NODE, FieldRole.SEQUENCE):
                    if is_sequence(f.value) and not any(is_record(v) for v in f.value):
                        scalars = _scalar_list(f.value)
                        if scalars is not _MISSING:
                            properties[f.name] = scalars
                    else:
                        nested.append(f)
                else:
                    converted = property_value(f.value)
                    if converted is not _MISSING:
                        properties[f.name] = converted
            except Exception as e:
                raise IngestionError(f"error ingesting field {f.name}: {e}", field=f.name) from e

        node = GraphNode(
            id=node_id_for(type_name, fields),
            labels=[type_name, *extra_labels(value)],
            properties=properties,
        )
        self.store.add_node(node)
        self._link(parent_id, node.id, label)

        self._active[key] = node.id
        try:
            for f in nested:
                try:
                    self.ingest(f.value, node.id, f.name)
                except Exception as e:
                    # Sequence failures already carry the failing element's index.
                    index = e.index if isinstance(e, IngestionError) and is_sequence(f.value) else None
                    raise IngestionError(
                        f"error ingesting field {f.name}: {e}", field=f.name, index=index
                    ) from e
        finally:
            del self._active[key]

    def _embed(self, properties: dict[str, Any], f: GraphField) -> None:
        if not is_record(f.value):
            converted = property_value(f.value)
            if converted is not _MISSING:
                properties[f.name] = converted
            return
        for sub in describe(f.value):
            if sub.role is FieldRole.SKIP or sub.value is None:
                continue
            converted = property_value(sub.value)
            if converted is not _MISSING:
                properties[sub.name] = converted

    def _link(self, parent_id: Optional[str], target_id: str, label: Optional[str]) -> None:
        if not parent_id or not label:
            return
        self.store.add_edge(
            GraphEdge(id=random_edge_id(), source_id=parent_id, target_id=target_id, label=label)
        )


def to_graph(value: Any) -> GraphStore:
    """Convert an IR value (record, sequence of records, or None) into a new GraphStore."""

    store = GraphStore()
    if value is None:
        return store
    if not (is_sequence(value) or is_record(value)):
        raise IngestionError(f"cannot ingest {type(value).__name__}: not an introspectable record")

    root_type = type(value).__name__
    with tracer.start_as_current_span("ingest") as span:
        span.set_attribute("root_type", root_type)
        _Ingestor(store).ingest(value)
        span.set_attribute("node_count", len(store.nodes))
        span.set_attribute("edge_count", len(store.edges))

    logger.debug("ingest.done", root_type=root_type, nodes=len(store.nodes), edges=len(store.edges))
    return store
