"""Describe IR values as graph fields.

Every value handed to the ingestion engine is turned into a list of
`GraphField(name, role, value)`. Types can implement `__graph_fields__()`
themselves; dataclasses and pydantic models are described from their declared
fields, with `metadata={"graph": <role>}` (dataclasses) or
`json_schema_extra={"graph": <role>}` (pydantic) overriding the inferred role.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


GRAPH_ROLE_KEY = "graph"


class FieldRole(str, Enum):
    NODE = "node"
    SEQUENCE = "sequence"
    PROPERTY = "property"
    EMBED = "embed"
    SKIP = "skip"


@dataclass(frozen=True)
class GraphField:
    name: str
    role: FieldRole
    value: Any


def embedded() -> dict:
    """Field metadata: flatten this record into the owner's property bag."""

    return {GRAPH_ROLE_KEY: FieldRole.EMBED}


def as_property() -> dict:
    """Field metadata: store this record as a one-level property, not a node."""

    return {GRAPH_ROLE_KEY: FieldRole.PROPERTY}


def skipped() -> dict:
    return {GRAPH_ROLE_KEY: FieldRole.SKIP}


def is_record(value: Any) -> bool:
    if isinstance(value, type):
        return False
    if callable(getattr(value, "__graph_fields__", None)):
        return True
    return dataclasses.is_dataclass(value) or isinstance(value, BaseModel)


def is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def infer_role(value: Any) -> FieldRole:
    if is_record(value):
        return FieldRole.NODE
    if is_sequence(value):
        return FieldRole.SEQUENCE
    return FieldRole.PROPERTY


def _field(name: str, value: Any, role: Optional[Any]) -> GraphField:
    if name.startswith("_"):
        return GraphField(name, FieldRole.SKIP, value)
    if role is None:
        return GraphField(name, infer_role(value), value)
    return GraphField(name, FieldRole(role), value)


def describe(value: Any) -> list[GraphField]:
    """Return the graph fields of a record, in declaration order."""

    explicit = getattr(value, "__graph_fields__", None)
    if callable(explicit) and not isinstance(value, type):
        return list(explicit())

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return [
            _field(f.name, getattr(value, f.name), f.metadata.get(GRAPH_ROLE_KEY))
            for f in dataclasses.fields(value)
        ]

    if isinstance(value, BaseModel):
        out: list[GraphField] = []
        for name, info in type(value).model_fields.items():
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            out.append(_field(name, getattr(value, name), extra.get(GRAPH_ROLE_KEY)))
        return out

    raise TypeError(f"{type(value).__name__} cannot be described as graph fields")


def extra_labels(value: Any) -> tuple[str, ...]:
    labels = getattr(value, "__graph_labels__", None)
    if not callable(labels):
        return ()
    return tuple(str(label) for label in labels() if label)
