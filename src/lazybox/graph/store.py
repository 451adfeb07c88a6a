"""Generalized labeled property graph (GLPG) container.

Renderers only rely on the read side of this module: node/edge lookup,
adjacency, iteration over `nodes`/`edges` and the `to_dict()` encoding.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


Properties = dict[str, Any]


@dataclass
class GraphNode:
    id: str
    labels: list[str]
    properties: Properties = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"ID": self.id, "Labels": list(self.labels), "Properties": dict(self.properties)}


@dataclass
class GraphEdge:
    id: str
    source_id: str
    target_id: str
    label: str
    properties: Properties = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "ID": self.id,
            "SourceID": self.source_id,
            "TargetID": self.target_id,
            "Label": self.label,
            "Properties": dict(self.properties),
        }


class GraphStore:
    """Nodes and edges keyed by ID, plus outgoing/incoming adjacency by node ID."""

    def __init__(self) -> None:
        self.nodes: dict[str, GraphNode] = {}
        self.edges: dict[str, GraphEdge] = {}
        self.outgoing: dict[str, list[GraphEdge]] = {}
        self.incoming: dict[str, list[GraphEdge]] = {}

    def add_node(self, node: GraphNode) -> None:
        self.nodes[node.id] = node
        self.outgoing.setdefault(node.id, [])
        self.incoming.setdefault(node.id, [])

    def add_edge(self, edge: GraphEdge) -> None:
        previous = self.edges.get(edge.id)
        if previous is not None:
            self._unlink(previous)
        self.edges[edge.id] = edge
        # Endpoints may not be added yet; adjacency is started on first reference.
        self.outgoing.setdefault(edge.source_id, []).append(edge)
        self.incoming.setdefault(edge.target_id, []).append(edge)

    def _unlink(self, edge: GraphEdge) -> None:
        out = self.outgoing.get(edge.source_id, [])
        self.outgoing[edge.source_id] = [e for e in out if e.id != edge.id]
        inc = self.incoming.get(edge.target_id, [])
        self.incoming[edge.target_id] = [e for e in inc if e.id != edge.id]

    def get_node(self, node_id: str) -> GraphNode | None:
        return self.nodes.get(node_id)

    def get_edge(self, edge_id: str) -> GraphEdge | None:
        return self.edges.get(edge_id)

    def outgoing_edges(self, node_id: str) -> list[GraphEdge]:
        return list(self.outgoing.get(node_id, []))

    def incoming_edges(self, node_id: str) -> list[GraphEdge]:
        return list(self.incoming.get(node_id, []))

    def children_of(self, node_id: str, label: str | None = None) -> list[GraphNode]:
        """Target nodes of outgoing edges, in insertion order, optionally filtered by label."""

        out: list[GraphNode] = []
        for e in self.outgoing.get(node_id, []):
            if label is not None and e.label != label:
                continue
            node = self.nodes.get(e.target_id)
            if node is not None:
                out.append(node)
        return out

    def roots(self) -> list[GraphNode]:
        """Nodes without incoming edges, in insertion order."""

        return [n for n in self.nodes.values() if not self.incoming.get(n.id)]

    def to_dict(self) -> dict:
        return {
            "Nodes": {nid: n.to_dict() for nid, n in self.nodes.items()},
            "Edges": {eid: e.to_dict() for eid, e in self.edges.items()},
        }

    def to_json(self, *, indent: int | None = 2) -> str:
        # ASCII output: undecodable file names arrive as lone surrogates.
        return json.dumps(self.to_dict(), indent=indent)

    def __len__(self) -> int:
        return len(self.nodes)
