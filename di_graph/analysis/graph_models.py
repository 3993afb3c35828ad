"""Data models for the declaration index and the dependency graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Coupling thresholds on in + out degree
HIGH_COUPLING = 6
MEDIUM_COUPLING = 3


@dataclass
class DeclarationIndex:
    # dict used as an insertion-ordered set
    concrete_classes: dict[str, None] = field(default_factory=dict)
    implementations: dict[str, list[str]] = field(default_factory=dict)  # interface -> [class names]
    interfaces: set[str] = field(default_factory=set)

    def is_concrete(self, name: str | None) -> bool:
        return bool(name) and name in self.concrete_classes

    def is_interface(self, name: str | None) -> bool:
        return bool(name) and name in self.interfaces

    def implementers_of(self, interface_name: str) -> list[str]:
        return self.implementations.get(interface_name, [])


@dataclass
class GraphNode:
    id: str
    in_degree: int = 0
    out_degree: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "in": self.in_degree, "out": self.out_degree}


@dataclass(frozen=True)
class GraphEdge:
    source: str
    target: str

    def to_dict(self) -> dict[str, Any]:
        return {"source": self.source, "target": self.target}


@dataclass
class DependencyGraph:
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    def elements(self) -> list[dict[str, Any]]:
        """Node records first, then edge records, both in insertion order."""
        return [n.to_dict() for n in self.nodes] + [e.to_dict() for e in self.edges]

    def cytoscape_elements(self) -> list[dict[str, Any]]:
        return [{"data": element} for element in self.elements()]

    def get_node(self, node_id: str) -> GraphNode | None:
        return next((n for n in self.nodes if n.id == node_id), None)

    def dependencies_of(self, node_id: str) -> list[str]:
        return [e.target for e in self.edges if e.source == node_id]

    def dependents_of(self, node_id: str) -> list[str]:
        return [e.source for e in self.edges if e.target == node_id]

    def coupling(self, node_id: str) -> str:
        node = self.get_node(node_id)
        score = node.in_degree + node.out_degree if node else 0
        if score >= HIGH_COUPLING:
            return "high"
        if score >= MEDIUM_COUPLING:
            return "medium"
        return "low"

    def summary(self) -> dict[str, Any]:
        by_coupling = {"low": 0, "medium": 0, "high": 0}
        for node in self.nodes:
            by_coupling[self.coupling(node.id)] += 1
        most_depended = sorted(self.nodes, key=lambda n: (-n.in_degree, n.id))[:5]
        return {
            "nodes": len(self.nodes),
            "edges": len(self.edges),
            "coupling": by_coupling,
            "most_depended_on": [n.id for n in most_depended if n.in_degree > 0],
        }
