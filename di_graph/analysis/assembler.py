"""Graph assembler: canonical node and edge collections with degree bookkeeping."""

from __future__ import annotations

from di_graph.analysis.graph_models import DependencyGraph, GraphEdge, GraphNode


class GraphAssembler:
    """Accumulates nodes and deduplicated edges during resolution."""

    def __init__(self):
        self._nodes: dict[str, None] = {}
        self._edges: dict[tuple[str, str], GraphEdge] = {}
        self._in: dict[str, int] = {}
        self._out: dict[str, int] = {}

    def add_node(self, node_id: str) -> None:
        self._nodes.setdefault(node_id, None)

    def add_edge(self, source: str, target: str) -> bool:
        """Record ``source -> target``; returns False when the pair was already present."""
        key = (source, target)
        if key in self._edges:
            return False
        self.add_node(source)
        self.add_node(target)
        self._edges[key] = GraphEdge(source=source, target=target)
        self._out[source] = self._out.get(source, 0) + 1
        self._in[target] = self._in.get(target, 0) + 1
        return True

    def finalize(self) -> DependencyGraph:
        nodes = [
            GraphNode(
                id=node_id,
                in_degree=self._in.get(node_id, 0),
                out_degree=self._out.get(node_id, 0),
            )
            for node_id in self._nodes
        ]
        return DependencyGraph(nodes=nodes, edges=list(self._edges.values()))
