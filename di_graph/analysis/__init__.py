"""Dependency extraction engine: index declarations, resolve injection points, assemble the graph."""

from __future__ import annotations

from di_graph.analysis.assembler import GraphAssembler
from di_graph.analysis.graph_models import (
    DeclarationIndex,
    DependencyGraph,
    GraphEdge,
    GraphNode,
)
from di_graph.analysis.indexer import DeclarationIndexer
from di_graph.analysis.resolver import DependencyResolver

__all__ = [
    "DeclarationIndex",
    "DeclarationIndexer",
    "DependencyGraph",
    "DependencyResolver",
    "GraphAssembler",
    "GraphEdge",
    "GraphNode",
]
