"""di-graph: dependency injection graphs for TypeScript projects."""

from __future__ import annotations

__version__ = "0.1.0"

from di_graph.project import ConfigurationError, DiGraphError
from di_graph.pipeline import analyze_dependencies, extract_graph, run_analysis

__all__ = [
    "ConfigurationError",
    "DiGraphError",
    "analyze_dependencies",
    "extract_graph",
    "run_analysis",
]
