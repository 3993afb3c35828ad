"""Analysis pipeline: load project -> scan -> index -> resolve -> assemble."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterable

from di_graph.models import AnalysisConfig, SourceUnit
from di_graph.project import collect_source_files, load_project_config
from di_graph.scanner import scan_files
from di_graph.analysis import (
    DeclarationIndexer,
    DependencyGraph,
    DependencyResolver,
    GraphAssembler,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


def extract_graph(units: Iterable[SourceUnit]) -> DependencyGraph:
    """Build the dependency graph from already-parsed source units.

    The index is built over every unit before any class is resolved, since an
    interface's implementers may be declared in a later file.
    """
    units = list(units)
    index = DeclarationIndexer().build(units)
    assembler = GraphAssembler()
    DependencyResolver(index).resolve(units, assembler)
    return assembler.finalize()


def load_source_units(config: AnalysisConfig, progress: ProgressCallback | None = None) -> list[SourceUnit]:
    """Stage 1-2: load tsconfig and parse every file it names."""
    if progress:
        progress("Loading project", 0, 1)
    project = load_project_config(config)
    files = collect_source_files(project, skip_dirs=config.skip_dirs)
    if progress:
        progress("Loading project", 1, 1)

    if progress:
        progress("Scanning", 0, len(files))
    units = scan_files(files)
    if progress:
        progress("Scanning", len(files), len(files))
    return units


def run_analysis(config: AnalysisConfig, progress: ProgressCallback | None = None) -> DependencyGraph:
    """Run the full analysis; raises ConfigurationError when tsconfig is missing or invalid."""
    units = load_source_units(config, progress)

    if progress:
        progress("Resolving", 0, 1)
    graph = extract_graph(units)
    if progress:
        progress("Resolving", 1, 1)

    logger.info(
        "Analyzed %s: %d files, %d nodes, %d edges",
        config.root, len(units), len(graph.nodes), len(graph.edges),
    )
    return graph


def analyze_dependencies(root: str | Path) -> list[dict[str, Any]]:
    """Analyze the project at ``root`` and return its node/edge element list."""
    return run_analysis(AnalysisConfig(root=Path(root))).elements()
