"""Source model provider: parse project files into class/interface declarations."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from di_graph.models import SourceUnit
from di_graph.scanner.treesitter_scanner import TypeScriptScanner


def scan_files(paths: Iterable[Path]) -> list[SourceUnit]:
    """Parse every file in order; unreadable files are logged and skipped."""
    return TypeScriptScanner().scan_files(paths)


__all__ = [
    "TypeScriptScanner",
    "scan_files",
]
