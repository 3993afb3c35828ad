"""Shared extension-to-language mapping for the project loader and scanner."""

from __future__ import annotations

from di_graph.models import Language

# Maps file extension -> (Language enum, tree-sitter grammar name)
EXT_TO_LANGUAGE: dict[str, tuple[Language, str]] = {
    ".ts": (Language.TYPESCRIPT, "typescript"),
    ".mts": (Language.TYPESCRIPT, "typescript"),
    ".cts": (Language.TYPESCRIPT, "typescript"),
    ".tsx": (Language.TSX, "tsx"),
}

SOURCE_EXTENSIONS: set[str] = set(EXT_TO_LANGUAGE)
