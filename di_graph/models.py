"""Data models for the DI dependency graph pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path


class Language(enum.Enum):
    TYPESCRIPT = "typescript"
    TSX = "tsx"


@dataclass
class MarkerArgument:
    """One argument of a decorator call, as written in source."""
    text: str
    is_string_literal: bool = False

    def literal_value(self) -> str | None:
        """Unquoted value of a string literal argument, else None."""
        if not self.is_string_literal:
            return None
        return self.text.strip("'\"`")


@dataclass
class Marker:
    """A named tag (decorator) attached to a parameter or property."""
    name: str
    arguments: list[MarkerArgument] = field(default_factory=list)

    def first_literal(self) -> str | None:
        if not self.arguments:
            return None
        return self.arguments[0].literal_value()


@dataclass
class TypeRef:
    """Named symbol of a declared type. ``name`` is None for primitives and anonymous types."""
    name: str | None = None
    text: str = ""


@dataclass
class Parameter:
    name: str
    type: TypeRef = field(default_factory=TypeRef)
    markers: list[Marker] = field(default_factory=list)

    def find_marker(self, names: frozenset[str]) -> Marker | None:
        return next((m for m in self.markers if m.name in names), None)


@dataclass
class Property:
    name: str
    type: TypeRef = field(default_factory=TypeRef)
    markers: list[Marker] = field(default_factory=list)

    def find_marker(self, names: frozenset[str]) -> Marker | None:
        return next((m for m in self.markers if m.name in names), None)


@dataclass
class Constructor:
    parameters: list[Parameter] = field(default_factory=list)
    line_number: int = 0


@dataclass
class ClassDeclaration:
    """A class as seen by the source model provider."""
    name: str | None
    file_path: Path
    line_number: int
    implements: list[str] = field(default_factory=list)
    constructors: list[Constructor] = field(default_factory=list)
    properties: list[Property] = field(default_factory=list)
    is_abstract: bool = False


@dataclass
class InterfaceDeclaration:
    name: str
    file_path: Path
    line_number: int


@dataclass
class SourceUnit:
    """All declarations parsed out of one source file."""
    file_path: Path
    language: Language = Language.TYPESCRIPT
    classes: list[ClassDeclaration] = field(default_factory=list)
    interfaces: list[InterfaceDeclaration] = field(default_factory=list)
    has_errors: bool = False


@dataclass
class AnalysisConfig:
    """Configuration for one analysis run."""
    root: Path = field(default_factory=lambda: Path("."))
    tsconfig_name: str = "tsconfig.json"
    # Only applied below the literal part of an include pattern.
    skip_dirs: list[str] = field(default_factory=lambda: [".git", "node_modules"])

    @property
    def tsconfig_path(self) -> Path:
        return self.root / self.tsconfig_name
