"""Dependency resolver: walks injection points and emits edges into the assembler."""

from __future__ import annotations

import logging
from typing import Iterable

from di_graph.models import ClassDeclaration, Marker, Parameter, Property, SourceUnit, TypeRef
from di_graph.analysis.assembler import GraphAssembler
from di_graph.analysis.graph_models import DeclarationIndex

logger = logging.getLogger(__name__)

# Marker names are matched exactly and case-sensitively.
CONSTRUCTOR_MARKERS = frozenset({"inject", "Inject"})
PROPERTY_MARKERS = frozenset({"inject", "Inject", "injectable", "Injectable"})


class DependencyResolver:
    """Resolve constructor and property injection points against a DeclarationIndex.

    Constructor parameters typed with an interface fan out to every known
    implementer of that interface. Property injection resolves only to
    concrete classes and never fans out.
    """

    def __init__(self, index: DeclarationIndex):
        self.index = index

    def resolve(self, units: Iterable[SourceUnit], assembler: GraphAssembler) -> None:
        for unit in units:
            for cls in unit.classes:
                if cls.name:
                    self.resolve_class(cls, assembler)

    def resolve_class(self, cls: ClassDeclaration, assembler: GraphAssembler) -> None:
        for ctor in cls.constructors:
            for param in ctor.parameters:
                self._resolve_parameter(cls.name, param, assembler)

        for prop in cls.properties:
            marker = prop.find_marker(PROPERTY_MARKERS)
            if marker is not None:
                self._resolve_property(cls.name, prop, marker, assembler)

    def _resolve_parameter(self, class_name: str, param: Parameter, assembler: GraphAssembler) -> None:
        candidate = self._candidate(param.type, param.find_marker(CONSTRUCTOR_MARKERS))
        if not candidate or candidate == class_name:
            return

        # Kind check uses the declared type, never the marker override.
        if self.index.is_interface(param.type.name):
            for implementer in self.index.implementers_of(candidate):
                if implementer != class_name and self.index.is_concrete(implementer):
                    self._emit(assembler, class_name, implementer, "constructor", param.name)
        elif self.index.is_concrete(candidate):
            self._emit(assembler, class_name, candidate, "constructor", param.name)

    def _resolve_property(
        self, class_name: str, prop: Property, marker: Marker, assembler: GraphAssembler,
    ) -> None:
        candidate = self._candidate(prop.type, marker)
        if candidate and candidate != class_name and self.index.is_concrete(candidate):
            self._emit(assembler, class_name, candidate, "property", prop.name)

    def _candidate(self, declared: TypeRef, marker: Marker | None) -> str | None:
        candidate = declared.name
        if marker is not None:
            override = marker.first_literal()
            if override and self.index.is_concrete(override):
                candidate = override
        return candidate

    @staticmethod
    def _emit(assembler: GraphAssembler, source: str, target: str, kind: str, point: str) -> None:
        if assembler.add_edge(source, target):
            logger.debug("%s -> %s (%s %s)", source, target, kind, point)
