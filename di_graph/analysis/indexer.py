"""Declaration indexer, the first pass over every source unit."""

from __future__ import annotations

import logging
from typing import Iterable

from di_graph.models import SourceUnit
from di_graph.analysis.graph_models import DeclarationIndex

logger = logging.getLogger(__name__)


class DeclarationIndexer:
    """Collect concrete class names and the interface -> implementers index."""

    def build(self, units: Iterable[SourceUnit]) -> DeclarationIndex:
        index = DeclarationIndex()
        for unit in units:
            for interface in unit.interfaces:
                index.interfaces.add(interface.name)
            for cls in unit.classes:
                if not cls.name:
                    continue
                index.concrete_classes.setdefault(cls.name, None)
                # Every implements clause contributes one entry; no dedup here.
                for interface_name in cls.implements:
                    index.implementations.setdefault(interface_name, []).append(cls.name)

        logger.debug(
            "Indexed %d classes, %d interfaces, %d implemented interfaces",
            len(index.concrete_classes), len(index.interfaces), len(index.implementations),
        )
        return index
