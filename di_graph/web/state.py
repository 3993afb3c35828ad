"""In-memory store of finished analyses for the API."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from di_graph.analysis import DependencyGraph


@dataclass
class AnalysisSession:
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    root: str = ""
    graph: DependencyGraph = field(default_factory=DependencyGraph)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


class AppState:
    """Holds completed analyses; each analysis itself runs on fresh state."""

    def __init__(self):
        self.analyses: dict[str, AnalysisSession] = {}
        self._lock = threading.Lock()

    def add_analysis(self, session: AnalysisSession) -> None:
        with self._lock:
            self.analyses[session.id] = session

    def get_analysis(self, analysis_id: str) -> AnalysisSession | None:
        return self.analyses.get(analysis_id)

    def delete_analysis(self, analysis_id: str) -> bool:
        with self._lock:
            return self.analyses.pop(analysis_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self.analyses.clear()


# Module-level singleton shared by the router
state = AppState()
