"""FastAPI routes for running analyses and querying their graphs."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Literal

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from di_graph.models import AnalysisConfig
from di_graph.pipeline import run_analysis
from di_graph.project import ConfigurationError
from di_graph.web.state import AnalysisSession, state

router = APIRouter(prefix="/api")

GraphFormat = Literal["flat", "cytoscape"]


# --- Request models ---

class GraphRequest(BaseModel):
    path: str
    tsconfig: str = "tsconfig.json"
    format: GraphFormat = "flat"


def _validate_path(p: str) -> Path:
    resolved = Path(p).expanduser().resolve()
    if not resolved.is_dir():
        raise HTTPException(404, f"Path not found: {resolved}")
    return resolved


def _session_payload(session: AnalysisSession, fmt: GraphFormat = "flat") -> dict:
    graph = session.graph
    elements = graph.cytoscape_elements() if fmt == "cytoscape" else graph.elements()
    return {
        "analysis_id": session.id,
        "root": session.root,
        "timestamp": session.timestamp,
        "nodes": len(graph.nodes),
        "edges": len(graph.edges),
        "elements": elements,
    }


def _get_session(analysis_id: str) -> AnalysisSession:
    session = state.get_analysis(analysis_id)
    if not session:
        raise HTTPException(404, "Analysis not found")
    return session


# --- Endpoints ---

@router.post("/graph")
async def build_graph(req: GraphRequest):
    root = _validate_path(req.path)
    config = AnalysisConfig(root=root, tsconfig_name=req.tsconfig)
    try:
        graph = await asyncio.to_thread(run_analysis, config)
    except ConfigurationError as e:
        raise HTTPException(400, str(e))

    session = AnalysisSession(root=str(root), graph=graph)
    state.add_analysis(session)
    return _session_payload(session, req.format)


@router.get("/graph/{analysis_id}")
async def get_graph(analysis_id: str, format: GraphFormat = Query("flat")):
    return _session_payload(_get_session(analysis_id), format)


@router.get("/graph/{analysis_id}/summary")
async def get_summary(analysis_id: str):
    session = _get_session(analysis_id)
    return {"analysis_id": session.id, **session.graph.summary()}


@router.get("/graph/{analysis_id}/nodes/{node_id}")
async def get_node(analysis_id: str, node_id: str):
    graph = _get_session(analysis_id).graph
    node = graph.get_node(node_id)
    if node is None:
        raise HTTPException(404, f"Node not found: {node_id}")
    return {
        **node.to_dict(),
        "coupling": graph.coupling(node_id),
        "dependencies": graph.dependencies_of(node_id),
        "dependents": graph.dependents_of(node_id),
    }


@router.delete("/graph/{analysis_id}")
async def delete_graph(analysis_id: str):
    if not state.delete_analysis(analysis_id):
        raise HTTPException(404, "Analysis not found")
    return {"deleted": analysis_id}
