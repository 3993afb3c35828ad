"""JSON API for dependency graph analyses."""

from di_graph.web.app import create_app

__all__ = ["create_app"]
