"""Click CLI with analyze, show, and serve subcommands."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from di_graph import __version__
from di_graph.models import AnalysisConfig
from di_graph.pipeline import run_analysis
from di_graph.project import ConfigurationError

_FORMAT_CHOICES = ["json", "cytoscape", "summary"]

_COUPLING_COLORS = {"low": "blue", "medium": "yellow", "high": "red"}


def _analyze(root: Path, tsconfig: str):
    config = AnalysisConfig(root=root, tsconfig_name=tsconfig)
    try:
        return run_analysis(config)
    except ConfigurationError as e:
        raise click.ClickException(str(e))


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """di-graph: map dependency injection between TypeScript classes."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path), default=".")
@click.option("--format", "-f", "fmt", type=click.Choice(_FORMAT_CHOICES), default="json", help="Output format")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write to a file instead of stdout")
@click.option("--tsconfig", default="tsconfig.json", show_default=True, help="Project configuration file name")
def analyze(root: Path, fmt: str, output: Path | None, tsconfig: str):
    """Analyze a project and print its dependency graph."""
    graph = _analyze(root, tsconfig)

    if fmt == "summary":
        text = _format_summary(graph)
    elif fmt == "cytoscape":
        text = json.dumps(graph.cytoscape_elements(), indent=2)
    else:
        text = json.dumps(graph.elements(), indent=2)

    if output:
        output.write_text(click.unstyle(text) + "\n", encoding="utf-8")
        click.echo(f"Wrote {len(graph.nodes)} node(s) and {len(graph.edges)} edge(s) to {output}")
    else:
        click.echo(text)


@cli.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("node_id")
@click.option("--tsconfig", default="tsconfig.json", show_default=True, help="Project configuration file name")
def show(root: Path, node_id: str, tsconfig: str):
    """Show the dependencies and dependents of one class."""
    graph = _analyze(root, tsconfig)
    node = graph.get_node(node_id)
    if node is None:
        raise click.ClickException(f"{node_id} has no dependency relations in {root}")

    level = graph.coupling(node_id)
    click.echo(
        f"{click.style(node.id, bold=True)}  "
        f"in={node.in_degree} out={node.out_degree}  "
        f"coupling={click.style(level, fg=_COUPLING_COLORS[level])}"
    )
    click.echo("\nDepends on:")
    for target in graph.dependencies_of(node_id) or ["(none)"]:
        click.echo(f"  {target}")
    click.echo("\nUsed by:")
    for source in graph.dependents_of(node_id) or ["(none)"]:
        click.echo(f"  {source}")


def _format_summary(graph) -> str:
    if not graph.nodes:
        return "No dependency relations found."
    lines = [f"{len(graph.nodes)} class(es), {len(graph.edges)} dependency edge(s)", ""]
    width = max(len(n.id) for n in graph.nodes)
    for node in graph.nodes:
        level = graph.coupling(node.id)
        lines.append(
            f"  {node.id:<{width}}  in={node.in_degree:<3} out={node.out_degree:<3} "
            f"{click.style(level, fg=_COUPLING_COLORS[level])}"
        )
    return "\n".join(lines)


@cli.command()
@click.option("--port", "-p", default=8421, help="Port number")
@click.option("--host", default="127.0.0.1", help="Host address")
@click.option("--open/--no-open", default=False, help="Open the API docs in a browser")
def serve(port: int, host: str, open: bool):
    """Start the JSON API server."""
    try:
        import uvicorn
    except ImportError:
        raise click.ClickException(
            "uvicorn is required for the API server. "
            "Install with: pip install 'di-graph[web]'"
        )

    from di_graph.web import create_app

    click.echo(f"Starting di-graph API at http://{host}:{port}")

    if open:
        import webbrowser
        import threading
        threading.Timer(1.0, lambda: webbrowser.open(f"http://{host}:{port}/docs")).start()

    uvicorn.run(create_app(), host=host, port=port, log_level="info")


if __name__ == "__main__":
    cli()
