"""``monotopo graph [ROOT]`` -- Show the workspace dependency graph."""

from __future__ import annotations

import click

from monotopo.cli.output import fail, print_graph, print_json
from monotopo.exceptions import MonotopoError
from monotopo.resolver import load_sorted_workspace


@click.command("graph")
@click.argument("root", type=click.Path(exists=True, file_okay=False), default=".")
@click.option(
    "--format", "-f", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def graph_command(root: str, output_format: str) -> None:
    """Print every package under ROOT with its workspace dependencies."""
    try:
        workspace = load_sorted_workspace(root)
    except MonotopoError as exc:
        fail(exc)

    if output_format == "json":
        print_json({
            pkg.name: sorted(workspace.graph.dependencies_of(pkg.name))
            for pkg in workspace.ordered
        })
    else:
        print_graph(workspace.graph, workspace.ordered)
