"""Rich output formatting helpers for the monotopo CLI."""

from __future__ import annotations

import json
import sys
from typing import Any, NoReturn

import click
from rich.console import Console
from rich.table import Table

from monotopo.core.graph import DependencyGraph
from monotopo.exceptions import MonotopoError
from monotopo.vcs.changes import ChangedFileSet
from monotopo.workspace.models import Package

console = Console()


def fail(error: MonotopoError) -> NoReturn:
    """Report *error* on stderr and exit with status 1."""
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def print_json(data: Any) -> None:
    """Print data as JSON on stdout (plain, pipe-friendly)."""
    click.echo(json.dumps(data, indent=2, default=str))


def print_package_table(packages: list[Package], title: str = "Packages") -> None:
    """Print packages in order, one row each.

    Args:
        packages: Packages in dependency order.
        title: Table title.
    """
    if not packages:
        console.print("[dim]No packages matched.[/dim]")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Package", style="bold")
    table.add_column("Version")
    table.add_column("Private", justify="center")
    table.add_column("Path", style="dim")

    for index, pkg in enumerate(packages, start=1):
        private = "[yellow]yes[/yellow]" if pkg.private else "-"
        table.add_row(str(index), pkg.name, pkg.version, private, str(pkg.path))

    console.print(table)
    console.print(f"[bold]{len(packages)}[/bold] packages")


def print_graph(graph: DependencyGraph, ordered: list[Package]) -> None:
    """Print each package with its direct workspace dependencies and dependents."""
    table = Table(title="Dependency Graph", show_header=True, header_style="bold")
    table.add_column("Package", style="bold")
    table.add_column("Depends on")
    table.add_column("Depended on by", style="dim")
    for pkg in ordered:
        deps = ", ".join(sorted(graph.dependencies_of(pkg.name))) or "-"
        dependents = ", ".join(sorted(graph.dependents_of(pkg.name))) or "-"
        table.add_row(pkg.name, deps, dependents)
    console.print(table)
    console.print(
        f"[bold]{graph.node_count}[/bold] packages | {graph.edge_count} edges"
    )


def print_changes(changed: ChangedFileSet, packages: list[Package], ref: str) -> None:
    """Print the per-origin file counts and the changed packages."""
    counts = changed.counts()
    parts = [f"{origin}: {count}" for origin, count in counts.items()]
    console.print(f"Changes since [bold]{ref}[/bold]: " + " | ".join(parts))
    print_package_table(packages, title="Changed Packages")
