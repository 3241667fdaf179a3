"""monotopo CLI: dependency-ordered package listing for workspace monorepos.

Entry point for the ``monotopo`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    list     -- Resolve packages in dependency order, with filters.
    graph    -- Show each package with its workspace dependencies.
    changed  -- Show packages and files changed since a git reference.

Usage::

    monotopo list                                  # Every package, deps first
    monotopo list ./repo -i web --include-dependencies
    monotopo list --since origin/main --include-dependents
    monotopo list --where 'name.startswith("@acme/") and not private'
    monotopo graph ./repo
    monotopo changed HEAD~3 ./repo
"""

from __future__ import annotations

import logging

import click
from rich.logging import RichHandler

from monotopo import __version__
from monotopo.cli.changed_cmd import changed_command
from monotopo.cli.graph_cmd import graph_command
from monotopo.cli.list_cmd import list_command


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log resolution steps to stderr.")
def cli(verbose: bool) -> None:
    """monotopo: Resolve workspace packages in dependency order.

    Reads the workspace globs from the root package.json (or
    pnpm-workspace.yaml), orders packages so dependencies come first,
    and optionally narrows the list by name, predicate, or git changes.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(show_path=False)],
        )


cli.add_command(list_command)
cli.add_command(graph_command)
cli.add_command(changed_command)
