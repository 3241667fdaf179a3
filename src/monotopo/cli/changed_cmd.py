"""``monotopo changed REF [ROOT]`` -- Packages changed since a git reference.

Counts committed, staged, unstaged and untracked changes, then maps the
changed files onto workspace packages.
"""

from __future__ import annotations

import click

from monotopo.cli.output import fail, print_changes, print_json
from monotopo.exceptions import MonotopoError
from monotopo.resolver import load_sorted_workspace
from monotopo.vcs.changes import find_changed_files, map_paths_to_packages


@click.command("changed")
@click.argument("ref")
@click.argument("root", type=click.Path(exists=True, file_okay=False), default=".")
@click.option(
    "--format", "-f", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def changed_command(ref: str, root: str, output_format: str) -> None:
    """Show which packages under ROOT changed since REF."""
    try:
        workspace = load_sorted_workspace(root)
        changed = find_changed_files(workspace.root, ref)
    except MonotopoError as exc:
        fail(exc)

    owners = map_paths_to_packages(changed.absolute_paths(), workspace.ordered)
    packages = [pkg for pkg in workspace.ordered if pkg in owners]

    if output_format == "json":
        print_json({
            "ref": ref,
            "files": {
                path: sorted(origin.value for origin in origins)
                for path, origins in sorted(changed.origins.items())
            },
            "packages": [pkg.name for pkg in packages],
        })
    else:
        print_changes(changed, packages, ref)
