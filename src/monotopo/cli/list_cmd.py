"""``monotopo list [ROOT]`` -- Resolve packages in dependency order.

Exit Codes:
    0 -- Resolution succeeded (the list may be empty).
    1 -- Resolution failed (bad workspace, cycle, bad ref, bad predicate).
"""

from __future__ import annotations

import click

from monotopo.cli.output import fail, print_json, print_package_table
from monotopo.core.filters import ResolutionOptions
from monotopo.exceptions import MonotopoError
from monotopo.resolver import resolve


@click.command("list")
@click.argument("root", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--include", "-i", multiple=True, help="Restrict to this package (repeatable).")
@click.option("--exclude", "-e", multiple=True, help="Drop this package (repeatable).")
@click.option("--include-dependencies", is_flag=True, help="Add transitive dependencies.")
@click.option("--include-dependents", is_flag=True, help="Add transitive dependents.")
@click.option("--exclude-private", is_flag=True, help="Drop packages marked private.")
@click.option("--where", default=None, help='Predicate, e.g. \'name == "web"\'.')
@click.option("--since", default=None, help="Only packages changed since this git ref.")
@click.option(
    "--format", "-f", "output_format",
    type=click.Choice(["text", "json", "names"]),
    default="text",
    help="Output format (default: text).",
)
def list_command(
    root: str,
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    include_dependencies: bool,
    include_dependents: bool,
    exclude_private: bool,
    where: str | None,
    since: str | None,
    output_format: str,
) -> None:
    """List workspace packages under ROOT, dependencies first.

    Filters apply in a fixed order: --since, --include, --where,
    --include-dependencies, --include-dependents, --exclude,
    --exclude-private.
    """
    options = ResolutionOptions(
        include=set(include) if include else None,
        exclude=set(exclude),
        include_dependencies=include_dependencies,
        include_dependents=include_dependents,
        exclude_private=exclude_private,
        where=where,
        since=since,
    )
    try:
        packages = resolve(root, options)
    except MonotopoError as exc:
        fail(exc)

    if output_format == "json":
        print_json([pkg.to_dict() for pkg in packages])
    elif output_format == "names":
        for pkg in packages:
            click.echo(pkg.name)
    else:
        print_package_table(packages)
