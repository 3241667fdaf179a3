"""Public entry point: resolve a monorepo's packages in dependency order.

Wires the pipeline together::

    load_workspace -> restrict_dependencies -> build_graph
        -> sort_topologically -> [find_changed_packages] -> filter_packages

Structural errors (unreadable workspace declarations, duplicate names,
cycles) abort the call. Malformed member manifests are skipped unless the
caller explicitly asked for that package through ``include``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from monotopo.core.filters import ResolutionOptions, filter_packages
from monotopo.core.graph import DependencyGraph, build_graph, restrict_dependencies
from monotopo.core.toposort import sort_topologically
from monotopo.exceptions import ManifestError
from monotopo.vcs.changes import find_changed_packages
from monotopo.vcs.git import GitClient
from monotopo.workspace.loader import load_workspace
from monotopo.workspace.models import Package

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    """A loaded, validated and sorted workspace.

    Attributes:
        root: Absolute monorepo root.
        graph: Dependency graph over the workspace packages.
        ordered: Every package in dependencies-first order.
        errors: Manifest errors recovered by omitting the package.
    """

    root: Path
    graph: DependencyGraph
    ordered: list[Package]
    errors: list[ManifestError] = field(default_factory=list)


def load_sorted_workspace(repo_path: Path | str) -> Workspace:
    """Load the workspace at *repo_path*, build its graph and sort it.

    Raises:
        WorkspaceDiscoveryError: If workspace declarations are missing.
        DuplicatePackageError: If two packages share a name.
        CyclicDependencyError: If the dependency graph has a cycle.
    """
    loaded = load_workspace(repo_path)
    packages = restrict_dependencies(loaded.packages)
    graph = build_graph(packages)
    ordered = sort_topologically(graph)
    logger.debug(
        "Workspace %s: %d packages, %d edges",
        loaded.root, graph.node_count, graph.edge_count,
    )
    return Workspace(root=loaded.root, graph=graph, ordered=ordered, errors=loaded.errors)


def _escalate_manifest_errors(workspace: Workspace, include: set[str] | None) -> None:
    """Re-raise a skipped manifest error when its package was requested.

    An unreadable manifest has no trustworthy name, so the package
    directory's name stands in for it.
    """
    if not include:
        return
    missing = include - workspace.graph.names
    for error in workspace.errors:
        if error.path.parent.name in missing:
            raise error


def resolve(
    repo_path: Path | str,
    options: ResolutionOptions | None = None,
    *,
    git: GitClient | None = None,
) -> list[Package]:
    """Resolve workspace packages in dependency order, then filter them.

    Args:
        repo_path: Monorepo root (directory holding the root manifest).
        options: Selection options. None selects every package.
        git: Git client for ``since`` queries. Defaults to ``GitClient()``.

    Returns:
        Selected packages, each after all of its workspace dependencies.

    Raises:
        WorkspaceDiscoveryError: Workspace declarations missing or unreadable.
        ManifestError: An explicitly included package has a bad manifest.
        DuplicatePackageError: Two packages share a name.
        CyclicDependencyError: The dependency graph has a cycle.
        InvalidReferenceError: ``since`` does not resolve to a commit.
        VcsUnavailableError: ``since`` was given but git cannot be run.
        PredicateEvaluationError: ``where`` is invalid.
    """
    options = options or ResolutionOptions()
    workspace = load_sorted_workspace(repo_path)
    _escalate_manifest_errors(workspace, options.include)

    changed: set[Package] | None = None
    if options.since is not None:
        changed = find_changed_packages(
            workspace.root, options.since, workspace.ordered, client=git
        )

    result = filter_packages(workspace.ordered, workspace.graph, options, changed)
    logger.debug("Resolved %d of %d packages", len(result), len(workspace.ordered))
    return result
