"""Topological Sorter: dependencies-first linearization of the workspace.

Kahn-style layering: each round extracts every package whose workspace
dependencies have all been placed, ordered by ascending name. The result
is the canonical order every later filter preserves.
"""

from __future__ import annotations

from typing import Iterable

from monotopo.core.graph import DependencyGraph
from monotopo.exceptions import CyclicDependencyError
from monotopo.workspace.models import Package


def sort_topologically(
    graph: DependencyGraph, packages: Iterable[Package] | None = None
) -> list[Package]:
    """Order packages so each appears after all of its dependencies.

    Args:
        graph: Dependency graph built by ``build_graph``.
        packages: Packages to order. Defaults to every package in *graph*.
            Edges to packages outside this set are ignored, so ordering an
            already sorted subset reproduces it.

    Returns:
        Packages in dependencies-first order, ties broken by name.

    Raises:
        CyclicDependencyError: If the dependencies cannot be linearized.
    """
    if packages is None:
        packages = graph.packages()
    by_name = {pkg.name: pkg for pkg in packages}

    remaining = {
        name: set(graph.dependencies_of(name)) & by_name.keys()
        for name in by_name
    }
    order: list[Package] = []

    while remaining:
        ready = sorted(name for name, deps in remaining.items() if not deps)
        if not ready:
            cycle = graph.find_cycle(remaining)
            raise CyclicDependencyError(remaining, cycle)
        for name in ready:
            del remaining[name]
            order.append(by_name[name])
        placed = set(ready)
        for deps in remaining.values():
            deps -= placed

    return order


def is_topological(graph: DependencyGraph, ordered: Iterable[Package]) -> bool:
    """Return True if every dependency in *ordered* precedes its dependents."""
    position: dict[str, int] = {}
    for index, pkg in enumerate(ordered):
        position[pkg.name] = index
    return all(
        position[dep] < index
        for name, index in position.items()
        for dep in graph.dependencies_of(name)
        if dep in position
    )
