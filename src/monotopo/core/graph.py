"""Workspace dependency graph and graph algorithms.

The graph is stored as two adjacency maps over package names:

- ``dependencies``: name -> set of workspace packages it depends on
- ``dependents``: name -> set of workspace packages that depend on it

An edge ``A -> B`` means "A depends on B". Only runtime ``dependencies``
that name another workspace package become edges; registry dependencies
and ``devDependencies`` never do.
"""

from __future__ import annotations

import dataclasses
from collections import deque
from pathlib import Path
from typing import Iterable, Mapping

from monotopo.exceptions import DuplicatePackageError
from monotopo.workspace.models import Package


class DependencyGraph:
    """Directed dependency graph over workspace package names.

    Packages are looked up by name through an owned mapping; nodes hold no
    references to each other. The graph is never mutated after
    ``build_graph`` returns it.

    Thread safety: read-only after construction, so concurrent reads are
    safe.
    """

    def __init__(
        self,
        packages: Mapping[str, Package],
        dependencies: Mapping[str, set[str]],
        dependents: Mapping[str, set[str]],
    ) -> None:
        self._packages = dict(packages)
        self._dependencies = {name: frozenset(deps) for name, deps in dependencies.items()}
        self._dependents = {name: frozenset(deps) for name, deps in dependents.items()}

    @property
    def names(self) -> set[str]:
        """Return the set of all package names (graph nodes)."""
        return set(self._packages)

    @property
    def node_count(self) -> int:
        return len(self._packages)

    @property
    def edge_count(self) -> int:
        return sum(len(deps) for deps in self._dependencies.values())

    def __contains__(self, name: object) -> bool:
        return name in self._packages

    def __len__(self) -> int:
        return len(self._packages)

    def package(self, name: str) -> Package:
        """Return the package called *name*.

        Raises:
            KeyError: If *name* is not a workspace package.
        """
        return self._packages[name]

    def packages(self) -> list[Package]:
        """Return all packages in name order."""
        return [self._packages[name] for name in sorted(self._packages)]

    def dependencies_of(self, name: str) -> frozenset[str]:
        """Direct workspace dependencies of *name*."""
        return self._dependencies.get(name, frozenset())

    def dependents_of(self, name: str) -> frozenset[str]:
        """Workspace packages that directly depend on *name*."""
        return self._dependents.get(name, frozenset())

    def edges(self) -> list[tuple[str, str]]:
        """Return all ``(dependent, dependency)`` pairs, sorted."""
        return sorted(
            (name, dep)
            for name, deps in self._dependencies.items()
            for dep in deps
        )

    def transitive_dependencies(self, names: Iterable[str]) -> set[str]:
        """Everything reachable from *names* along "depends on" edges.

        Uses BFS with an explicit visited set, so it terminates on cyclic
        input and never recurses.

        Returns:
            The closure, excluding the start names unless one of them is
            reachable from another.
        """
        return self._reach(names, self._dependencies)

    def transitive_dependents(self, names: Iterable[str]) -> set[str]:
        """Every package that directly or transitively depends on *names*."""
        return self._reach(names, self._dependents)

    @staticmethod
    def _reach(
        start: Iterable[str], adjacency: Mapping[str, frozenset[str]]
    ) -> set[str]:
        visited: set[str] = set()
        queue: deque[str] = deque(start)
        while queue:
            current = queue.popleft()
            for neighbour in adjacency.get(current, frozenset()):
                if neighbour not in visited:
                    visited.add(neighbour)
                    queue.append(neighbour)
        return visited

    def find_cycle(self, among: Iterable[str] | None = None) -> list[str]:
        """Return one dependency cycle, or an empty list if there is none.

        Iterative DFS with white/gray/black colouring. Names are visited in
        sorted order so the reported cycle is deterministic.

        Args:
            among: Restrict the search to these names (e.g. the packages a
                topological sort could not place).

        Returns:
            A cycle path with the first name repeated at the end,
            e.g. ``["a", "b", "a"]``.
        """
        nodes = set(self._packages if among is None else among)
        WHITE, GRAY, BLACK = 0, 1, 2
        color = {name: WHITE for name in nodes}

        for root in sorted(nodes):
            if color[root] != WHITE:
                continue
            path: list[str] = [root]
            stack = [iter(sorted(self.dependencies_of(root) & nodes))]
            color[root] = GRAY
            while stack:
                advanced = False
                for nxt in stack[-1]:
                    if color[nxt] == GRAY:
                        return path[path.index(nxt):] + [nxt]
                    if color[nxt] == WHITE:
                        color[nxt] = GRAY
                        path.append(nxt)
                        stack.append(iter(sorted(self.dependencies_of(nxt) & nodes)))
                        advanced = True
                        break
                if not advanced:
                    color[path.pop()] = BLACK
                    stack.pop()
        return []


def restrict_dependencies(packages: Iterable[Package]) -> list[Package]:
    """Drop dependency entries that do not name another workspace package.

    Returns new ``Package`` instances; the inputs are left untouched.
    """
    packages = list(packages)
    names = {pkg.name for pkg in packages}
    return [
        dataclasses.replace(
            pkg,
            dependencies={
                dep: spec
                for dep, spec in pkg.dependencies.items()
                if dep in names and dep != pkg.name
            },
        )
        for pkg in packages
    ]


def build_graph(packages: Iterable[Package]) -> DependencyGraph:
    """Build the dependency graph for a set of workspace packages.

    Args:
        packages: Packages loaded from the workspace.

    Returns:
        A ``DependencyGraph`` with one node per package and one edge per
        runtime dependency on another workspace package.

    Raises:
        DuplicatePackageError: If two packages share a name.
    """
    by_name: dict[str, Package] = {}
    for pkg in packages:
        existing = by_name.get(pkg.name)
        if existing is not None:
            paths: list[Path] = [existing.path, pkg.path]
            raise DuplicatePackageError(pkg.name, paths)
        by_name[pkg.name] = pkg

    dependencies: dict[str, set[str]] = {name: set() for name in by_name}
    dependents: dict[str, set[str]] = {name: set() for name in by_name}
    for name, pkg in by_name.items():
        for dep in pkg.dependencies:
            if dep in by_name and dep != name:
                dependencies[name].add(dep)
                dependents[dep].add(name)

    return DependencyGraph(by_name, dependencies, dependents)
