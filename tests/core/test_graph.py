"""Tests for dependency graph construction and reachability."""

from __future__ import annotations

from pathlib import Path

import pytest

from monotopo.core import build_graph, restrict_dependencies
from monotopo.exceptions import DuplicatePackageError
from monotopo.workspace.models import Package


def _pkg(name: str, *deps: str, dev: tuple[str, ...] = (), private: bool = False) -> Package:
    """Convenience factory for Package instances."""
    return Package(
        name=name,
        version="1.0.0",
        path=Path("/repo/packages") / name,
        dependencies={d: "1.0.0" for d in deps},
        dev_dependencies={d: "1.0.0" for d in dev},
        private=private,
    )


def _diamond() -> list[Package]:
    """app -> (ui, api) -> core."""
    return [
        _pkg("app", "ui", "api"),
        _pkg("ui", "core"),
        _pkg("api", "core"),
        _pkg("core"),
    ]


class TestBuildGraph:
    """Tests for ``build_graph``."""

    def test_nodes_and_edges(self) -> None:
        graph = build_graph(_diamond())
        assert graph.names == {"app", "ui", "api", "core"}
        assert graph.node_count == 4
        assert graph.edge_count == 4
        assert graph.edges() == [
            ("api", "core"), ("app", "api"), ("app", "ui"), ("ui", "core"),
        ]

    def test_adjacency_both_directions(self) -> None:
        graph = build_graph(_diamond())
        assert graph.dependencies_of("app") == {"ui", "api"}
        assert graph.dependents_of("core") == {"ui", "api"}
        assert graph.dependents_of("app") == frozenset()

    def test_external_dependencies_ignored(self) -> None:
        graph = build_graph([_pkg("a", "react", "b"), _pkg("b")])
        assert graph.dependencies_of("a") == {"b"}
        assert "react" not in graph

    def test_dev_dependencies_do_not_create_edges(self) -> None:
        graph = build_graph([_pkg("a", dev=("b",)), _pkg("b")])
        assert graph.edge_count == 0

    def test_self_dependency_ignored(self) -> None:
        graph = build_graph([_pkg("a", "a")])
        assert graph.edge_count == 0

    def test_duplicate_names_rejected(self) -> None:
        first = _pkg("dup")
        second = Package(name="dup", version="2.0.0", path=Path("/repo/other/dup"))
        with pytest.raises(DuplicatePackageError) as excinfo:
            build_graph([first, second])
        assert excinfo.value.name == "dup"
        assert excinfo.value.paths == [first.path, second.path]
        assert "dup" in str(excinfo.value)

    def test_package_lookup(self) -> None:
        graph = build_graph(_diamond())
        assert graph.package("core").name == "core"
        assert [p.name for p in graph.packages()] == ["api", "app", "core", "ui"]
        with pytest.raises(KeyError):
            graph.package("missing")

    def test_empty_workspace(self) -> None:
        graph = build_graph([])
        assert len(graph) == 0
        assert graph.edges() == []


class TestRestrictDependencies:
    """Tests for dropping non-workspace dependency entries."""

    def test_keeps_only_workspace_names(self) -> None:
        restricted = restrict_dependencies([_pkg("a", "b", "lodash"), _pkg("b")])
        assert dict(restricted[0].dependencies) == {"b": "1.0.0"}

    def test_inputs_untouched(self) -> None:
        original = _pkg("a", "lodash")
        restrict_dependencies([original])
        assert dict(original.dependencies) == {"lodash": "1.0.0"}

    def test_dev_dependencies_preserved(self) -> None:
        (restricted,) = restrict_dependencies([_pkg("a", dev=("jest",))])
        assert dict(restricted.dev_dependencies) == {"jest": "1.0.0"}


class TestTransitiveClosure:
    """Tests for BFS reachability over the adjacency maps."""

    def test_dependencies_of_root(self) -> None:
        graph = build_graph(_diamond())
        assert graph.transitive_dependencies(["app"]) == {"ui", "api", "core"}

    def test_dependencies_of_leaf(self) -> None:
        graph = build_graph(_diamond())
        assert graph.transitive_dependencies(["core"]) == set()

    def test_dependents_of_leaf(self) -> None:
        graph = build_graph(_diamond())
        assert graph.transitive_dependents(["core"]) == {"ui", "api", "app"}

    def test_multiple_start_nodes(self) -> None:
        graph = build_graph(_diamond())
        assert graph.transitive_dependents(["ui", "api"]) == {"app"}

    def test_terminates_on_cycle(self) -> None:
        graph = build_graph([_pkg("a", "b"), _pkg("b", "a")])
        assert graph.transitive_dependencies(["a"]) == {"a", "b"}

    def test_unknown_start_name(self) -> None:
        graph = build_graph(_diamond())
        assert graph.transitive_dependencies(["ghost"]) == set()


class TestFindCycle:
    """Tests for concrete cycle recovery."""

    def test_no_cycle(self) -> None:
        assert build_graph(_diamond()).find_cycle() == []

    def test_two_node_cycle(self) -> None:
        graph = build_graph([_pkg("a", "b"), _pkg("b", "a")])
        assert graph.find_cycle() == ["a", "b", "a"]

    def test_cycle_behind_acyclic_prefix(self) -> None:
        graph = build_graph([
            _pkg("entry", "x"), _pkg("x", "y"), _pkg("y", "z"), _pkg("z", "x"),
        ])
        assert graph.find_cycle() == ["x", "y", "z", "x"]

    def test_restricted_search(self) -> None:
        graph = build_graph([_pkg("a", "b"), _pkg("b", "a"), _pkg("c")])
        assert graph.find_cycle(among={"c"}) == []
