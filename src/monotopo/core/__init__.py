"""Core resolution algorithms: graph building, sorting, predicates, filtering."""

from monotopo.core.filters import ResolutionOptions, filter_packages
from monotopo.core.graph import DependencyGraph, build_graph, restrict_dependencies
from monotopo.core.predicate import Predicate, compile_predicate
from monotopo.core.toposort import is_topological, sort_topologically

__all__ = [
    "DependencyGraph",
    "Predicate",
    "ResolutionOptions",
    "build_graph",
    "compile_predicate",
    "filter_packages",
    "is_topological",
    "restrict_dependencies",
    "sort_topologically",
]
