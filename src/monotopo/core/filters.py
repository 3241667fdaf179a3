"""Filter Pipeline: narrow and expand a topologically sorted package list.

Stages run in a fixed order; each one only narrows or transitively
expands the working set of names, and the final list is read back out of
the original order, so the result is always a subsequence of it:

1. ``since``                -- keep changed packages
2. ``include``              -- keep named packages
3. ``where``                -- keep packages matching the predicate
4. ``include_dependencies`` -- add transitive dependencies
5. ``include_dependents``   -- add transitive dependents
6. ``exclude``              -- drop named packages
7. ``exclude_private``      -- drop private packages
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from monotopo.core.graph import DependencyGraph
from monotopo.core.predicate import PackagePredicate, compile_predicate
from monotopo.workspace.models import Package

logger = logging.getLogger(__name__)


@dataclass
class ResolutionOptions:
    """Caller-supplied selection options. All fields are optional.

    Attributes:
        include: Package names to restrict to. None selects every package.
        exclude: Package names to remove after all expansion.
        include_dependencies: Add everything the selection depends on.
        include_dependents: Add everything that depends on the selection.
        exclude_private: Drop packages marked ``private``.
        where: Boolean expression over package attributes, or a callable
            taking a ``Package``.
        since: Git reference; keep only packages changed since it.
    """

    include: set[str] | None = None
    exclude: set[str] = field(default_factory=set)
    include_dependencies: bool = False
    include_dependents: bool = False
    exclude_private: bool = False
    where: str | PackagePredicate | None = None
    since: str | None = None

    def __post_init__(self) -> None:
        if self.include is not None:
            self.include = set(self.include)
        self.exclude = set(self.exclude or ())


def filter_packages(
    ordered: Iterable[Package],
    graph: DependencyGraph,
    options: ResolutionOptions,
    changed: Iterable[Package] | None = None,
) -> list[Package]:
    """Apply the selection options to a topologically ordered package list.

    Args:
        ordered: Packages in the order produced by ``sort_topologically``.
        graph: Graph the order was computed from; used for expansion.
        options: Selection options.
        changed: Packages touched since ``options.since``. Required when
            ``options.since`` is set, ignored otherwise.

    Returns:
        The selected packages, in their original relative order.

    Raises:
        ValueError: If ``options.since`` is set but *changed* is None.
        PredicateEvaluationError: If ``options.where`` is invalid.
    """
    ordered = list(ordered)
    by_name = {pkg.name: pkg for pkg in ordered}
    selected = set(by_name)

    if options.since is not None:
        if changed is None:
            raise ValueError("changed packages are required when 'since' is set")
        selected &= {pkg.name for pkg in changed}
        logger.debug("since %s: %d packages", options.since, len(selected))

    if options.include is not None:
        unknown = options.include - by_name.keys()
        if unknown:
            logger.warning("Ignoring unknown packages in include: %s", ", ".join(sorted(unknown)))
        selected &= options.include

    if options.where is not None:
        predicate = compile_predicate(options.where)
        # Iterate in order so evaluation errors are reported deterministically.
        selected = {
            pkg.name for pkg in ordered if pkg.name in selected and predicate(pkg)
        }
        logger.debug("where: %d packages", len(selected))

    if options.include_dependencies:
        selected |= graph.transitive_dependencies(selected) & by_name.keys()

    if options.include_dependents:
        selected |= graph.transitive_dependents(selected) & by_name.keys()

    selected -= options.exclude

    if options.exclude_private:
        selected = {name for name in selected if not by_name[name].private}

    return [pkg for pkg in ordered if pkg.name in selected]
