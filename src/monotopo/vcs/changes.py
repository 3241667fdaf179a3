"""Change Detector: which workspace packages changed since a git reference.

"Changed" means the union of four independent git queries:

- committed: ``since..HEAD`` tree-to-tree diff
- staged:    ``HEAD`` to index diff
- unstaged:  index to working tree diff (tracked files only)
- untracked: files neither tracked nor ignored

The queries are read-only and mutually independent, so they run
concurrently in a thread pool; their results are combined by set union,
which does not depend on completion order.

Each changed path is attributed to the package whose directory is its
nearest enclosing ancestor. Paths outside every package are dropped.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable

from monotopo.vcs.git import GitClient
from monotopo.workspace.models import Package

logger = logging.getLogger(__name__)


class ChangeOrigin(Enum):
    """Where a change was observed. Diagnostic only; never affects membership."""

    COMMITTED = "committed"
    STAGED = "staged"
    UNSTAGED = "unstaged"
    UNTRACKED = "untracked"


@dataclass
class ChangedFileSet:
    """Repository-relative changed paths tagged by origin.

    Attributes:
        root: Absolute top-level directory the paths are relative to.
        origins: Path -> set of origins it was reported by.
    """

    root: Path
    origins: dict[str, set[ChangeOrigin]] = field(default_factory=dict)

    def add(self, origin: ChangeOrigin, paths: Iterable[str]) -> None:
        for path in paths:
            self.origins.setdefault(path, set()).add(origin)

    @property
    def paths(self) -> set[str]:
        """All changed paths, regardless of origin."""
        return set(self.origins)

    def by_origin(self, origin: ChangeOrigin) -> set[str]:
        return {path for path, found in self.origins.items() if origin in found}

    def counts(self) -> dict[str, int]:
        """Number of paths reported per origin, keyed by origin value."""
        return {origin.value: len(self.by_origin(origin)) for origin in ChangeOrigin}

    def absolute_paths(self) -> set[Path]:
        return {self.root / path for path in self.origins}

    def __len__(self) -> int:
        return len(self.origins)

    def __bool__(self) -> bool:
        return bool(self.origins)


def find_changed_files(
    repo_path: Path | str,
    since_ref: str,
    client: GitClient | None = None,
) -> ChangedFileSet:
    """Collect every file changed since *since_ref*, in any state.

    Args:
        repo_path: Any directory inside the git working tree.
        since_ref: Reference to compare against (branch, tag, ``HEAD~1``...).
        client: Git client to use. Defaults to a plain ``GitClient``.

    Returns:
        The changed-file set; empty when nothing differs.

    Raises:
        InvalidReferenceError: If *since_ref* does not resolve to a commit.
        VcsUnavailableError: If git cannot be run or this is not a repository.
    """
    client = client or GitClient()
    root = client.toplevel(repo_path)
    # Fail fast on a bad ref before fanning out.
    since_commit = client.resolve_ref(repo_path, since_ref)

    queries: dict[ChangeOrigin, Callable[[], list[str]]] = {
        ChangeOrigin.COMMITTED: lambda: client.diff_tree_to_tree(repo_path, since_commit, "HEAD"),
        ChangeOrigin.STAGED: lambda: client.diff_tree_to_index(repo_path, "HEAD"),
        ChangeOrigin.UNSTAGED: lambda: client.diff_index_to_workdir(repo_path),
        ChangeOrigin.UNTRACKED: lambda: client.list_untracked_files(repo_path),
    }

    changed = ChangedFileSet(root=root)
    with ThreadPoolExecutor(max_workers=len(queries)) as executor:
        futures = {origin: executor.submit(query) for origin, query in queries.items()}
        for origin, future in futures.items():
            changed.add(origin, future.result())

    logger.debug("Changes since %s: %s", since_ref, changed.counts())
    return changed


def map_paths_to_packages(
    paths: Iterable[Path], packages: Iterable[Package]
) -> set[Package]:
    """Attribute absolute file paths to their nearest enclosing package.

    Nested packages win over their ancestors: a file under
    ``packages/a/nested`` belongs to ``nested`` when both are packages.
    """
    by_dir = {pkg.path.resolve(): pkg for pkg in packages}
    owners: set[Package] = set()
    for path in paths:
        for candidate in (path, *path.parents):
            owner = by_dir.get(candidate)
            if owner is not None:
                owners.add(owner)
                break
    return owners


def find_changed_packages(
    repo_path: Path | str,
    since_ref: str,
    packages: Iterable[Package],
    client: GitClient | None = None,
) -> set[Package]:
    """Return the packages touched by changes since *since_ref*.

    Raises:
        InvalidReferenceError: If *since_ref* does not resolve to a commit.
        VcsUnavailableError: If git cannot be run.
    """
    changed = find_changed_files(repo_path, since_ref, client=client)
    owners = map_paths_to_packages(changed.absolute_paths(), packages)
    logger.debug(
        "%d changed files map to %d packages", len(changed), len(owners)
    )
    return owners
