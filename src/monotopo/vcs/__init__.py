"""Version-control integration: git queries and change detection."""

from monotopo.vcs.changes import (
    ChangedFileSet,
    ChangeOrigin,
    find_changed_files,
    find_changed_packages,
    map_paths_to_packages,
)
from monotopo.vcs.git import GitClient

__all__ = [
    "ChangeOrigin",
    "ChangedFileSet",
    "GitClient",
    "find_changed_files",
    "find_changed_packages",
    "map_paths_to_packages",
]
