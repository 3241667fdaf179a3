"""Manifest Loader: turn workspace directories into ``Package`` records.

For every directory matched by the workspace globs, read its
``package.json``. Directories without a manifest are not packages and are
skipped silently; manifests without a ``name`` are skipped too. Malformed
manifests are skipped with a warning and reported on the ``LoadResult`` so
the resolver can escalate them when the caller explicitly asked for that
package.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from monotopo.exceptions import ManifestError
from monotopo.workspace.manifest import (
    MANIFEST_FILENAME,
    list_workspace_package_paths,
    read_manifest,
)
from monotopo.workspace.models import Package

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    """Outcome of loading a workspace.

    Attributes:
        root: Absolute monorepo root.
        packages: Successfully loaded packages, in directory order.
        errors: Manifest errors recovered by omitting the package.
    """

    root: Path
    packages: list[Package] = field(default_factory=list)
    errors: list[ManifestError] = field(default_factory=list)


def load_workspace(root: Path | str) -> LoadResult:
    """Load every workspace package under *root*, collecting manifest errors.

    Dependencies are kept as declared here; restricting them to workspace
    members is the graph builder's job, since it needs the full name set.

    Raises:
        WorkspaceDiscoveryError: If the root manifest is unreadable or
            declares no workspace patterns.
    """
    root_path = Path(root).resolve()
    result = LoadResult(root=root_path)

    for directory in list_workspace_package_paths(root_path):
        manifest_file = directory / MANIFEST_FILENAME
        if not manifest_file.is_file():
            continue
        try:
            manifest = read_manifest(manifest_file)
        except ManifestError as exc:
            logger.warning("Skipping %s: %s", directory, exc.reason)
            result.errors.append(exc)
            continue
        if manifest.name is None:
            logger.debug("Skipping %s: manifest has no name", directory)
            continue
        result.packages.append(
            Package(
                name=manifest.name,
                version=manifest.version,
                path=directory,
                dependencies=manifest.dependencies,
                dev_dependencies=manifest.dev_dependencies,
                private=manifest.private,
                manifest_path=manifest.path,
            )
        )

    logger.debug(
        "Loaded %d packages from %s (%d skipped as malformed)",
        len(result.packages), root_path, len(result.errors),
    )
    return result


def load_packages(root: Path | str) -> list[Package]:
    """Return the workspace packages under *root*.

    Convenience wrapper over ``load_workspace`` that drops the error list.
    """
    return load_workspace(root).packages
