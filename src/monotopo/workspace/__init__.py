"""Workspace discovery: manifests, workspace globs, and package loading.

All public names are re-exported here so callers can write
``from monotopo.workspace import load_packages``.
"""

from monotopo.workspace.loader import LoadResult, load_packages, load_workspace
from monotopo.workspace.manifest import (
    MANIFEST_FILENAME,
    list_workspace_package_paths,
    read_manifest,
    read_workspace_patterns,
)
from monotopo.workspace.models import Manifest, Package

__all__ = [
    "LoadResult",
    "MANIFEST_FILENAME",
    "Manifest",
    "Package",
    "list_workspace_package_paths",
    "load_packages",
    "load_workspace",
    "read_manifest",
    "read_workspace_patterns",
]
