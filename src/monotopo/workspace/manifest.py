"""Manifest reading and workspace glob enumeration.

Reads ``package.json`` files into ``Manifest`` records and expands the
root manifest's workspace declarations into package directories.

Workspace declarations are looked up in this order:

1. ``package.json`` ``workspaces`` as an array (npm) or as an object with
   a ``packages`` array (yarn classic).
2. ``pnpm-workspace.yaml`` ``packages`` array.

Patterns beginning with ``!`` remove directories matched by the positive
patterns. ``node_modules`` trees are never considered.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from monotopo.exceptions import ManifestError, WorkspaceDiscoveryError
from monotopo.workspace.models import Manifest

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "package.json"
PNPM_WORKSPACE_FILENAME = "pnpm-workspace.yaml"

_EXCLUDED_DIRS = frozenset({"node_modules", ".git"})


# ---------------------------------------------------------------------------
# Manifest parsing
# ---------------------------------------------------------------------------


def _string_mapping(path: Path, data: dict[str, Any], key: str) -> dict[str, str]:
    """Extract a name -> range mapping, validating its shape."""
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ManifestError(path, f"{key!r} must be an object")
    for dep_name, dep_range in value.items():
        if not isinstance(dep_range, str):
            raise ManifestError(
                path, f"{key!r} entry {dep_name!r} must map to a version string"
            )
    return dict(value)


def _private_flag(path: Path, value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if value in ("true", "false"):
        return value == "true"
    raise ManifestError(path, "'private' must be a boolean")


def _workspace_patterns(path: Path, value: Any) -> tuple[str, ...]:
    """Normalize the npm array form and the yarn object form."""
    if value is None:
        return ()
    if isinstance(value, dict):
        value = value.get("packages", [])
    if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
        raise ManifestError(path, "'workspaces' must be a list of glob patterns")
    return tuple(value)


def read_manifest(path: Path | str) -> Manifest:
    """Read a ``package.json`` file.

    Args:
        path: Path to the manifest file, or to the directory holding it.

    Returns:
        The parsed ``Manifest``. ``name`` is None when the field is absent.

    Raises:
        ManifestError: If the file cannot be read, is not valid JSON, or
            a known field has the wrong type.
    """
    manifest_path = Path(path)
    if manifest_path.is_dir():
        manifest_path = manifest_path / MANIFEST_FILENAME
    manifest_path = manifest_path.resolve()

    try:
        raw = manifest_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(manifest_path, f"cannot read file ({exc})") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ManifestError(manifest_path, f"invalid JSON ({exc})") from exc

    if not isinstance(data, dict):
        raise ManifestError(manifest_path, "top-level value must be an object")

    name = data.get("name")
    if name is not None and not isinstance(name, str):
        raise ManifestError(manifest_path, "'name' must be a string")
    version = data.get("version", "0.0.0")
    if not isinstance(version, str):
        raise ManifestError(manifest_path, "'version' must be a string")

    return Manifest(
        path=manifest_path,
        name=name or None,
        version=version,
        dependencies=_string_mapping(manifest_path, data, "dependencies"),
        dev_dependencies=_string_mapping(manifest_path, data, "devDependencies"),
        private=_private_flag(manifest_path, data.get("private")),
        workspaces=_workspace_patterns(manifest_path, data.get("workspaces")),
    )


# ---------------------------------------------------------------------------
# Workspace enumeration
# ---------------------------------------------------------------------------


def _read_pnpm_patterns(root: Path) -> tuple[str, ...]:
    """Read ``packages`` from ``pnpm-workspace.yaml`` if present."""
    config = root / PNPM_WORKSPACE_FILENAME
    if not config.is_file():
        return ()
    try:
        data = yaml.safe_load(config.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError, UnicodeDecodeError) as exc:
        raise WorkspaceDiscoveryError(f"Cannot read {config}: {exc}") from exc
    if not isinstance(data, dict):
        return ()
    packages = data.get("packages") or []
    if not isinstance(packages, list) or not all(isinstance(p, str) for p in packages):
        raise WorkspaceDiscoveryError(
            f"{config}: 'packages' must be a list of glob patterns"
        )
    return tuple(packages)


def read_workspace_patterns(root: Path | str) -> tuple[str, ...]:
    """Return the workspace glob patterns declared at *root*.

    Raises:
        WorkspaceDiscoveryError: If the root manifest cannot be read or no
            patterns are declared anywhere.
    """
    root_path = Path(root).resolve()
    try:
        manifest = read_manifest(root_path / MANIFEST_FILENAME)
    except ManifestError as exc:
        raise WorkspaceDiscoveryError(
            f"Cannot read root manifest of {root_path}: {exc.reason}"
        ) from exc

    patterns = manifest.workspaces or _read_pnpm_patterns(root_path)
    if not patterns:
        raise WorkspaceDiscoveryError(
            f"No workspace patterns declared in {manifest.path}"
            f" or {root_path / PNPM_WORKSPACE_FILENAME}"
        )
    return patterns


def _expand_pattern(root: Path, pattern: str) -> set[Path]:
    """Expand one glob pattern into matching directories under *root*."""
    cleaned = pattern.strip().rstrip("/")
    while cleaned.startswith("./"):
        cleaned = cleaned[2:]
    cleaned = cleaned.lstrip("/")
    if not cleaned or cleaned == ".":
        return {root}
    matches: set[Path] = set()
    for candidate in root.glob(cleaned):
        if not candidate.is_dir():
            continue
        relative = candidate.relative_to(root)
        if _EXCLUDED_DIRS.intersection(relative.parts):
            continue
        matches.add(candidate.resolve())
    return matches


def list_workspace_package_paths(root: Path | str) -> list[Path]:
    """Enumerate directories matched by the workspace globs at *root*.

    Args:
        root: Monorepo root directory (holding the root ``package.json``).

    Returns:
        Sorted, de-duplicated absolute directory paths. A directory listed
        here is not necessarily a package; the loader checks for a manifest.

    Raises:
        WorkspaceDiscoveryError: If no workspace patterns are declared.
    """
    root_path = Path(root).resolve()
    patterns = read_workspace_patterns(root_path)

    included: set[Path] = set()
    excluded: set[Path] = set()
    for pattern in patterns:
        if pattern.startswith("!"):
            excluded |= _expand_pattern(root_path, pattern[1:])
        else:
            included |= _expand_pattern(root_path, pattern)

    # The root itself is the workspace, never one of its members.
    included.discard(root_path)
    paths = sorted(included - excluded)
    logger.debug(
        "Workspace patterns %s matched %d directories", list(patterns), len(paths)
    )
    return paths
