"""Data models for workspace packages.

``Manifest`` is the raw record read from a single ``package.json``.
``Package`` is the immutable workspace member built from it, the unit that
the graph builder, sorter, change detector and filter pipeline operate on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping


def _freeze(mapping: Mapping[str, str] | None) -> Mapping[str, str]:
    """Return a read-only copy of *mapping*."""
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class Manifest:
    """A parsed ``package.json``.

    Attributes:
        path: Absolute path to the manifest file.
        name: Value of the ``name`` field, or None when absent.
        version: Value of the ``version`` field ("0.0.0" when absent).
        dependencies: Runtime dependency name -> version range.
        dev_dependencies: Development dependency name -> version range.
        private: Value of the ``private`` flag.
        workspaces: Workspace glob patterns (only meaningful at the root).
    """

    path: Path
    name: str | None
    version: str = "0.0.0"
    dependencies: Mapping[str, str] = field(default_factory=dict)
    dev_dependencies: Mapping[str, str] = field(default_factory=dict)
    private: bool = False
    workspaces: tuple[str, ...] = ()


@dataclass(frozen=True, eq=False)
class Package:
    """A single workspace member.

    Packages are compared and hashed by identity of their ``name`` and
    ``path``; dependency mappings are read-only views so a package cannot
    be mutated after the loader builds it.

    Attributes:
        name: Unique package name within one resolution.
        version: Version string, informational only.
        path: Absolute package directory. Owns every file beneath it.
        dependencies: Runtime dependencies restricted to workspace packages.
        dev_dependencies: Development dependencies as declared (all names).
        private: Whether the package is marked private.
        manifest_path: Absolute path of the ``package.json`` it came from.
    """

    name: str
    version: str
    path: Path
    dependencies: Mapping[str, str] = field(default_factory=dict)
    dev_dependencies: Mapping[str, str] = field(default_factory=dict)
    private: bool = False
    manifest_path: Path | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))
        object.__setattr__(self, "dependencies", _freeze(self.dependencies))
        object.__setattr__(self, "dev_dependencies", _freeze(self.dev_dependencies))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Package):
            return NotImplemented
        return self.name == other.name and self.path == other.path

    def __hash__(self) -> int:
        return hash((self.name, self.path))

    def owns(self, file_path: Path) -> bool:
        """Return True if *file_path* lies inside this package directory."""
        return file_path == self.path or self.path in file_path.parents

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict (sorted dependency keys)."""
        return {
            "name": self.name,
            "version": self.version,
            "path": str(self.path),
            "private": self.private,
            "dependencies": dict(sorted(self.dependencies.items())),
            "devDependencies": dict(sorted(self.dev_dependencies.items())),
        }
