"""monotopo exception hierarchy.

All public exceptions inherit from MonotopoError, giving callers a single
base class to catch when they want to handle any resolution failure
without swallowing unrelated errors.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable


class MonotopoError(Exception):
    """Base exception for all monotopo errors."""


class WorkspaceDiscoveryError(MonotopoError):
    """Raised when the workspace declarations cannot be found or read.

    Covers a missing or malformed root manifest and a root manifest that
    declares no workspace glob patterns. Always fatal.
    """


class ManifestError(MonotopoError):
    """Raised when a single package manifest is malformed.

    The loader recovers from this by omitting the package; the resolver
    escalates it only when the omitted package was explicitly requested.
    """

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid manifest {self.path}: {reason}")


class DuplicatePackageError(MonotopoError):
    """Raised when two workspace directories declare the same package name."""

    def __init__(self, name: str, paths: Iterable[Path]) -> None:
        self.name = name
        self.paths = [Path(p) for p in paths]
        locations = ", ".join(str(p) for p in self.paths)
        super().__init__(f"Duplicate package name {name!r} declared in: {locations}")


class CyclicDependencyError(MonotopoError):
    """Raised when the workspace dependency graph contains a cycle.

    Attributes:
        names: Sorted names of every package left unresolved by the sorter.
        cycle: One concrete cycle path (first name repeated at the end),
            or an empty list when none could be recovered.
    """

    def __init__(self, names: Iterable[str], cycle: list[str] | None = None) -> None:
        self.names = sorted(names)
        self.cycle = list(cycle or [])
        if self.cycle:
            detail = " -> ".join(self.cycle)
        else:
            detail = ", ".join(self.names)
        super().__init__(f"Dependency cycle detected involving: {detail}")


class VcsError(MonotopoError):
    """Base class for failures talking to the version-control tool."""


class InvalidReferenceError(VcsError):
    """Raised when a git reference cannot be resolved to a commit."""

    def __init__(self, ref: str, detail: str = "") -> None:
        self.ref = ref
        message = f"Cannot resolve git reference {ref!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class VcsUnavailableError(VcsError):
    """Raised when git cannot be invoked at all (missing binary, not a repo)."""


class PredicateEvaluationError(MonotopoError):
    """Raised when a ``where`` expression cannot be parsed or evaluated.

    Covers syntax errors, disallowed constructs and references to
    attributes outside the package schema.
    """

    def __init__(self, expression: str, reason: str) -> None:
        self.expression = expression
        self.reason = reason
        super().__init__(f"Cannot evaluate where expression {expression!r}: {reason}")
