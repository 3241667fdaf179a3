"""monotopo: Dependency-ordered package resolution for workspace monorepos."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

from monotopo.core.filters import ResolutionOptions
from monotopo.resolver import resolve
from monotopo.workspace.models import Package

__all__ = ["Package", "ResolutionOptions", "resolve", "__version__"]
