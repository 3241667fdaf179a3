"""Shared fixtures for monotopo tests.

Builds real monorepos on disk under ``tmp_path``: a root ``package.json``
declaring ``workspaces: ["packages/*"]`` and one directory per package.
The ``chain_repo`` fixture is the canonical three-package chain::

    pkg1 -> pkg2 (private) -> pkg3
"""

from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path
from typing import Any, Callable

import pytest


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))


@pytest.fixture
def write_json() -> Callable[[Path, Any], None]:
    """Write a JSON document, creating parent directories."""
    return _write_json


@pytest.fixture
def make_monorepo(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating a workspace monorepo.

    Call with ``{name: manifest_overrides}``; each package is written to
    ``packages/<name>/package.json`` with ``name`` and ``version`` filled in.
    """

    def _make(
        packages: dict[str, dict[str, Any]],
        workspaces: Any = ("packages/*",),
        root: Path | None = None,
    ) -> Path:
        repo = root or tmp_path / "monorepo"
        repo.mkdir(parents=True, exist_ok=True)
        root_manifest: dict[str, Any] = {"name": "monorepo-root", "version": "1.0.0", "private": True}
        if workspaces is not None:
            root_manifest["workspaces"] = (
                list(workspaces) if isinstance(workspaces, tuple) else workspaces
            )
        _write_json(repo / "package.json", root_manifest)
        for name, overrides in packages.items():
            manifest = {"name": name, "version": "0.1.0", **overrides}
            _write_json(repo / "packages" / name / "package.json", manifest)
        return repo

    return _make


@pytest.fixture
def chain_repo(make_monorepo: Callable[..., Path]) -> Path:
    """pkg1 depends on pkg2 (private), which depends on pkg3."""
    return make_monorepo({
        "pkg1": {"dependencies": {"pkg2": "0.1.0"}},
        "pkg2": {"dependencies": {"pkg3": "0.1.0"}, "private": True},
        "pkg3": {},
    })


@pytest.fixture
def run_git() -> Callable[..., str]:
    """Run a git command in a directory and return its stdout."""

    def _run(repo: Path, *args: str) -> str:
        proc = subprocess.run(
            ["git", *args], cwd=repo, capture_output=True, text=True, check=True
        )
        return proc.stdout

    return _run


@pytest.fixture
def git_available() -> None:
    """Skip the test when the git executable is not installed."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")


@pytest.fixture
def git_chain_repo(
    chain_repo: Path, run_git: Callable[..., str], git_available: None
) -> Path:
    """``chain_repo`` as a git repository with everything committed."""
    run_git(chain_repo, "init", "--quiet")
    run_git(chain_repo, "config", "--local", "user.name", "user")
    run_git(chain_repo, "config", "--local", "user.email", "user@example.com")
    run_git(chain_repo, "config", "--local", "commit.gpgsign", "false")
    run_git(chain_repo, "checkout", "--quiet", "-b", "main")
    run_git(chain_repo, "add", ".")
    run_git(chain_repo, "commit", "--quiet", "-m", "init")
    return chain_repo
