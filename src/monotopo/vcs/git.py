"""Git query interface used by the change detector.

Thin wrapper around the ``git`` executable. Every query runs ``git`` as a
subprocess in the given directory and returns repository-relative paths
(relative to the top level of the working tree), parsed from ``-z``
NUL-separated output so unusual file names survive intact.

All queries are read-only: nothing here touches the index, the working
tree or any ref.

Usage::

    client = GitClient()
    client.diff_tree_to_tree(repo, "HEAD~1", "HEAD")
    client.diff_tree_to_index(repo, "HEAD")
    client.list_untracked_files(repo)
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from monotopo.exceptions import InvalidReferenceError, VcsUnavailableError

logger = logging.getLogger(__name__)

GIT_EXECUTABLE = "git"


def _split_nul(output: str) -> list[str]:
    """Split ``-z`` output into non-empty entries."""
    return [entry for entry in output.split("\0") if entry]


class GitClient:
    """Run read-only git queries against a working tree.

    Args:
        executable: Name or path of the git binary.
        timeout: Per-command timeout in seconds. None waits indefinitely.
    """

    def __init__(self, executable: str = GIT_EXECUTABLE, timeout: float | None = None) -> None:
        self.executable = executable
        self.timeout = timeout

    def _run(self, repo_path: Path | str, *args: str) -> subprocess.CompletedProcess[str]:
        # Read-only queries must not refresh and rewrite the index.
        cmd = [self.executable, "--no-optional-locks", *args]
        logger.debug("Running %s in %s", " ".join(cmd), repo_path)
        try:
            return subprocess.run(
                cmd,
                cwd=repo_path,
                capture_output=True,
                encoding="utf-8",
                errors="surrogateescape",
                check=False,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise VcsUnavailableError(
                f"Cannot run {self.executable!r}: {exc.strerror or exc}"
            ) from exc
        except NotADirectoryError as exc:
            raise VcsUnavailableError(f"{repo_path} is not a directory") from exc
        except subprocess.TimeoutExpired as exc:
            raise VcsUnavailableError(
                f"{' '.join(cmd)} timed out after {self.timeout}s"
            ) from exc

    def _query(self, repo_path: Path | str, *args: str) -> list[str]:
        """Run a listing command and return its NUL-separated entries."""
        proc = self._run(repo_path, *args)
        if proc.returncode != 0:
            raise VcsUnavailableError(
                f"git {' '.join(args)} failed in {repo_path}: {proc.stderr.strip()}"
            )
        return _split_nul(proc.stdout)

    def toplevel(self, repo_path: Path | str) -> Path:
        """Return the absolute top-level directory of the working tree.

        Raises:
            VcsUnavailableError: If *repo_path* is not inside a git work tree.
        """
        proc = self._run(repo_path, "rev-parse", "--show-toplevel")
        if proc.returncode != 0:
            raise VcsUnavailableError(
                f"{repo_path} is not inside a git working tree: {proc.stderr.strip()}"
            )
        return Path(proc.stdout.strip()).resolve()

    def resolve_ref(self, repo_path: Path | str, ref: str) -> str:
        """Resolve *ref* to a full commit hash.

        Raises:
            InvalidReferenceError: If *ref* does not name a commit.
        """
        if not ref or ref.startswith("-"):
            raise InvalidReferenceError(ref, "not a valid revision")
        proc = self._run(repo_path, "rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}")
        if proc.returncode != 0:
            raise InvalidReferenceError(ref, "no such commit")
        return proc.stdout.strip()

    def diff_tree_to_tree(self, repo_path: Path | str, from_ref: str, to_ref: str) -> list[str]:
        """Files that differ between two commits."""
        from_commit = self.resolve_ref(repo_path, from_ref)
        to_commit = self.resolve_ref(repo_path, to_ref)
        return self._query(
            repo_path, "diff", "--name-only", "--no-renames", "-z", from_commit, to_commit
        )

    def diff_tree_to_index(self, repo_path: Path | str, ref: str) -> list[str]:
        """Files that differ between a commit and the index (staged changes)."""
        commit = self.resolve_ref(repo_path, ref)
        return self._query(
            repo_path, "diff", "--cached", "--name-only", "--no-renames", "-z", commit
        )

    def diff_index_to_workdir(self, repo_path: Path | str) -> list[str]:
        """Tracked files modified in the working tree but not staged."""
        return self._query(repo_path, "diff", "--name-only", "--no-renames", "-z")

    def list_untracked_files(self, repo_path: Path | str) -> list[str]:
        """Files present in the working tree, neither tracked nor ignored."""
        return self._query(
            repo_path, "ls-files", "--others", "--exclude-standard", "--full-name", "-z"
        )
