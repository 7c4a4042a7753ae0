"""Git adapter.

Each method maps to a single read-only `git` invocation in the working
directory the client was created for.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class GitError(RuntimeError):
    """A git command failed or returned something unusable."""


class GitClient:
    """Small wrapper around the `git` CLI for the queries fleet commands need."""

    def __init__(self, cwd: Path, *, remote: str = "origin") -> None:
        self._cwd = cwd
        self._remote = remote

    @property
    def cwd(self) -> Path:
        return self._cwd

    def _git(self, *args: str) -> subprocess.CompletedProcess[str]:
        try:
            return subprocess.run(
                ["git", *args],
                cwd=self._cwd,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise GitError(f"running git {' '.join(args)}: {e}") from e

    def current_branch(self) -> str:
        """Return the checked-out branch name.

        Raises:
            GitError: if git fails or HEAD is detached.
        """

        result = self._git("rev-parse", "--abbrev-ref", "HEAD")
        if result.returncode != 0:
            raise GitError(result.stderr.strip() or "git rev-parse failed")
        branch = result.stdout.strip()
        if not branch or branch == "HEAD":
            raise GitError("HEAD is detached; check out a branch first")
        return branch

    def branch_exists(self, name: str) -> bool:
        """True if `name` exists locally or as a remote-tracking branch."""

        for ref in (f"refs/heads/{name}", f"refs/remotes/{self._remote}/{name}"):
            result = self._git("show-ref", "--verify", "--quiet", ref)
            if result.returncode == 0:
                return True
        logger.debug("Branch not found", extra={"branch": name, "cwd": str(self._cwd)})
        return False
