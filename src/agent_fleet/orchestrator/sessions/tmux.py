"""tmux adapter for supervisory sessions.

Sessions are created detached so `start-fleet` never steals the caller's
terminal; attach later with `tmux attach -t <session>`.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


class TmuxError(RuntimeError):
    """A tmux command failed."""


@dataclass(frozen=True, slots=True)
class LaunchSpec:
    """Everything needed to bring one session up."""

    session: str
    working_dir: Path
    command: str
    env: dict[str, str] = field(default_factory=dict)


class TmuxClient:
    """Minimal wrapper around the `tmux` CLI."""

    def __init__(self, *, executable: str = "tmux") -> None:
        self._executable = executable

    def _tmux(self, *args: str) -> subprocess.CompletedProcess[str]:
        try:
            return subprocess.run(
                [self._executable, *args], capture_output=True, text=True
            )
        except OSError as e:
            raise TmuxError(f"running tmux {args[0]}: {e}") from e

    def _check(self, *args: str) -> None:
        result = self._tmux(*args)
        if result.returncode != 0:
            raise TmuxError(f"tmux {' '.join(args)}: {result.stderr.strip() or 'failed'}")

    def has_session(self, name: str) -> bool:
        """True if a session called exactly `name` exists.

        A missing tmux server is reported by tmux as a non-zero exit and is
        therefore "no session", not an error.
        """

        # "=" forces an exact match; plain -t would prefix-match "gt-mayor" to "gt-mayor-2".
        result = self._tmux("has-session", "-t", f"={name}")
        return result.returncode == 0

    def start_session(self, spec: LaunchSpec) -> None:
        """Create a detached session and launch `spec.command` in it.

        If anything after session creation fails, the half-made session is
        killed so a rerun starts from scratch.
        """

        spec.working_dir.mkdir(parents=True, exist_ok=True)
        env_args: list[str] = []
        for key, value in spec.env.items():
            env_args.extend(["-e", f"{key}={value}"])
        self._check(
            "new-session", "-d", "-s", spec.session, "-c", str(spec.working_dir), *env_args
        )

        try:
            self._check("send-keys", "-t", spec.session, spec.command, "Enter")
        except TmuxError:
            logger.warning(
                "Session setup failed; killing partial session",
                extra={"session": spec.session},
            )
            self._tmux("kill-session", "-t", f"={spec.session}")
            raise

        logger.info(
            "Session started",
            extra={"session": spec.session, "working_dir": str(spec.working_dir)},
        )
