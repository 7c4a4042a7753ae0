"""Errors surfaced by fleet commands.

Every error here names the offending input (path, branch, issue id or session)
so the CLI can print it as-is.

Adapter-level failures (git, bd, tmux) have their own exception types in the
adapter modules; they are either swallowed by optional lookups or wrapped into
one of these by the step that required them.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class FleetError(Exception):
    """Base class for errors that should fail a CLI invocation."""


@dataclass(frozen=True, slots=True)
class NotInWorkspace(FleetError):
    """Raised when no workspace root exists at or above the start directory."""

    start: Path

    def __str__(self) -> str:
        return f"not in a fleet workspace (searched upwards from {self.start})"


@dataclass(frozen=True, slots=True)
class CurrentBranchError(FleetError):
    """Raised when the branch to submit can't be read from git.

    The underlying git failure is attached as ``__cause__``.
    """

    directory: Path
    reason: str

    def __str__(self) -> str:
        return f"getting current branch in {self.directory}: {self.reason}"


@dataclass(frozen=True, slots=True)
class InvalidBranchError(FleetError):
    """Raised when a trunk branch is submitted to the merge queue."""

    branch: str

    def __str__(self) -> str:
        return f"cannot submit trunk branch {self.branch!r} to the merge queue"


@dataclass(frozen=True, slots=True)
class MissingSourceIssueError(FleetError):
    """Raised when the source issue can't be parsed from the branch and wasn't given."""

    branch: str

    def __str__(self) -> str:
        return (
            f"cannot determine source issue from branch {self.branch!r}; "
            "use --issue to specify"
        )


@dataclass(frozen=True, slots=True)
class InvalidPriorityError(FleetError):
    priority: int

    def __str__(self) -> str:
        return f"priority must be between 0 and 4, got {self.priority}"


@dataclass(frozen=True, slots=True)
class SubmissionError(FleetError):
    """Raised when the merge-request issue could not be created.

    The underlying store failure is attached as ``__cause__``.
    """

    issue_id: str
    branch: str
    reason: str

    def __str__(self) -> str:
        return (
            f"creating merge request for {self.issue_id} (branch {self.branch!r}): "
            f"{self.reason}"
        )


@dataclass(frozen=True, slots=True)
class StartupError(FleetError):
    """Raised when a supervisory session fails to start."""

    session: str
    cause: Exception

    def __str__(self) -> str:
        return f"starting {self.session}: {self.cause}"
