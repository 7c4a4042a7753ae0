"""Issue store adapter over the `bd` (beads) CLI.

Only the two calls the merge queue needs are wrapped: `show` and `create`.
Both ask `bd` for JSON output and validate it into `Issue`.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)

MERGE_REQUEST_TYPE = "merge-request"
EPIC_TYPE = "epic"
PARENT_CHILD_DEPENDENCY = "parent-child"


class BeadsError(RuntimeError):
    """A `bd` command failed or returned output we can't read."""


class IssueNotFound(BeadsError):
    def __init__(self, issue_id: str) -> None:
        super().__init__(f"issue not found: {issue_id}")
        self.issue_id = issue_id


class Issue(BaseModel):
    """An issue as reported by `bd ... --json`."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    title: str = Field(default="")
    issue_type: str = Field(default="task")
    priority: int = Field(default=2, ge=0, le=4)
    description: str = Field(default="")
    status: str = Field(default="open")
    parent: str | None = Field(default=None)

    @model_validator(mode="before")
    @classmethod
    def _normalise(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # Older bd releases report the type under "type".
        if "issue_type" not in data and "type" in data:
            data["issue_type"] = data["type"]
        if not data.get("parent"):
            data["parent"] = _parent_from_dependencies(data)
        return data


def _parent_from_dependencies(data: dict[str, Any]) -> str | None:
    deps = data.get("dependencies")
    if not isinstance(deps, list):
        return None
    for dep in deps:
        if not isinstance(dep, dict):
            continue
        dep_type = dep.get("dependency_type") or dep.get("type")
        if dep_type != PARENT_CHILD_DEPENDENCY:
            continue
        parent = dep.get("depends_on_id") or dep.get("id")
        if isinstance(parent, str) and parent:
            return parent
    return None


@dataclass(frozen=True, slots=True)
class CreateOptions:
    title: str
    issue_type: str
    priority: int
    description: str = ""


class BeadsClient:
    """Runs `bd` in a working directory (bd discovers its database from there)."""

    def __init__(self, cwd: Path, *, command: str = "bd") -> None:
        self._cwd = cwd
        self._command = command

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        cmd = [self._command, *args, "--json"]
        try:
            return subprocess.run(cmd, cwd=self._cwd, capture_output=True, text=True)
        except OSError as e:
            raise BeadsError(f"running {self._command} {args[0]}: {e}") from e

    @staticmethod
    def _decode(stdout: str) -> Any:
        try:
            return json.loads(stdout)
        except ValueError as e:
            raise BeadsError(f"unreadable bd output: {stdout[:200]!r}") from e

    @staticmethod
    def _to_issue(raw: Any) -> Issue:
        try:
            return Issue.model_validate(raw)
        except ValidationError as e:
            raise BeadsError(f"unexpected issue shape: {e}") from e

    def show(self, issue_id: str) -> Issue:
        """Fetch one issue.

        Raises:
            IssueNotFound: if bd doesn't know the id.
            BeadsError: on any other failure.
        """

        result = self._run("show", issue_id)
        if result.returncode != 0:
            stderr = result.stderr.strip()
            if "not found" in stderr.lower() or "no issue" in stderr.lower():
                raise IssueNotFound(issue_id)
            raise BeadsError(f"bd show {issue_id}: {stderr or 'failed'}")

        data = self._decode(result.stdout)
        if isinstance(data, list):
            if not data:
                raise IssueNotFound(issue_id)
            data = data[0]
        return self._to_issue(data)

    def create(self, opts: CreateOptions) -> Issue:
        """Create an issue and return it as stored."""

        result = self._run(
            "create",
            "--title",
            opts.title,
            "--type",
            opts.issue_type,
            "--priority",
            str(opts.priority),
            "--description",
            opts.description,
        )
        if result.returncode != 0:
            raise BeadsError(f"bd create {opts.title!r}: {result.stderr.strip() or 'failed'}")

        data = self._decode(result.stdout)
        if isinstance(data, list):
            if not data:
                raise BeadsError(f"bd create {opts.title!r}: empty response")
            data = data[0]
        issue = self._to_issue(data)
        logger.info(
            "Issue created",
            extra={"issue_id": issue.id, "issue_type": issue.issue_type, "title": issue.title},
        )
        return issue
