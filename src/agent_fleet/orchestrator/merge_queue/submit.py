"""Submit a branch to the merge queue.

A submission is one new `merge-request` issue whose description carries the
`MergeRequestFields`. The refinery reads those fields back to know what to
merge where.

Required inputs (a non-trunk branch, a source issue id, a successful create)
fail the submission. Optional enrichment (integration target, inherited
priority) falls back to defaults.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from agent_fleet.orchestrator.beads.client import MERGE_REQUEST_TYPE, CreateOptions, Issue
from agent_fleet.orchestrator.config import FleetSettings
from agent_fleet.orchestrator.errors import (
    InvalidBranchError,
    InvalidPriorityError,
    MissingSourceIssueError,
    SubmissionError,
)
from agent_fleet.orchestrator.merge_queue.branch import parse_branch_name
from agent_fleet.orchestrator.merge_queue.fields import MergeRequestFields, format_mr_fields
from agent_fleet.orchestrator.merge_queue.target import (
    BranchLookup,
    IssueLookup,
    resolve_integration_target,
)

logger = logging.getLogger(__name__)

TRUNK_BRANCHES = frozenset({"main", "master"})
MIN_PRIORITY = 0
MAX_PRIORITY = 4


class IssueStore(Protocol):
    def show(self, issue_id: str) -> Issue: ...

    def create(self, opts: CreateOptions) -> Issue: ...


@dataclass(frozen=True, slots=True)
class MergeRequestDraft:
    """A composed merge request that has not been created yet."""

    fields: MergeRequestFields
    priority: int

    def to_create_options(self) -> CreateOptions:
        return CreateOptions(
            title=merge_request_title(self.fields.source_issue),
            issue_type=MERGE_REQUEST_TYPE,
            priority=self.priority,
            description=format_mr_fields(self.fields),
        )


@dataclass(frozen=True, slots=True)
class SubmittedMergeRequest:
    issue: Issue
    fields: MergeRequestFields
    priority: int


def merge_request_title(issue_id: str) -> str:
    return f"Merge: {issue_id}"


class _IssueCache:
    """Remembers successful `show` results for the length of one submission."""

    def __init__(self, store: IssueStore) -> None:
        self._store = store
        self._issues: dict[str, Issue] = {}

    def show(self, issue_id: str) -> Issue:
        if issue_id not in self._issues:
            self._issues[issue_id] = self._store.show(issue_id)
        return self._issues[issue_id]


class MergeQueueService:
    """Turns a branch into a merge-request issue."""

    def __init__(
        self,
        *,
        store: IssueStore,
        vcs: BranchLookup,
        settings: FleetSettings | None = None,
    ) -> None:
        self._store = store
        self._vcs = vcs
        self._settings = settings or FleetSettings()

    @property
    def trunk(self) -> str:
        return self._settings.trunk_branch

    def _inherit_priority(self, issues: IssueLookup, issue_id: str) -> int:
        try:
            return issues.show(issue_id).priority
        except Exception as e:  # noqa: BLE001 - priority is best-effort
            logger.info(
                "Source issue unavailable; using default priority",
                extra={
                    "issue_id": issue_id,
                    "priority": self._settings.default_priority,
                    "error": str(e),
                },
            )
            return self._settings.default_priority

    def compose(
        self,
        branch: str,
        *,
        issue_id: str | None = None,
        priority: int | None = None,
        rig: str = "",
    ) -> MergeRequestDraft:
        """Validate `branch` and work out what its merge request would carry.

        Reads from the issue store and git but creates nothing. Arguments and
        errors are those of `submit`, minus `SubmissionError`.
        """

        if branch in TRUNK_BRANCHES or branch == self.trunk:
            raise InvalidBranchError(branch=branch)

        if priority is not None and not MIN_PRIORITY <= priority <= MAX_PRIORITY:
            raise InvalidPriorityError(priority=priority)

        info = parse_branch_name(branch, issue_prefixes=self._settings.issue_prefix_list)
        source_issue = issue_id or info.issue
        if not source_issue:
            raise MissingSourceIssueError(branch=branch)

        issues = _IssueCache(self._store)
        resolution = resolve_integration_target(
            issues,
            self._vcs,
            source_issue,
            branch_prefix=self._settings.integration_branch_prefix,
            trunk=self.trunk,
        )
        target = resolution.target if resolution.found else self.trunk

        if priority is not None:
            resolved_priority = priority
        else:
            resolved_priority = self._inherit_priority(issues, source_issue)

        fields = MergeRequestFields(
            branch=branch,
            target=target,
            source_issue=source_issue,
            worker=info.worker,
            rig=rig,
        )
        return MergeRequestDraft(fields=fields, priority=resolved_priority)

    def submit(
        self,
        branch: str,
        *,
        issue_id: str | None = None,
        priority: int | None = None,
        rig: str = "",
    ) -> SubmittedMergeRequest:
        """Create the merge-request issue for `branch`.

        Args:
            branch: The branch to merge.
            issue_id: Source issue; overrides whatever the branch name encodes.
            priority: 0-4; overrides the source issue's priority.
            rig: Rig the branch belongs to, recorded for the refinery.

        Raises:
            InvalidBranchError: `branch` is a trunk branch.
            MissingSourceIssueError: no issue id given or parseable.
            InvalidPriorityError: `priority` is outside 0-4.
            SubmissionError: the issue store rejected the create.
        """

        draft = self.compose(branch, issue_id=issue_id, priority=priority, rig=rig)
        source_issue = draft.fields.source_issue

        try:
            created = self._store.create(draft.to_create_options())
        except Exception as e:
            logger.warning(
                "Merge request creation failed",
                extra={"issue_id": source_issue, "branch": branch},
            )
            raise SubmissionError(issue_id=source_issue, branch=branch, reason=str(e)) from e

        logger.info(
            "Merge request submitted",
            extra={
                "mr_id": created.id,
                "branch": branch,
                "target": draft.fields.target,
                "issue_id": source_issue,
                "priority": draft.priority,
            },
        )
        return SubmittedMergeRequest(issue=created, fields=draft.fields, priority=draft.priority)
