"""Pick the merge target for an issue.

Work on an issue that belongs to an epic merges into the epic's integration
branch (`integration/<epic-id>`) when that branch exists; everything else
merges into trunk. The grouping is optional metadata that may be missing or
stale, so any doubt resolves to "not found" rather than an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from agent_fleet.orchestrator.beads.client import EPIC_TYPE, Issue

logger = logging.getLogger(__name__)

DEFAULT_INTEGRATION_PREFIX = "integration/"
DEFAULT_MAX_DEPTH = 5


class IssueLookup(Protocol):
    def show(self, issue_id: str) -> Issue: ...


class BranchLookup(Protocol):
    def branch_exists(self, name: str) -> bool: ...


@dataclass(frozen=True, slots=True)
class TargetResolution:
    target: str = ""
    found: bool = False


NOT_FOUND = TargetResolution()


def _find_epic(store: IssueLookup, issue_id: str, max_depth: int) -> Issue | None:
    seen = {issue_id}
    issue = store.show(issue_id)
    for _ in range(max_depth):
        parent_id = issue.parent
        if not parent_id or parent_id in seen:
            return None
        seen.add(parent_id)
        issue = store.show(parent_id)
        if issue.issue_type == EPIC_TYPE:
            return issue
    return None


def resolve_integration_target(
    store: IssueLookup,
    vcs: BranchLookup,
    issue_id: str,
    *,
    branch_prefix: str = DEFAULT_INTEGRATION_PREFIX,
    trunk: str = "main",
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> TargetResolution:
    """Return the integration branch for `issue_id`, if it has one.

    Never raises: store or git failures, missing parents, cycles and deep
    hierarchies all produce `found=False`.
    """

    try:
        epic = _find_epic(store, issue_id, max_depth)
        if epic is None:
            return NOT_FOUND

        candidate = f"{branch_prefix}{epic.id}"
        if candidate == trunk or not vcs.branch_exists(candidate):
            logger.debug(
                "Epic has no integration branch",
                extra={"issue_id": issue_id, "epic_id": epic.id, "branch": candidate},
            )
            return NOT_FOUND
    except Exception as e:  # noqa: BLE001 - optional lookup, any failure means trunk
        logger.info(
            "Integration branch detection failed; using trunk",
            extra={"issue_id": issue_id, "error": str(e)},
        )
        return NOT_FOUND

    return TargetResolution(target=candidate, found=True)
